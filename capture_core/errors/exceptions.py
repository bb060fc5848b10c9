# =============================================================================
# capture_core/errors/exceptions.py
# Custom Exception Hierarchy for the capture engine
# =============================================================================

from typing import Optional, Dict, Any, List, Sequence


class CaptureError(Exception):
    """
    Base exception for all capture engine errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "STORE_002")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "CAP_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# STORAGE EXCEPTIONS
# =============================================================================

class NotInitializedError(CaptureError):
    """Raised when the local store is used before initialize() completed"""

    def __init__(self, message: str = "Local database not initialized. Call initialize() first.", **kwargs):
        super().__init__(
            message=message,
            code="STORE_001",
            recoverable=False,
            **kwargs,
        )


class StorageError(CaptureError):
    """Raised when the underlying local storage fails"""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="STORE_002",
            details=details,
            **kwargs,
        )


# =============================================================================
# REMOTE SERVICE EXCEPTIONS
# =============================================================================

class ConnectivityError(CaptureError):
    """Raised when the remote service cannot be reached or times out"""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint

        super().__init__(
            message=message,
            code=kwargs.pop("code", "NET_001"),
            details=details,
            **kwargs,
        )


class RemoteError(CaptureError):
    """Raised when the remote service answers with a non-2xx status or a bad body"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if status_code is not None:
            details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        self.status_code = status_code

        super().__init__(
            message=message,
            code=kwargs.pop("code", "NET_002"),
            details=details,
            **kwargs,
        )


class AuthenticationError(RemoteError):
    """Raised when an authenticated call has no usable credential"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, code="NET_003", **kwargs)


# =============================================================================
# SCHEMA / FORM EXCEPTIONS
# =============================================================================

class SchemaFormatError(CaptureError):
    """Raised when a schema payload cannot be parsed into field definitions"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            code="SCHEMA_001",
            details=details,
            **kwargs,
        )


class ValidationError(CaptureError):
    """Raised when a submission is missing visible required fields"""

    def __init__(self, missing_labels: Sequence[str], **kwargs):
        self.missing_labels: List[str] = list(missing_labels)
        details = kwargs.pop("details", {})
        details["missing_labels"] = self.missing_labels

        super().__init__(
            message=f"Please fill in: {', '.join(self.missing_labels)}",
            code="FORM_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(CaptureError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
