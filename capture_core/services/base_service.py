# =============================================================================
# capture_core/services/base_service.py
# Service Results and the Exception-to-Result Boundary
# =============================================================================
"""
Service methods never raise. Whatever the store, the resolver or the remote
client throws is classified once, here, into a ServiceResult:

    ValidationError       FORM_001   missing_labels set, logged at INFO
    StorageError          STORE_002  retryable
    ConnectivityError     NET_001    retryable
    RemoteError (5xx)     NET_002    retryable
    AuthenticationError   NET_003    needs_login
    other CaptureError    own code   not retryable
    anything else         EXCEPTION  logged with traceback
"""

from __future__ import annotations
import time
from abc import ABC
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from capture_core.logging import get_logger
from capture_core.errors import (
    AuthenticationError,
    CaptureError,
    ConnectivityError,
    RemoteError,
    StorageError,
    ValidationError,
    handle_error,
)


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, (StorageError, ConnectivityError)):
        return True
    if isinstance(error, AuthenticationError):
        return False
    if isinstance(error, RemoteError):
        return error.status_code is not None and error.status_code >= 500
    return False


@dataclass
class ServiceResult:
    """What a service call did: data on success, a classified error otherwise."""
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    retryable: bool = False

    def __bool__(self) -> bool:
        return self.success

    @property
    def missing_labels(self) -> List[str]:
        """Labels a rejected submission still needs; empty otherwise."""
        return list(self.metadata.get("missing_labels", []))

    @property
    def needs_login(self) -> bool:
        return self.error_code == "NET_003"

    @classmethod
    def ok(cls, data: Any = None, **metadata: Any) -> ServiceResult:
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def from_exception(cls, e: Exception) -> ServiceResult:
        if isinstance(e, CaptureError):
            return cls(
                success=False,
                error=e.message,
                error_code=e.code,
                metadata=dict(e.details),
                retryable=_is_retryable(e),
            )
        return cls(success=False, error=str(e), error_code="EXCEPTION")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "error_code": self.error_code,
            "retryable": self.retryable,
            "metadata": dict(self.metadata),
        }


class BaseService(ABC):
    """
    Shared plumbing for CaptureService and AdminService.

    Subclasses call safe_execute() for anything that touches storage or the
    network. Errors listed in `expected_errors` describe bad input rather
    than a fault, so they are logged at INFO instead of going through
    handle_error().

    Usage:
        class MemberService(BaseService):
            def save(self, values) -> ServiceResult:
                return self.safe_execute("Saving member", self._save, values)
    """

    expected_errors: Tuple[Type[CaptureError], ...] = (ValidationError,)

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def safe_execute(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> ServiceResult:
        """
        Run func and wrap its return value (or its exception) in a ServiceResult.

        A func that already returns a ServiceResult is passed through as is.
        """
        started = time.time()
        self.logger.debug(f"{operation}... started")
        try:
            value = func(*args, **kwargs)
        except self.expected_errors as e:
            self.logger.info(f"{operation}... rejected: {e.message}")
            return ServiceResult.from_exception(e)
        except CaptureError as e:
            handle_error(e)
            result = ServiceResult.from_exception(e)
            if result.retryable:
                self.logger.warning(f"{operation}... will be retried later ({e.code})")
            return result
        except Exception as e:
            self.logger.error(f"{operation}... failed: {e}", exc_info=True)
            return ServiceResult.from_exception(e)

        self.logger.info(f"{operation}... completed ({time.time() - started:.2f}s)")
        return value if isinstance(value, ServiceResult) else ServiceResult.ok(value)
