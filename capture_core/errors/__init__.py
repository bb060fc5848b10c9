# =============================================================================
# capture_core/errors/__init__.py
# Centralized Error Handling for the capture engine
# =============================================================================

from .exceptions import (
    CaptureError,
    NotInitializedError,
    StorageError,
    ConnectivityError,
    RemoteError,
    AuthenticationError,
    SchemaFormatError,
    ValidationError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    safe_execute,
    ErrorContext,
    error_boundary,
)

__all__ = [
    # Exceptions
    "CaptureError",
    "NotInitializedError",
    "StorageError",
    "ConnectivityError",
    "RemoteError",
    "AuthenticationError",
    "SchemaFormatError",
    "ValidationError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "safe_execute",
    "ErrorContext",
    "error_boundary",
]
