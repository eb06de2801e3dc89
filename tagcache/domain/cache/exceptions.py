"""
Cache Domain Exceptions

Exception hierarchy raised by backends and serializers.
The public cache facade catches these and reports failure as a boolean
or a default value; they only surface when a backend is used directly.
"""

from typing import Any, Dict, Optional


class CacheException(Exception):
    """Base exception for cache-related errors.

    Carries a machine readable error code and a details mapping so
    callers can log the failure without parsing the message.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.error_code = error_code or "CACHE_ERROR"
        self.details = details or {}
        if original_error:
            self.details.setdefault("original_error", str(original_error))
            self.details.setdefault(
                "original_error_type", type(original_error).__name__
            )
        super().__init__(self.message)
        if original_error:
            self.__cause__ = original_error


class CacheBackendException(CacheException):
    """Raised when a backend operation fails."""

    def __init__(
        self,
        message: str = "Cache backend operation failed",
        operation: Optional[str] = None,
        key: Optional[str] = None,
        backend: Optional[str] = None,
        original_error: Optional[Exception] = None,
        error_code: str = "CACHE_BACKEND_ERROR",
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if key:
            details["key"] = key
        if backend:
            details["backend"] = backend

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            original_error=original_error,
        )


class CacheSerializationException(CacheException):
    """Raised when a value cannot be converted to or from bytes."""

    def __init__(
        self,
        message: str,
        serializer: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if serializer:
            details["serializer"] = serializer

        super().__init__(
            message=message,
            error_code="CACHE_SERIALIZATION_ERROR",
            details=details,
            original_error=original_error,
        )


class CacheConfigurationException(CacheException):
    """Raised when cache configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)

        super().__init__(
            message=message,
            error_code="CACHE_CONFIGURATION_ERROR",
            details=details,
            original_error=original_error,
        )


class TagUpdateConflictException(CacheBackendException):
    """Raised when a tag record kept changing under a compare-and-swap update."""

    def __init__(self, key: str, attempts: int, backend: Optional[str] = None):
        super().__init__(
            message=f"Tag record {key} changed concurrently {attempts} times",
            operation="update",
            key=key,
            backend=backend,
            error_code="CACHE_TAG_UPDATE_CONFLICT",
        )
        self.details["attempts"] = attempts
