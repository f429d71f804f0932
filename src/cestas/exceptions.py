"""
Cestas - Custom Exceptions.

Centralized exception handling with standardized error responses.
"""

from typing import Any


class CestasException(Exception):
    """Base exception for Cestas application."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class UnauthorizedException(CestasException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class NotFoundException(CestasException):
    """Raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: Any, message: str | None = None):
        super().__init__(
            code="NOT_FOUND",
            message=message or f"{resource_type} not found: {resource_id}",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class ConflictException(CestasException):
    """Raised when a write would break a uniqueness rule."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            code="CONFLICT",
            message=message,
            status_code=409,
            details={"field": field} if field else None,
        )


class ValidationException(CestasException):
    """Raised for validation errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details={"errors": errors} if errors else None,
        )


class FeatureDisabledException(CestasException):
    """Raised when a feature flag is disabled."""

    def __init__(self, feature_name: str):
        super().__init__(
            code="FEATURE_DISABLED",
            message=f"Feature '{feature_name}' is currently disabled",
            status_code=503,
            details={"feature": feature_name},
        )


class ExternalServiceException(CestasException):
    """Raised when an external service fails."""

    def __init__(self, service_name: str, message: str):
        super().__init__(
            code="EXTERNAL_SERVICE_ERROR",
            message=f"{service_name} error: {message}",
            status_code=502,
            details={"service": service_name},
        )


class RemoteTimeoutException(CestasException):
    """Raised when a remote call does not answer within the configured timeout."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            code="REMOTE_TIMEOUT",
            message=f"{operation} timed out after {timeout_seconds:g}s",
            status_code=504,
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        )


class OperationFailedException(CestasException):
    """Raised by routers when a table operation returns a failure result."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="OPERATION_FAILED",
            message=message,
            status_code=502,
            details=details,
        )
