from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationError(AppException):
    """Malformed input: bad enum value, inverted date range, missing field."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )

class NotFoundError(AppException):
    def __init__(self, message: str = "Record not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class ForbiddenError(AppException):
    """Actor lacks permission: wrong owner, self-approval, non-admin reviewer."""
    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN"
        )

class InvalidStateError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="INVALID_STATE",
            details=details
        )

class LimitExceededError(AppException):
    def __init__(self, max_submissions: int):
        super().__init__(
            message=f"Maximum submission limit ({max_submissions}) reached. Please contact HR.",
            status_code=409,
            error_code="SUBMISSION_LIMIT_EXCEEDED",
            details={"max_submissions": max_submissions}
        )

class ConcurrentUpdateError(AppException):
    def __init__(self, message: str = "Record was modified by another operation. Reload and retry."):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONCURRENT_UPDATE"
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class DeliveryError(AppException):
    """An email the caller explicitly asked for could not be sent."""
    def __init__(self, message: str = "Email could not be delivered"):
        super().__init__(
            message=message,
            status_code=502,
            error_code="EMAIL_DELIVERY_FAILED"
        )
