from typing import Optional, Any


class MrcsError(Exception):
    """
    Base exception for the MRCS backend.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(MrcsError):
    """
    Raised when an account or session does not exist or is soft-deleted.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class AuthenticationError(MrcsError):
    """
    Raised when bearer authentication fails.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class AccountDeletedError(MrcsError):
    def __init__(self, message: str = "Account Deleted", details: Optional[Any] = None):
        super().__init__(message, code="ACCOUNT_DELETED", status_code=410, details=details)


class ExternalServiceError(MrcsError):
    """
    Raised when an external service (e.g. the SMTP relay) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)


class DuplicateEmailError(MrcsError):
    """
    Raised when signing up with an email that already has an account.
    """
    def __init__(self, message: str = "Email already registered", details: Optional[Any] = None):
        super().__init__(message, code="DUPLICATE_EMAIL", status_code=409, details=details)


class InvalidTokenError(MrcsError):
    """
    Raised when a token has a bad signature, is expired, has the wrong
    purpose/type or names a different subject.
    """
    def __init__(self, message: str = "Invalid token", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_TOKEN", status_code=400, details=details)


class InvalidCredentialsError(MrcsError):
    def __init__(self, message: str = "Invalid credentials", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_CREDENTIALS", status_code=401, details=details)


class ProfileIncompleteError(MrcsError):
    """
    Raised when logging in before a password has been set.
    """
    def __init__(self, message: str = "Profile is not completed", details: Optional[Any] = None):
        super().__init__(message, code="PROFILE_INCOMPLETE", status_code=403, details=details)


class EmailNotVerifiedError(MrcsError):
    def __init__(self, message: str = "Email is not verified", details: Optional[Any] = None):
        super().__init__(message, code="EMAIL_NOT_VERIFIED", status_code=403, details=details)


class AlreadyVerifiedError(MrcsError):
    def __init__(self, message: str = "Email is already verified", details: Optional[Any] = None):
        super().__init__(message, code="ALREADY_VERIFIED", status_code=409, details=details)


class AlreadyCompletedError(MrcsError):
    def __init__(self, message: str = "Profile is already completed", details: Optional[Any] = None):
        super().__init__(message, code="ALREADY_COMPLETED", status_code=409, details=details)


class ForbiddenError(MrcsError):
    """
    Raised when the caller may not act on the addressed resource.
    """
    def __init__(self, message: str = "Forbidden", details: Optional[Any] = None):
        super().__init__(message, code="FORBIDDEN", status_code=403, details=details)


class SessionConflictError(MrcsError):
    """
    Raised when a student already has an active session on another device.
    """
    def __init__(self, message: str = "Active session exists on another device", details: Optional[Any] = None):
        super().__init__(message, code="SESSION_CONFLICT", status_code=409, details=details)
