"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
The web layer maps them to HTTP statuses; the chat bot turns them into replies.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class AuthorizationError(ApplicationError):
    """Raised when authorization fails."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, code="AUTHZ_FORBIDDEN")


class CategoryAccessError(AuthorizationError):
    """Raised when a user lacks access to a permission category."""

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"No access to {category}")
        self.code = "AUTHZ_CATEGORY_DENIED"


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict") -> None:
        super().__init__(message, code="RES_CONFLICT")


class AlreadyRegisteredError(ConflictError):
    """Raised when a registered chat user tries to pick a role again."""

    def __init__(self, message: str = "User is already registered") -> None:
        super().__init__(message)
        self.code = "USER_ALREADY_REGISTERED"


class DatabaseError(ApplicationError):
    """Raised when a database operation fails."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")
