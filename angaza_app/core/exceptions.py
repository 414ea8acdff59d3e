"""Typed request outcomes raised by services and rendered by the app handlers."""


class AppError(Exception):
    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.error
        super().__init__(self.message)

    def __repr__(self):
        return f"{type(self).__name__}({self.status_code}, {self.message!r})"


class Unauthenticated(AppError):
    status_code = 401
    error = "Unauthenticated"


class Forbidden(AppError):
    status_code = 403
    error = "Forbidden"


class NotFound(AppError):
    status_code = 404
    error = "Not Found"


class Conflict(AppError):
    status_code = 409
    error = "Conflict"


class ValidationFailed(AppError):
    status_code = 422
    error = "Validation failed"


class InternalError(AppError):
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str | None = None, trace: str | None = None):
        super().__init__(message)
        self.trace = trace


class UnhandledRole(InternalError):
    """Raised when a scoping rule meets a role it has no branch for."""

    def __init__(self, role):
        super().__init__(f"No access rule defined for role {role!r}.")
        self.role = role
