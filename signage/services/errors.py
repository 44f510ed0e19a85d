class SignageError(Exception):
    status_code = 500
    default_code: str | None = None

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(SignageError):
    status_code = 400
    default_code = "VALIDATION_ERROR"


class UnauthorizedError(SignageError):
    status_code = 401
    default_code = "UNAUTHORIZED"


class ForbiddenError(SignageError):
    status_code = 403
    default_code = "FORBIDDEN"


class NotFoundError(SignageError):
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(SignageError):
    status_code = 409
    default_code = "CONFLICT"
