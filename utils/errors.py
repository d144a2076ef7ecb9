"""
utils/errors.py

Domain errors raised by services. middlewares/error_handler.py turns them into
the standard JSON error body, so routers never build error responses by hand.
"""


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    """Student, course, grade or other row does not exist."""
    status_code = 404
    code = "NOT_FOUND"


class UnauthorizedError(AppError):
    """Role or ownership mismatch, or an action not allowed in the current workflow state."""
    status_code = 403
    code = "UNAUTHORIZED"


class InvalidInputError(AppError):
    status_code = 400
    code = "INVALID_INPUT"


class ConflictError(AppError):
    """Duplicate master data or an occupied timetable slot."""
    status_code = 409
    code = "CONFLICT"
