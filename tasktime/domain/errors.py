from __future__ import annotations


class TaskTimeError(Exception):
    """Base for errors that are reported to the caller as-is.

    ``message`` is safe to show to users; ``status_code`` is the HTTP status
    the API layer answers with.
    """

    status_code = 500
    default_message = "Server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskTimeError):
    status_code = 400
    default_message = "Invalid input."


class UnauthenticatedError(TaskTimeError):
    status_code = 401
    default_message = "Authentication required."


class NotFoundError(TaskTimeError):
    status_code = 404
    default_message = "Not found."


class ConflictError(TaskTimeError):
    status_code = 409
    default_message = "Conflict."
