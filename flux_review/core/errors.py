"""Service error taxonomy.

Every error raised below the HTTP layer derives from ``ServiceError`` and
carries the status code the global exception handler responds with.
"""


class ServiceError(Exception):
    status_code = 500
    public_message = "Server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(ServiceError):
    status_code = 400
    public_message = "Invalid request"


class ReviewerNotAllowedError(ServiceError):
    status_code = 403
    public_message = "Reviewer is not on the allowed list"


class NotFoundError(ServiceError):
    status_code = 404
    public_message = "Not found"


class DuplicateRatingError(ServiceError):
    status_code = 409
    public_message = "Reviewer has already scored this candidate"


class StorageError(ServiceError):
    """Database failure; the cause is logged, never returned to callers."""


class DirectoryError(ServiceError):
    """The candidate directory could not be loaded."""


class StartupError(RuntimeError):
    """Raised when the service cannot start (database down, no free port)."""
