"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception.

    Also used for authenticated admins lacking a permission, which the
    dashboard treats the same as a missing session.
    """

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class SlotUnavailableException(BadRequestException):
    """Raised when a (chamber, date, slot) is already held by an active appointment."""

    def __init__(self, message: str = "Slot is already booked"):
        super().__init__(message)


class InvalidTransitionException(BadRequestException):
    """Raised when an appointment status or payment change is not allowed."""


class ScheduleConflictException(BadRequestException):
    """Raised when a chamber overlaps another active chamber of the same doctor."""

    def __init__(self, message: str = "Time conflict with existing chamber schedule"):
        super().__init__(message)


class RateLimitException(AppException):
    """Rate limit exceeded exception."""

    def __init__(self, message: str = "Rate limit exceeded"):
        """Initialize with 429 status code."""
        super().__init__(message, status_code=429)


class StorageException(AppException):
    """File storage backend failure."""

    def __init__(self, message: str = "Failed to upload file"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)
