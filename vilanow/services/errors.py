"""Exceptions shared by the service layer."""


class ServiceError(Exception):
    """Base class for business-rule failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""


class NotAuthorizedError(ServiceError):
    """Raised when the acting user may not perform the operation."""


class InvalidRequestError(ServiceError):
    """Raised when input does not satisfy the use case rules."""


class ConflictError(ServiceError):
    """Raised when the operation clashes with existing state."""


class ServiceUnavailableError(ServiceError):
    """Raised when an external dependency needed by the use case is unreachable or unconfigured."""
