"""Service-layer errors.

Services raise these; route handlers translate them into HTTP responses.
Each carries a short message that is safe to show to the admin.
"""


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """Missing or malformed input. The caller can fix it and retry."""


class NotFoundError(ServiceError):
    """A referenced record does not exist."""

