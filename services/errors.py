"""Exceptions raised by the service layer.

The API blueprint turns each of these into the JSON error envelope, so the
services never build HTTP responses themselves.
"""


class ServiceError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class BadRequestError(ServiceError):
    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConfigurationError(ServiceError):
    """Raised when the stored state does not allow the operation yet."""
