"""
Exceptions raised by the vitals service.

Every error that reaches the HTTP layer carries the status code it is
reported with.
"""


class VitalsError(Exception):
    """Base error for the vitals service"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(VitalsError):
    """Raised when a request payload or query parameter is invalid"""

    status_code = 400


class MethodNotAllowedError(VitalsError):
    """Raised when an endpoint is called with an unsupported HTTP method"""

    status_code = 405


class StorageError(VitalsError):
    """Raised when a day store cannot be read or written"""

    status_code = 500


class CorruptDataError(VitalsError):
    """Raised when a stored day file does not hold a JSON array.

    Recovered inside the storage layer; never reported to callers.
    """
