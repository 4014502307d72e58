"""Domain errors raised by the service layer.

Each error carries the HTTP status and the message returned to the client;
the handlers in ``app.main`` turn them into ``{"error": message}`` responses.
"""

from typing import Optional


class AlumniError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class AlumniNotFound(AlumniError):
    status_code = 404
    message = "Alumni not found"


class DuplicateEmail(AlumniError):
    status_code = 400
    message = "Email already exists"


class StorageError(AlumniError):
    """Any other database failure. Details go to the log, not the client."""

    status_code = 500
