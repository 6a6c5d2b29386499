# storefront/errors.py
from typing import Any, Dict


class StoreError(Exception):
    """
    Base class for catalog errors.

    Carries the HTTP status the API boundary should answer with; the
    message is safe to show to clients.
    """

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message}


class ValidationError(StoreError):
    """Missing or invalid input."""

    status_code = 400


class NotFoundError(StoreError):
    status_code = 404


class ConflictError(StoreError):
    """The request clashes with existing data (duplicate name, populated category)."""

    status_code = 409


class InternalError(StoreError):
    """Anything the client can't fix; the real cause only goes to the log."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
