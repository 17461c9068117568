"""
Error taxonomy for the check-in service.

Every error is recovered at the operation boundary and carries the status
classification the transport layer reports to the caller.
"""

from typing import Any, Dict


class CheckinError(Exception):
    """Base class for errors surfaced to callers without changing state."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to its wire form."""
        return {"error": self.message}


class ValidationError(CheckinError):
    """A required request field is missing or malformed."""

    status_code = 400


class NotFoundError(CheckinError):
    """The addressed flight or passenger does not exist."""

    status_code = 404


class InvalidStateError(CheckinError):
    """A status-guarded transition was blocked."""

    status_code = 400


class ImportDecodeError(CheckinError):
    """Manifest input could not be decoded as text; nothing was imported."""

    status_code = 400
