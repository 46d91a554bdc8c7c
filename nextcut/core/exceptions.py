"""
Queue error taxonomy.

Every failure a caller can see is a QueueError. The ``retryable`` flag tells
the caller whether running the whole operation again from scratch can help
(ConflictError, UnavailableError) or not (everything else).
"""

from typing import Any, Dict, Optional


class QueueError(Exception):
    """Base exception for all queue engine errors."""

    code = "error"
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable error envelope."""
        return {
            "type": "error",
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }


class NotFoundError(QueueError):
    """Referenced barber, customer or queue entry does not exist."""

    code = "not_found"


class InvalidArgumentError(QueueError):
    """Unrecognized service kind, out-of-range coordinates, malformed input."""

    code = "invalid_argument"


class NotInQueueError(QueueError):
    """Customer tried to leave but holds no queue entry. Benign."""

    code = "not_in_queue"


class ForbiddenError(QueueError):
    """Operator acted on an entry that belongs to another barber."""

    code = "forbidden"


class ConflictError(QueueError):
    """Transaction could not commit atomically. Retry the whole operation."""

    code = "conflict"
    retryable = True


class UnavailableError(QueueError):
    """Backing store unreachable."""

    code = "unavailable"
    retryable = True


class AlreadyExistsError(QueueError):
    """Username or phone number is already registered. Retrying cannot help."""

    code = "already_exists"
