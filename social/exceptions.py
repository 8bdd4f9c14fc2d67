"""
Structured failures raised by the social graph and engagement services.

Every error names the operation that failed and, where there is one, the
offending id, so the HTTP layer can render a specific message.
"""

import functools
import logging

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class SocialError(Exception):
    status_code = 400

    def __init__(self, operation, message, entity_id=None):
        super().__init__(message)
        self.operation = operation
        self.message = message
        self.entity_id = entity_id

    def __str__(self):
        if self.entity_id is None:
            return f"{self.operation}: {self.message}"
        return f"{self.operation}: {self.message} (id={self.entity_id})"

    def as_dict(self):
        return {
            'error': self.message,
            'operation': self.operation,
            'id': self.entity_id,
        }


class NotFound(SocialError):
    """Referenced entity or edge is absent."""
    status_code = 404


class Conflict(SocialError):
    """Duplicate pending request, follow or friendship."""
    status_code = 409


class InvalidOperation(SocialError):
    """Self-referential request or follow, or an unsupported target."""
    status_code = 400


class InvalidState(SocialError):
    """Vote on an inactive or expired poll."""
    status_code = 400


class OutOfRange(SocialError):
    """Poll option index outside the poll's options."""
    status_code = 404


class StorageError(SocialError):
    """The database rejected or failed the operation."""
    status_code = 500


def storage_errors(operation):
    """
    Re-raise database failures from the wrapped service call as StorageError.

    The wrapped function owns its transaction, so by the time the error
    reaches this wrapper the atomic block has already rolled back.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except DatabaseError as exc:
                logger.error("Storage failure in %s: %s", operation, exc)
                raise StorageError(operation, 'Storage failure') from exc
        return wrapper
    return decorator
