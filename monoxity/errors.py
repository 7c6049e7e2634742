"""Exceptions raised by monoxity stores.

Engine failures on write paths are not exceptions: they come back as a falsy
:class:`~monoxity.result.WriteResult`.  Everything here signals caller misuse
or corrupt stored data.
"""

from __future__ import annotations


class MonoxityError(Exception):
    """Base class for all monoxity errors."""


class NotInitializedError(MonoxityError):
    """Raised when a store is used before ``connect()`` succeeded."""

    def __init__(self, message: str = "[MonoxityDB] SQLite has not been initialized") -> None:
        super().__init__(message)


class ShapeError(MonoxityError, TypeError):
    """Raised when push/pull target a key whose value is not an array."""

    def __init__(self, key: str) -> None:
        super().__init__(f"[MonoxityDB] Provided key does not return an array: {key!r}")
        self.key = key


class DecodeError(MonoxityError, ValueError):
    """Raised when a stored value is not valid JSON."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"[MonoxityDB] Value at {key!r} is not valid JSON: {reason}")
        self.key = key


class InvalidIdentifierError(MonoxityError, ValueError):
    """Raised when a table name is not a plain SQL identifier."""
