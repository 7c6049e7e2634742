"""Tagged result returned by every write and delete operation."""

from __future__ import annotations

from typing import Any, NamedTuple


class WriteResult(NamedTuple):
    ok: bool
    key: str | int | None = None
    value: Any = None
    rowcount: int = 0        # rows touched by the final statement
    error: str | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, key: str | int | None, value: Any = None, rowcount: int = 0) -> WriteResult:
        return cls(True, key, value, rowcount)

    @classmethod
    def failure(cls, key: str | int | None, error: str, value: Any = None) -> WriteResult:
        return cls(False, key, value, 0, error)

    def to_dict(self) -> dict:
        """Return ``{"key": ..., "value": ...}`` for successful writes."""
        return {"key": self.key, "value": self.value}
