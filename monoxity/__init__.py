"""monoxity — a key-value store on top of a single SQLite table."""

from monoxity.config import StoreConfig, load_store_config
from monoxity.errors import (
    DecodeError,
    InvalidIdentifierError,
    MonoxityError,
    NotInitializedError,
    ShapeError,
)
from monoxity.result import WriteResult
from monoxity.store import MonoxityDB

__all__ = [
    "DecodeError",
    "InvalidIdentifierError",
    "MonoxityDB",
    "MonoxityError",
    "NotInitializedError",
    "ShapeError",
    "StoreConfig",
    "WriteResult",
    "load_store_config",
]
