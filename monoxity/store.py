"""MonoxityDB — key-value store over a single two-column SQLite table.

Every row is ``(key TEXT PRIMARY KEY, value TEXT)`` where *value* holds the
JSON encoding of whatever the caller stored.  Writes and deletes report
engine failures as a falsy :class:`WriteResult`; misuse (calling before
``connect()``, pushing onto a non-array) raises.

Example::

    db = MonoxityDB(table="monoxity", file_name="monoxity")
    await db.connect()
    await db.set("user:1", {"name": "Ann"})
    await db.get("user:1")          # {'name': 'Ann'}
"""

from __future__ import annotations

import asyncio
import logging
import pathlib
from typing import Any

import aiosqlite

from monoxity import codec
from monoxity.config import DB_EXTENSION, DEFAULT_FILE_NAME, DEFAULT_TABLE, StoreConfig
from monoxity.result import WriteResult
from monoxity.sqlite_store import SQLiteStore

log = logging.getLogger("monoxity.store")

_CREATE_TABLE = "CREATE TABLE IF NOT EXISTS {table} (key TEXT PRIMARY KEY, value TEXT)"

_DEFAULT_LIMIT = 5
_MAX_CAS_ATTEMPTS = 5

Key = str | int


class MonoxityDB(SQLiteStore):
    """Key-value CRUD plus array push/pull on one table of one database file."""

    _CREATE_TABLE = _CREATE_TABLE
    _COLUMNS = ("key", "value")

    def __init__(
        self,
        table: str | None = None,
        file_name: str | None = None,
        directory: str | pathlib.Path = ".",
    ) -> None:
        file_name = file_name or DEFAULT_FILE_NAME
        super().__init__(
            pathlib.Path(directory) / f"{file_name}{DB_EXTENSION}",
            table or DEFAULT_TABLE,
        )
        self.file_name = file_name
        # Serializes push/pull issued through this handle; other writers are
        # caught by the compare-and-swap.
        self._array_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: StoreConfig) -> MonoxityDB:
        return cls(table=config.table, file_name=config.file_name, directory=config.directory)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _get_raw(self, key: Key) -> str | None:
        row = await self._fetchone(
            f"SELECT value FROM {self._quoted_table} WHERE key = ?", (str(key),),
        )
        return None if row is None else row["value"]

    async def get(self, key: Key, default: Any = None) -> Any:
        """Return the decoded value at *key*, or *default* if there is none."""
        raw = await self._get_raw(key)
        if raw is None:
            return default
        return codec.decode(str(key), raw)

    def _decode_rows(self, rows: list[aiosqlite.Row]) -> list[dict]:
        out = []
        for row in rows:
            d = self._row_to_dict(row)
            d["value"] = codec.decode(d["key"], d["value"])
            out.append(d)
        return out

    async def get_all(self, key_filter: Key | None = None) -> list[dict]:
        """Return every row, or those whose key contains *key_filter*.

        Rows come back as ``{"key": ..., "value": ...}`` in engine order.
        """
        if key_filter:
            rows = await self._fetchall(
                f"SELECT key, value FROM {self._quoted_table} WHERE instr(key, ?) > 0",
                (str(key_filter),),
            )
        else:
            rows = await self._fetchall(f"SELECT key, value FROM {self._quoted_table}")
        return self._decode_rows(rows)

    async def get_first(self, limit: int = _DEFAULT_LIMIT, key_filter: Key | None = None) -> list[dict]:
        """Like :meth:`get_all` but capped at *limit* rows (5 when falsy)."""
        limit = limit or _DEFAULT_LIMIT
        if limit < 0:
            raise ValueError(f"limit must be positive, got {limit}")
        if key_filter:
            rows = await self._fetchall(
                f"SELECT key, value FROM {self._quoted_table} "
                "WHERE instr(key, ?) > 0 LIMIT ?",
                (str(key_filter), limit),
            )
        else:
            rows = await self._fetchall(
                f"SELECT key, value FROM {self._quoted_table} LIMIT ?", (limit,),
            )
        return self._decode_rows(rows)

    async def row_count(self) -> int:
        """Return the number of rows in the table."""
        return await self.count()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def set(self, key: Key, value: Any) -> WriteResult:
        """Insert or fully replace the row at *key*."""
        self._ensure_ready()
        text = codec.encode(value)
        try:
            n = await self._execute(
                f"INSERT OR REPLACE INTO {self._quoted_table} (key, value) VALUES (?, ?)",
                (str(key), text),
            )
        except aiosqlite.Error as exc:
            log.warning("set(%r) failed: %s", key, exc)
            return WriteResult.failure(key, str(exc), value)
        return WriteResult.success(key, value, n)

    async def _swap(self, key: Key, old: str | None, new: str) -> int:
        """Write *new* at *key* only if the stored text is still *old*."""
        if old is None:
            return await self._execute(
                f"INSERT INTO {self._quoted_table} (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO NOTHING",
                (str(key), new),
            )
        return await self._execute(
            f"UPDATE {self._quoted_table} SET value = ? WHERE key = ? AND value = ?",
            (new, str(key), old),
        )

    async def _update_array(self, key: Key, value: Any, mutate) -> WriteResult:
        """Compare-and-swap loop shared by push and pull.

        *mutate* gets the current array and returns ``(new_array, changed)``.
        An unchanged array is not written back.
        """
        self._ensure_ready()
        async with self._array_lock:
            return await self._swap_loop(key, value, mutate)

    async def _swap_loop(self, key: Key, value: Any, mutate) -> WriteResult:
        for attempt in range(_MAX_CAS_ATTEMPTS):
            raw = await self._get_raw(key)
            current = [] if raw is None else codec.decode(str(key), raw)
            items, changed = mutate(codec.as_array(str(key), current))
            if not changed:
                return WriteResult.success(key, value, 0)
            try:
                n = await self._swap(key, raw, codec.encode(items))
            except aiosqlite.Error as exc:
                log.warning("Array update at %r failed: %s", key, exc)
                return WriteResult.failure(key, str(exc), value)
            if n:
                return WriteResult.success(key, value, n)
            log.debug("Value at %r changed underneath, retry %d/%d",
                      key, attempt + 1, _MAX_CAS_ATTEMPTS)
        log.warning("Gave up updating %r after %d attempts", key, _MAX_CAS_ATTEMPTS)
        return WriteResult.failure(key, "concurrent modification", value)

    async def push(self, key: Key, value: Any, destroy_duplicates: bool = False) -> WriteResult:
        """Append *value* to the array at *key* (created empty if absent).

        With *destroy_duplicates* repeated elements are dropped afterwards,
        keeping the first occurrence of each.
        """
        def _append(items: list) -> tuple[list, bool]:
            items = items + [value]
            if destroy_duplicates:
                items = codec.dedupe(items)
            return items, True

        return await self._update_array(key, value, _append)

    async def pull(self, key: Key, value: Any) -> WriteResult:
        """Remove the first element equal to *value* from the array at *key*.

        Pulling a value that is not present leaves the array as it is.
        """
        return await self._update_array(key, value, lambda items: codec.remove_first(items, value))

    async def delete(self, key: Key) -> WriteResult:
        """Delete the row at *key*.

        Truthy whenever the statement ran, even if no row matched; check
        ``rowcount`` to know whether something was removed.
        """
        self._ensure_ready()
        try:
            n = await self._execute(
                f"DELETE FROM {self._quoted_table} WHERE key = ?", (str(key),),
            )
        except aiosqlite.Error as exc:
            log.warning("delete(%r) failed: %s", key, exc)
            return WriteResult.failure(key, str(exc))
        return WriteResult.success(key, rowcount=n)

    async def destroy(self) -> WriteResult:
        """Delete every row.  The table itself is kept."""
        self._ensure_ready()
        try:
            n = await self.clear()
        except aiosqlite.Error as exc:
            log.warning("destroy() on %s failed: %s", self.table, exc)
            return WriteResult.failure(None, str(exc))
        return WriteResult.success(None, rowcount=n)
