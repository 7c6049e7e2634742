"""SQLite store base class — connection, table bootstrap and readiness gate.

Holds the one aiosqlite connection a store uses, creates its table on
``connect()`` and refuses every query until that has succeeded.  Subclasses
set ``_CREATE_TABLE`` and ``_COLUMNS`` and build their operations on
``_execute`` / ``_fetchone`` / ``_fetchall``.
"""

from __future__ import annotations

import logging
import pathlib
import re
from typing import Any, Iterable

import aiosqlite

from monoxity.errors import InvalidIdentifierError, NotInitializedError

log = logging.getLogger("monoxity.sqlite_store")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_identifier(name: str) -> str:
    """Return *name* if it is safe to interpolate as a table name."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise InvalidIdentifierError(
            f"[MonoxityDB] Invalid table name {name!r}: "
            "use letters, digits and underscores, not starting with a digit"
        )
    return name


class SQLiteStore:
    """Base class for aiosqlite-backed stores bound to one table."""

    _CREATE_TABLE: str = ""             # subclass must set; ``{table}`` placeholder
    _COLUMNS: tuple[str, ...] = ()      # expected column names, in order

    def __init__(self, db_path: pathlib.Path, table: str) -> None:
        self._db_path = pathlib.Path(db_path)
        self._table = validate_identifier(table)
        self._con: aiosqlite.Connection | None = None
        self.initialized = False

    @property
    def db_path(self) -> pathlib.Path:
        return self._db_path

    @property
    def table(self) -> str:
        return self._table

    @property
    def _quoted_table(self) -> str:
        return f'"{self._table}"'

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _connect(self) -> aiosqlite.Connection:
        # Autocommit: every statement is its own transaction.
        con = await aiosqlite.connect(str(self._db_path), isolation_level=None)
        con.row_factory = aiosqlite.Row
        return con

    async def _check_schema(self, con: aiosqlite.Connection) -> bool:
        """Check that the existing table has the expected columns."""
        async with con.execute(f"PRAGMA table_info({self._quoted_table})") as cur:
            rows = await cur.fetchall()
        columns = tuple(row["name"] for row in rows)
        if self._COLUMNS and columns != self._COLUMNS:
            log.warning(
                "Table %s in %s has columns %s, expected %s",
                self._table, self._db_path, columns, self._COLUMNS,
            )
            return False
        return True

    async def connect(self) -> bool:
        """Open the database and create the table if it does not exist.

        Returns *True* when the store is ready.  Failures are logged and
        reported as *False*; the store then stays uninitialized.
        """
        if self._con is None:
            try:
                self._con = await self._connect()
            except (aiosqlite.Error, OSError) as exc:
                log.warning("Cannot open %s: %s", self._db_path, exc)
                self.initialized = False
                return False

        try:
            await self._con.execute(self._CREATE_TABLE.format(table=self._quoted_table))
            ready = await self._check_schema(self._con)
        except aiosqlite.Error as exc:
            log.warning("Cannot create table %s in %s: %s", self._table, self._db_path, exc)
            ready = False

        if not ready:
            await self.close()
            return False

        self.initialized = True
        log.info("Store online  file=%s table=%s", self._db_path, self._table)
        return True

    async def close(self) -> None:
        """Close the connection.  The store must be reconnected before reuse."""
        self.initialized = False
        con, self._con = self._con, None
        if con is not None:
            await con.close()
            log.info("Store closed  file=%s table=%s", self._db_path, self._table)

    async def __aenter__(self):
        if not await self.connect():
            raise NotInitializedError(
                f"[MonoxityDB] Could not initialize {self._db_path} table {self._table}"
            )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _ensure_ready(self) -> None:
        if not self.initialized or self._con is None:
            raise NotInitializedError()

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_dict(row: aiosqlite.Row) -> dict:
        return dict(row)

    async def _execute(self, sql: str, params: Iterable[Any] = ()) -> int:
        """Run a write statement and return the number of rows it touched."""
        self._ensure_ready()
        async with self._con.execute(sql, tuple(params)) as cur:
            return cur.rowcount

    async def _fetchone(self, sql: str, params: Iterable[Any] = ()) -> aiosqlite.Row | None:
        self._ensure_ready()
        async with self._con.execute(sql, tuple(params)) as cur:
            return await cur.fetchone()

    async def _fetchall(self, sql: str, params: Iterable[Any] = ()) -> list[aiosqlite.Row]:
        self._ensure_ready()
        async with self._con.execute(sql, tuple(params)) as cur:
            return list(await cur.fetchall())

    async def count(self) -> int:
        """Return total number of rows in the table."""
        row = await self._fetchone(f"SELECT COUNT(*) AS cnt FROM {self._quoted_table}")
        return row["cnt"]

    async def clear(self) -> int:
        """Delete all rows from the table and return how many were removed."""
        return await self._execute(f"DELETE FROM {self._quoted_table}")
