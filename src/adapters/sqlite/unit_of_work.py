"""
SQLite Unit of Work.

Each unit opens its own connection and takes the database write lock up
front with BEGIN IMMEDIATE, so every operation is a serializable
transaction: a capacity count and the insert it guards, or a multi-row
token rotation, can never interleave with another writer. Waiting for the
lock is bounded by the connection timeout.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from src.core.errors import StoreUnavailableError
from src.core.ports.time import TimePort

from .repos import SQLiteAssetRepo, dict_factory

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0

_UNAVAILABLE_MARKERS = ("locked", "busy", "unable to open")


def is_unavailable(exc: sqlite3.OperationalError) -> bool:
    """Lock timeouts and unreachable files are retryable; anything else is a bug."""
    message = str(exc).lower()
    return any(marker in message for marker in _UNAVAILABLE_MARKERS)


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate retryable sqlite errors into StoreUnavailableError."""
    try:
        yield
    except sqlite3.OperationalError as exc:
        if is_unavailable(exc):
            raise StoreUnavailableError(str(exc)) from exc
        raise


class SQLiteUnitOfWork:
    """
    SQLite Unit of Work implementation.

    Provides transaction management and access to the asset repository.
    Uses a shared connection for all operations within a transaction.
    Anything not committed when the block exits is rolled back.
    """

    def __init__(
        self,
        db_path: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        clock: TimePort | None = None,
    ):
        self.db_path = db_path
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._conn: sqlite3.Connection | None = None
        self._assets: SQLiteAssetRepo | None = None

    def __enter__(self) -> SQLiteUnitOfWork:
        with store_errors():
            conn = sqlite3.connect(
                self.db_path,
                timeout=self.timeout_seconds,
                isolation_level=None,
            )
            try:
                conn.row_factory = dict_factory
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error:
                conn.close()
                raise
        self._conn = conn
        self._assets = None
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._conn is None:
            return
        try:
            if self._conn.in_transaction:
                self._conn.rollback()
        finally:
            self._conn.close()
            self._conn = None
            self._assets = None

    def commit(self) -> None:
        if self._conn is not None:
            with store_errors():
                self._conn.commit()

    def rollback(self) -> None:
        if self._conn is not None:
            self._conn.rollback()

    @property
    def assets(self) -> SQLiteAssetRepo:
        if self._conn is None:
            raise RuntimeError("SQLiteUnitOfWork used outside of a `with` block")
        if self._assets is None:
            self._assets = SQLiteAssetRepo(self.db_path, self._conn, self._clock)
        return self._assets
