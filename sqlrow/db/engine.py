"""
sqlrow Database Engine — synchronous SQLite connection manager.

Provides:
- Database: blocking connection wrapper with ``?`` parameterized queries
- Fault translation: driver errors surface as ``QueryFault`` /
  ``DatabaseConnectionFault``
- Transactions via a context manager
- Optional statement echo on the ``sqlrow.db.sql`` logger
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, TYPE_CHECKING

from ..faults.domains import DatabaseConnectionFault, QueryFault

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger("sqlrow.db")
sql_logger = logging.getLogger("sqlrow.db.sql")

__all__ = ["Database"]


class Database:
    """
    Synchronous SQLite database for sqlrow.

    Every call blocks until the driver returns. The connection runs in
    autocommit mode; statements outside ``transaction()`` commit immediately.

    Usage:
        db = Database("sqlite:///app.db")
        db.connect()
        rows = db.fetch_all('SELECT * FROM "post" WHERE "id" > ?', [10])
        db.disconnect()

        with Database("sqlite:///:memory:") as db:
            db.execute('CREATE TABLE "tag" ("id" INTEGER PRIMARY KEY, "name" TEXT)')
    """

    def __init__(
        self,
        url: str = "sqlite:///:memory:",
        *,
        echo: bool = False,
        timeout: float = 5.0,
    ):
        self._url = url
        self._path = self._parse_url(url)
        self._echo = echo
        self._timeout = timeout
        self._connection: Optional[sqlite3.Connection] = None
        self._in_transaction = False

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        return cls(
            settings.database_url,
            echo=settings.echo_sql,
            timeout=settings.connect_timeout,
        )

    @staticmethod
    def _parse_url(url: str) -> str:
        """Extract the file path from a ``sqlite:///`` URL."""
        if not url.startswith("sqlite://"):
            raise DatabaseConnectionFault(
                url=url,
                reason=f"Unsupported database URL scheme: {url}",
            )
        path = url[len("sqlite://"):]
        if path.startswith("/"):
            path = path[1:]
        return path or ":memory:"

    # ── Connection management ────────────────────────────────────────

    def connect(self) -> None:
        """Open the database connection."""
        if self._connection is not None:
            return
        try:
            self._connection = sqlite3.connect(
                self._path, timeout=self._timeout, isolation_level=None
            )
        except sqlite3.Error as exc:
            raise DatabaseConnectionFault(url=self._url, reason=str(exc)) from exc

        self._connection.row_factory = sqlite3.Row
        self._connection.execute("PRAGMA foreign_keys=ON")
        logger.info(f"SQLite connected: {self._path}")

    def disconnect(self) -> None:
        """Close the database connection."""
        if self._connection is None:
            return
        self._connection.close()
        self._connection = None
        self._in_transaction = False
        logger.info("SQLite disconnected")

    def __enter__(self) -> Database:
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def _ensure_connected(self) -> sqlite3.Connection:
        if self._connection is None:
            self.connect()
        return self._connection

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Context manager for transactions.

        Usage:
            with db.transaction():
                db.execute("INSERT INTO ...")
                db.execute("UPDATE ...")
        """
        conn = self._ensure_connected()
        if self._in_transaction:
            # Nested blocks join the outer transaction
            yield
            return

        conn.execute("BEGIN")
        self._in_transaction = True
        try:
            yield
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._in_transaction = False

    # ── Query execution ──────────────────────────────────────────────

    def _run(self, operation: str, sql: str, params: Optional[Sequence[Any]]) -> sqlite3.Cursor:
        conn = self._ensure_connected()
        params = list(params or [])
        if self._echo:
            sql_logger.debug(f"{sql} {params}")
        try:
            cursor = conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise QueryFault(
                model="<raw>",
                operation=operation,
                reason=str(exc),
                metadata={"sql": sql[:200]},
            ) from exc
        return cursor

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> sqlite3.Cursor:
        """
        Execute a SQL statement.

        Returns:
            Cursor (exposes lastrowid, rowcount)

        Raises:
            QueryFault: When query execution fails
        """
        return self._run("execute", sql, params)

    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return all rows as dicts."""
        cursor = self._run("fetch_all", sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def fetch_one(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return first row as dict, or None."""
        cursor = self._run("fetch_one", sql, params)
        row = cursor.fetchone()
        return dict(row) if row is not None else None

    def fetch_val(self, sql: str, params: Optional[Sequence[Any]] = None) -> Any:
        """Execute query and return the first column of the first row."""
        cursor = self._run("fetch_val", sql, params)
        row = cursor.fetchone()
        return row[0] if row is not None else None

    # ── Properties ───────────────────────────────────────────────────

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def url(self) -> str:
        return self._url

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction
