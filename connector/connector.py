"""Connection-per-call SQLite connector.

Every operation opens its own connection, runs exactly one statement and
releases the connection before control returns to the caller. A query hands
its connection over to the returned ``RowCursor``, which releases it once the
rows are consumed or the cursor is closed.

Driver failures never cross this boundary as exceptions: the boolean API
returns ``False`` / ``None``, the ``run_*`` API returns a ``Result`` tagged
with the step that failed. Either way the driver's description is logged.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Dict, Optional

from .config import ConnectorConfig, load_config, parse_url
from .cursor import RowCursor
from .errors import DRIVER_ERRORS, ErrorKind, Result
from .logs import LogContext

logger = logging.getLogger(__name__)


class SQLiteConnector:
    """Runs single SQL statements against one SQLite database file.

    Usage:
        connector = SQLiteConnector(ConnectorConfig(db_path="app.sqlite"))
        connector.execute_statement("CREATE TABLE t (id INTEGER);")
        with connector.execute_query("SELECT * FROM t;") as rows:
            for row in rows:
                ...
    """

    _instance: Optional["SQLiteConnector"] = None
    _instance_lock = threading.Lock()

    def __init__(self, config: Optional[ConnectorConfig] = None):
        self.config = config or load_config()
        # validate once so a bad address fails at construction, not per call
        _, _, self._filename = parse_url(self.config.url)
        # id -> connection; holding the object keeps its id from being reused
        self._live: Dict[int, sqlite3.Connection] = {}
        self._live_lock = threading.Lock()

    # -- shared instance -------------------------------------------------------

    @classmethod
    def get_instance(cls) -> "SQLiteConnector":
        """Return the process-wide connector, creating it on first use."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        with cls._instance_lock:
            cls._instance = None

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def open_connections(self) -> int:
        with self._live_lock:
            return len(self._live)

    # -- public API ------------------------------------------------------------

    def execute_statement(self, sql: str) -> bool:
        """Run a statement that returns no rows (CREATE, INSERT, UPDATE, DELETE ...).

        Returns True when the statement was applied. A close failure after a
        successful statement is logged but still counts as applied.
        """
        res = self.run_statement(sql)
        return res.ok or res.kind is ErrorKind.CLOSE

    def execute_query(self, sql: str) -> Optional[RowCursor]:
        """Run a row-returning statement; None on failure."""
        res = self.run_query(sql)
        return res.value if res.ok else None

    def run_statement(self, sql: str) -> Result:
        ctx = LogContext("execute_statement", logger)
        ctx.set_entity(self._filename)
        ctx.set_payload(sql)

        opened = self._open()
        if not opened.ok:
            return self._finish(ctx, opened)
        conn = opened.value

        outcome = Result.success(True)
        try:
            conn.execute(sql)
        except DRIVER_ERRORS as e:
            outcome = Result.failure(ErrorKind.EXECUTE, str(e))
        finally:
            closed = self._close(conn)

        if outcome.ok and not closed.ok:
            closed.value = True
            outcome = closed
        return self._finish(ctx, outcome)

    def run_query(self, sql: str) -> Result:
        ctx = LogContext("execute_query", logger)
        ctx.set_entity(self._filename)
        ctx.set_payload(sql)

        opened = self._open()
        if not opened.ok:
            return self._finish(ctx, opened)
        conn = opened.value

        try:
            cur = conn.execute(sql)
        except DRIVER_ERRORS as e:
            self._close(conn)
            return self._finish(ctx, Result.failure(ErrorKind.EXECUTE, str(e)))
        except BaseException:
            self._close(conn)
            raise

        if cur.description is None:
            self._close(conn)
            return self._finish(ctx, Result.failure(ErrorKind.EXECUTE, "query does not return results"))
        return self._finish(ctx, Result.success(RowCursor(cur, conn, self.close_connection)))

    def open_connection(self) -> Optional[sqlite3.Connection]:
        res = self._open()
        if not res.ok:
            logger.error(str(res.error))
            return None
        return res.value

    def close_connection(self, conn: Optional[sqlite3.Connection]) -> bool:
        res = self._close(conn)
        if not res.ok:
            logger.error(str(res.error))
        return res.ok

    # -- internals -------------------------------------------------------------

    def _open(self) -> Result:
        try:
            conn = sqlite3.connect(
                self._filename,
                timeout=self.config.timeout,
                check_same_thread=False,
                isolation_level=None,
            )
        except DRIVER_ERRORS as e:
            return Result.failure(ErrorKind.OPEN, str(e))
        try:
            conn.execute("PRAGMA foreign_keys = ON;")
        except DRIVER_ERRORS as e:
            conn.close()
            return Result.failure(ErrorKind.OPEN, str(e))
        conn.row_factory = sqlite3.Row
        with self._live_lock:
            self._live[id(conn)] = conn
        return Result.success(conn)

    def _close(self, conn: Optional[sqlite3.Connection]) -> Result:
        if conn is None:
            return Result.failure(ErrorKind.CLOSE, "no connection to close")
        try:
            conn.close()
        except DRIVER_ERRORS as e:
            return Result.failure(ErrorKind.CLOSE, str(e))
        with self._live_lock:
            self._live.pop(id(conn), None)
        return Result.success(True)

    @staticmethod
    def _finish(ctx: LogContext, res: Result) -> Result:
        if res.ok:
            ctx.write("OK")
        else:
            ctx.write(res.kind.value.upper(), res.error.message)
        return res


def get_connector() -> SQLiteConnector:
    return SQLiteConnector.get_instance()


def reset_connector() -> None:
    """Discard the shared connector (useful in tests)."""
    SQLiteConnector.reset_instance()
