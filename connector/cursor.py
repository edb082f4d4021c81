"""Row cursor that owns the connection it was produced on.

The connection is released exactly once: when the rows run out, when
``close()`` is called, when a ``with`` block around the cursor exits, or when
the cursor is garbage-collected without having been closed. Reads after
release return nothing. A driver error while reading rows is logged and ends
the cursor; it is not raised.
"""
from __future__ import annotations

import logging
import sqlite3
import weakref
from typing import Any, Callable, Iterator, List, Optional

import pandas as pd

from .errors import DRIVER_ERRORS

logger = logging.getLogger(__name__)


class RowCursor:
    def __init__(
        self,
        cursor: sqlite3.Cursor,
        conn: sqlite3.Connection,
        release: Callable[[sqlite3.Connection], bool],
    ):
        self._cursor = cursor
        self._closed = False
        self.columns: List[str] = [d[0] for d in (cursor.description or ())]
        # must not reference self, or the cursor would never be collected
        self._finalizer = weakref.finalize(self, release, conn)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> bool:
        if self._closed:
            return True
        self._closed = True
        try:
            self._cursor.close()
        except DRIVER_ERRORS as e:
            logger.warning("cursor close failed: %s", e)
        return bool(self._finalizer())

    def _read_failed(self, e: Exception) -> None:
        logger.error("reading rows failed: %s", e)
        self.close()

    def fetchone(self) -> Optional[sqlite3.Row]:
        if self._closed:
            return None
        try:
            row = self._cursor.fetchone()
        except DRIVER_ERRORS as e:
            self._read_failed(e)
            return None
        if row is None:
            self.close()
        return row

    def fetchmany(self, size: Optional[int] = None) -> List[sqlite3.Row]:
        if self._closed:
            return []
        if size is None:
            size = self._cursor.arraysize
        try:
            rows = self._cursor.fetchmany(size)
        except DRIVER_ERRORS as e:
            self._read_failed(e)
            return []
        if len(rows) < size:
            self.close()
        return rows

    def fetchall(self) -> List[sqlite3.Row]:
        """Remaining rows; on a read error, the rows read before it."""
        rows: List[sqlite3.Row] = []
        while True:
            row = self.fetchone()
            if row is None:
                return rows
            rows.append(row)

    def to_dataframe(self) -> pd.DataFrame:
        rows = self.fetchall()
        return pd.DataFrame([tuple(r) for r in rows], columns=self.columns)

    def __iter__(self) -> Iterator[sqlite3.Row]:
        while True:
            row = self.fetchone()
            if row is None:
                return
            yield row

    def __enter__(self) -> "RowCursor":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<RowCursor columns={self.columns!r} {state}>"
