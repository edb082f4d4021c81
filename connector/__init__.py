"""Connection-per-call access to a single SQLite database file.

Open, run one statement, close. Nothing is pooled or cached between calls.
"""
from __future__ import annotations

from .config import ConnectorConfig, load_config
from .connector import SQLiteConnector, get_connector, reset_connector
from .cursor import RowCursor
from .errors import ConnectorError, ErrorKind, Result
from .logs import configure_logging

__all__ = [
    "ConnectorConfig",
    "ConnectorError",
    "ErrorKind",
    "Result",
    "RowCursor",
    "SQLiteConnector",
    "configure_logging",
    "get_connector",
    "load_config",
    "reset_connector",
]
