"""Error and result types returned by the connector."""
from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

# sqlite3.Warning is not an Error subclass; older interpreters raise it for
# multi-statement strings.
DRIVER_ERRORS = (sqlite3.Error, sqlite3.Warning)


class ErrorKind(str, Enum):
    OPEN = "open"
    EXECUTE = "execute"
    CLOSE = "close"


class ConnectorError(Exception):
    """A driver-reported failure, tagged with the step that failed."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value} failed: {self.message}"


@dataclass
class Result:
    ok: bool
    value: Any = None
    error: Optional[ConnectorError] = None

    @classmethod
    def success(cls, value: Any = True) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result":
        return cls(ok=False, error=ConnectorError(kind, message))

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
