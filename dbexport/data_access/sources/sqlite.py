"""SQLite connectivity."""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class SQLiteConnectionInfo:
    path: Path

    @classmethod
    def from_source(cls, source: Any) -> "SQLiteConnectionInfo":
        return cls(path=Path(source.database).expanduser())


def connect(connection: SQLiteConnectionInfo) -> sqlite3.Connection:
    """Open the database read-only.

    Read-only mode makes a wrong path fail instead of silently creating an
    empty database file.
    """
    uri = f"{connection.path.resolve().as_uri()}?mode=ro"
    logger.info("Opening SQLite database %s", connection.path)
    return sqlite3.connect(uri, uri=True)
