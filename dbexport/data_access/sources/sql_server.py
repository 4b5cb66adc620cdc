"""SQL Server connectivity via pyodbc."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_PORT = 1433


@dataclass
class SQLServerConnectionInfo:
    server: str
    database: str
    user: str
    password: str
    port: Optional[int] = None
    driver: str = "ODBC Driver 17 for SQL Server"

    @classmethod
    def from_source(cls, source: Any) -> "SQLServerConnectionInfo":
        return cls(
            server=source.host,
            database=source.database,
            user=source.username,
            password=source.password,
            port=source.port,
            driver=source.driver,
        )

    def connection_string(self) -> str:
        """Build the ODBC connection string.

        Encryption is disabled and the server certificate trusted, matching
        the usual setup for internal servers with self-signed certificates.
        """
        return (
            f"DRIVER={{{self.driver}}};"
            f"SERVER={self.server},{self.port or DEFAULT_PORT};"
            f"DATABASE={self.database};"
            f"UID={self.user};"
            f"PWD={self.password};"
            "Encrypt=no;"
            "TrustServerCertificate=yes;"
        )


def connect(connection: SQLServerConnectionInfo):
    import pyodbc

    logger.info(
        "Connecting to SQL Server %s/%s as %s",
        connection.server,
        connection.database,
        connection.user,
    )
    return pyodbc.connect(connection.connection_string(), autocommit=True)
