"""Postgres connectivity via psycopg2."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class PostgresConnectionInfo:
    host: str
    database: str
    user: str
    password: str
    port: int = 5432

    @classmethod
    def from_source(cls, source: Any) -> "PostgresConnectionInfo":
        info = cls(
            host=source.host,
            database=source.database,
            user=source.username,
            password=source.password,
        )
        if source.port is not None:
            info.port = source.port
        return info


def connect(connection: PostgresConnectionInfo):
    import psycopg2

    logger.info(
        "Connecting to Postgres %s:%s/%s as %s",
        connection.host,
        connection.port,
        connection.database,
        connection.user,
    )
    conn = psycopg2.connect(
        host=connection.host,
        port=connection.port,
        dbname=connection.database,
        user=connection.user,
        password=connection.password,
    )
    # A failed statement must not poison the remaining queries of the source.
    conn.autocommit = True
    return conn
