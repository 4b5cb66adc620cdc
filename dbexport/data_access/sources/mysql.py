"""MySQL connectivity via PyMySQL."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class MySQLConnectionInfo:
    host: str
    database: str
    user: str
    password: str
    port: int = 3306

    @classmethod
    def from_source(cls, source: Any) -> "MySQLConnectionInfo":
        info = cls(
            host=source.host,
            database=source.database,
            user=source.username,
            password=source.password,
        )
        if source.port is not None:
            info.port = source.port
        return info


def connect(connection: MySQLConnectionInfo):
    import pymysql

    logger.info(
        "Connecting to MySQL %s:%s/%s as %s",
        connection.host,
        connection.port,
        connection.database,
        connection.user,
    )
    return pymysql.connect(
        host=connection.host,
        port=connection.port,
        user=connection.user,
        password=connection.password,
        database=connection.database,
        autocommit=True,
    )
