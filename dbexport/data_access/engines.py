"""Engine tags and the per-engine SQL and connection behaviour."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .sources import mysql, postgres, sql_server, sqlite


class DatabaseType(str, Enum):
    SQLSERVER = "sqlserver"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"

    @classmethod
    def parse(cls, value: Any) -> "DatabaseType":
        """Parse an engine tag, accepting common spellings ("SQL Server", "postgresql", ...)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace(" ", "").replace("_", "")
        if key in _ALIASES:
            return _ALIASES[key]
        allowed = sorted(t.value for t in cls)
        raise ValueError(f"Unknown database_type {value!r}; expected one of {allowed}")


_ALIASES: Dict[str, DatabaseType] = {
    "sqlserver": DatabaseType.SQLSERVER,
    "mssql": DatabaseType.SQLSERVER,
    "postgres": DatabaseType.POSTGRES,
    "postgresql": DatabaseType.POSTGRES,
    "mysql": DatabaseType.MYSQL,
    "sqlite": DatabaseType.SQLITE,
    "sqlite3": DatabaseType.SQLITE,
}


def _quote_double(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _quote_brackets(identifier: str) -> str:
    return "[" + identifier.replace("]", "]]") + "]"


def _quote_backticks(identifier: str) -> str:
    return "`" + identifier.replace("`", "``") + "`"


def _quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


@dataclass(frozen=True)
class Engine:
    """Everything the extractor needs to know about one kind of source."""

    database_type: DatabaseType
    connect: Callable[[Any], Any]
    tables_query: str
    quote: Callable[[str], str]
    limit_with_top: bool = False
    # (name, declared type) rows for a table; only needed where the driver reports no types
    columns_template: Optional[str] = None

    def columns_query(self, table: str) -> Optional[str]:
        if self.columns_template is None:
            return None
        return self.columns_template.format(table=_quote_literal(table))

    def rows_query(self, table: str, limit: Optional[int] = None) -> str:
        name = self.quote(table)
        if limit is None:
            return f"SELECT * FROM {name}"
        if self.limit_with_top:
            return f"SELECT TOP {int(limit)} * FROM {name}"
        return f"SELECT * FROM {name} LIMIT {int(limit)}"


def _connect_sql_server(source: Any) -> Any:
    return sql_server.connect(sql_server.SQLServerConnectionInfo.from_source(source))


def _connect_postgres(source: Any) -> Any:
    return postgres.connect(postgres.PostgresConnectionInfo.from_source(source))


def _connect_mysql(source: Any) -> Any:
    return mysql.connect(mysql.MySQLConnectionInfo.from_source(source))


def _connect_sqlite(source: Any) -> Any:
    return sqlite.connect(sqlite.SQLiteConnectionInfo.from_source(source))


ENGINES: Dict[DatabaseType, Engine] = {
    DatabaseType.SQLSERVER: Engine(
        database_type=DatabaseType.SQLSERVER,
        connect=_connect_sql_server,
        tables_query="""
            SELECT TABLE_NAME AS table_name
            FROM INFORMATION_SCHEMA.TABLES
            WHERE TABLE_TYPE = 'BASE TABLE'
              AND TABLE_SCHEMA != 'scratch'
        """,
        quote=_quote_brackets,
        limit_with_top=True,
    ),
    DatabaseType.POSTGRES: Engine(
        database_type=DatabaseType.POSTGRES,
        connect=_connect_postgres,
        tables_query="""
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public'
              AND table_type = 'BASE TABLE'
        """,
        quote=_quote_double,
    ),
    DatabaseType.MYSQL: Engine(
        database_type=DatabaseType.MYSQL,
        connect=_connect_mysql,
        tables_query="""
            SELECT TABLE_NAME AS table_name
            FROM INFORMATION_SCHEMA.TABLES
            WHERE TABLE_SCHEMA = DATABASE()
              AND TABLE_TYPE = 'BASE TABLE'
        """,
        quote=_quote_backticks,
    ),
    DatabaseType.SQLITE: Engine(
        database_type=DatabaseType.SQLITE,
        connect=_connect_sqlite,
        tables_query="""
            SELECT name AS table_name
            FROM sqlite_master
            WHERE type = 'table'
              AND name NOT LIKE 'sqlite_%'
        """,
        quote=_quote_double,
        columns_template="SELECT name, type FROM pragma_table_info({table})",
    ),
}


def get_engine(database_type: DatabaseType | str) -> Engine:
    return ENGINES[DatabaseType.parse(database_type)]


__all__ = ["DatabaseType", "Engine", "ENGINES", "get_engine"]
