"""DuckDB loading of exported Parquet files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

import duckdb

from dbexport.errors import WriteError

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class DuckDBLoader:
    """Mirrors Parquet exports as DuckDB tables, one schema per source.

    With the default ``"."`` separator a table lands at ``<source>.<stem>``.
    Any other separator flattens everything into ``main`` as
    ``<source><separator><stem>``, which is easier to type in the DuckDB CLI.
    """

    def __init__(self, db_path: str | Path, separator: str = ".", read_only: bool = False) -> None:
        self.db_path = Path(db_path)
        self.separator = separator
        self.read_only = read_only
        try:
            if not read_only:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"Unable to create directory {self.db_path.parent}: {exc}") from exc
        try:
            self.connection = duckdb.connect(str(self.db_path), read_only=read_only)
        except duckdb.Error as exc:
            raise WriteError(f"Unable to open DuckDB database {self.db_path}: {exc}") from exc
        logger.debug("Connected to DuckDB at %s (read_only=%s)", self.db_path, read_only)

    def __enter__(self) -> "DuckDBLoader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def target(self, schema: str, table: str) -> Tuple[str, str]:
        """Return the (schema, table) pair a source table is stored under."""
        if self.separator == ".":
            return schema, table
        return "main", f"{schema}{self.separator}{table}"

    def ensure_schema(self, schema: str) -> None:
        if schema == "main":
            return
        self.connection.execute(f"CREATE SCHEMA IF NOT EXISTS {quote_identifier(schema)}")

    def replace_table(self, schema: str, table: str, parquet_path: str | Path) -> int:
        """Create or replace a table from a Parquet file and return its row count."""
        if self.read_only:
            raise RuntimeError("Cannot write to read-only database")
        db_schema, db_table = self.target(schema, table)
        qualified = f"{quote_identifier(db_schema)}.{quote_identifier(db_table)}"
        try:
            self.ensure_schema(db_schema)
            self.connection.execute(
                f"CREATE OR REPLACE TABLE {qualified} AS "
                f"SELECT * FROM read_parquet({quote_literal(str(parquet_path))})"
            )
            rows = self.connection.execute(f"SELECT COUNT(*) FROM {qualified}").fetchone()[0]
        except duckdb.Error as exc:
            raise WriteError(f"Unable to load {parquet_path} into DuckDB table {qualified}: {exc}") from exc
        logger.info("Loaded %d rows into DuckDB table %s", rows, qualified)
        return int(rows)

    def list_tables(self, schema: str) -> List[str]:
        db_schema, prefix = self.target(schema, "")
        result = self.connection.execute(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = ?
            ORDER BY table_name
            """,
            [db_schema],
        ).fetchall()
        names = [row[0] for row in result]
        if prefix:
            return [name[len(prefix):] for name in names if name.startswith(prefix)]
        return names

    def row_count(self, schema: str, table: str) -> int:
        db_schema, db_table = self.target(schema, table)
        qualified = f"{quote_identifier(db_schema)}.{quote_identifier(db_table)}"
        return int(self.connection.execute(f"SELECT COUNT(*) FROM {qualified}").fetchone()[0])

    def close(self) -> None:  # pragma: no cover - passthrough
        self.connection.close()
