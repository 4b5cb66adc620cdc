"""Extraction from source databases into Arrow tables."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import pyarrow as pa

from dbexport.data_access.column_types import (
    arrow_type_from_declared,
    arrow_type_from_description,
    build_table,
)
from dbexport.data_access.engines import Engine, get_engine
from dbexport.errors import QueryError, SourceConnectionError

if TYPE_CHECKING:
    from dbexport.config import DataSourceConfig
    from dbexport.export.planner import WorkItem

logger = logging.getLogger(__name__)


class SourceExtractor:
    """Runs queries against a single configured source.

    The connection is opened lazily on first use and kept until ``close``;
    use the extractor as a context manager to scope it to one source.
    Results keep the column types the source reports, even when no rows
    come back.
    """

    def __init__(self, source: "DataSourceConfig", engine: Optional[Engine] = None) -> None:
        self.source = source
        self.engine = engine or get_engine(source.database_type)
        self._connection: Any = None

    def __enter__(self) -> "SourceExtractor":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def connect(self) -> Any:
        if self._connection is None:
            try:
                self._connection = self.engine.connect(self.source)
            except Exception as exc:
                raise SourceConnectionError(
                    f"Unable to connect to {self.source.database_type.value} source "
                    f"{self.source.name!r}: {exc}"
                ) from exc
        return self._connection

    def run_query(self, query: str, declared: Optional[Dict[str, pa.DataType]] = None) -> pa.Table:
        """Run ``query`` and return its result as an Arrow table.

        Args:
            query: SQL executed verbatim.
            declared: Column types known from the catalog; these take
                precedence over what the driver reports.
        """
        connection = self.connect()
        logger.debug("Running on %s: %s", self.source.name, query.strip())
        cursor = None
        try:
            cursor = connection.cursor()
            cursor.execute(query)
            description = list(cursor.description or [])
            rows = cursor.fetchall() if description else []
        except Exception as exc:
            raise QueryError(f"Query failed on source {self.source.name!r}: {exc}") from exc
        finally:
            if cursor is not None:
                cursor.close()

        declared = declared or {}
        names = [entry[0] for entry in description]
        types = [
            declared.get(entry[0]) or arrow_type_from_description(entry, self.engine.database_type)
            for entry in description
        ]
        return build_table(names, rows, types)

    def declared_types(self, table: str) -> Dict[str, pa.DataType]:
        """Column types recorded in the catalog, for engines whose driver does not report them."""
        query = self.engine.columns_query(table)
        if query is None:
            return {}
        result = self.run_query(query)
        types = {}
        for name, declared in zip(result.column(0).to_pylist(), result.column(1).to_pylist()):
            arrow_type = arrow_type_from_declared(declared)
            if arrow_type is not None:
                types[name] = arrow_type
        return types

    def discover_tables(self) -> List[str]:
        """Return the source's base tables, sorted by name."""
        result = self.run_query(self.engine.tables_query)
        if result.num_columns == 0:
            return []
        names = []
        for value in result.column(0).to_pylist():
            if value is None:
                logger.warning("Skipping a missing table name returned by %s", self.source.name)
                continue
            names.append(str(value))
        return sorted(names)

    def fetch_table(self, table: str, limit: Optional[int] = None) -> pa.Table:
        declared = self.declared_types(table)
        return self.run_query(self.engine.rows_query(table, limit), declared)

    def fetch(self, item: "WorkItem") -> pa.Table:
        if item.table is not None:
            return self.fetch_table(item.table, item.row_limit)
        return self.run_query(item.query)

    def close(self) -> None:
        if self._connection is not None:
            try:
                self._connection.close()
            finally:
                self._connection = None
