"""Exception hierarchy for the exporter."""
from __future__ import annotations


class ExportError(RuntimeError):
    """Base class for all exporter failures."""


class ConfigError(ExportError):
    """Raised when the configuration file is missing, malformed or invalid."""


class SourceConnectionError(ExportError):
    """Raised when a source database cannot be reached or authenticated."""


class QueryError(ExportError):
    """Raised when a table fetch or custom query fails on the source."""


class WriteError(ExportError):
    """Raised when a Parquet file or DuckDB table cannot be written."""


__all__ = [
    "ExportError",
    "ConfigError",
    "SourceConnectionError",
    "QueryError",
    "WriteError",
]
