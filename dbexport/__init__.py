"""Export relational database tables and queries to Parquet and DuckDB."""

__version__ = "0.1.0"
