"""Parquet output for exported tables and queries.

Layout::

    <export_dir>/
    └── <source name>/
        ├── <table>.parquet
        └── <custom query>.parquet
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from dbexport.errors import WriteError

logger = logging.getLogger(__name__)


def _make_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Unable to create directory {path}: {exc}") from exc


class ParquetWriter:
    def __init__(self, export_dir: str | Path, *, compression: str = "snappy") -> None:
        self.export_dir = Path(export_dir)
        self.compression = compression
        _make_dir(self.export_dir)

    def source_dir(self, source_name: str) -> Path:
        """Create (if needed) and return the directory for one source."""
        path = self.export_dir / source_name
        _make_dir(path)
        return path

    def output_path(self, source_name: str, stem: str) -> Path:
        return self.export_dir / source_name / f"{stem}.parquet"

    def write(self, table: pa.Table, source_name: str, stem: str) -> Path:
        """Write ``table`` and return the final path.

        The file is written next to its destination and renamed into place,
        so a failed write never leaves a truncated Parquet file behind.
        """
        target = self.output_path(source_name, stem)
        self.source_dir(source_name)
        tmp_path = target.with_name(target.name + ".tmp")
        try:
            pq.write_table(table, tmp_path, compression=self.compression)
            os.replace(tmp_path, target)
        except Exception as exc:
            tmp_path.unlink(missing_ok=True)
            raise WriteError(f"Unable to write {target}: {exc}") from exc
        logger.info("Wrote %d rows to %s", table.num_rows, target)
        return target
