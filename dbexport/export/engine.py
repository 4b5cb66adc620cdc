"""Export driver: runs every source's work items and collects the results."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from dbexport.config import DataSourceConfig, ExportConfig
from dbexport.data_access.duckdb_adapter import DuckDBLoader
from dbexport.data_access.extractor import SourceExtractor
from dbexport.data_access.parquet_writer import ParquetWriter
from dbexport.errors import ExportError, QueryError, SourceConnectionError, WriteError

from .planner import WorkItem, plan
from .report import ExportReport, ItemResult, SourceResult

logger = logging.getLogger(__name__)

ExtractorFactory = Callable[[DataSourceConfig], SourceExtractor]


class ExportEngine:
    """Exports each configured source to Parquet and, optionally, DuckDB.

    Sources run one after another in configuration order. Within a source a
    failing table or query is recorded and the next item still runs; a source
    that cannot be reached is recorded and the next source still runs.
    """

    def __init__(
        self,
        config: ExportConfig,
        export_dir: str | Path,
        default_limit: Optional[int] = None,
        duckdb_path: Optional[str | Path] = None,
        separator: str = ".",
        extractor_factory: ExtractorFactory = SourceExtractor,
        compression: str = "snappy",
    ) -> None:
        self.config = config
        self.default_limit = default_limit
        self.duckdb_path = Path(duckdb_path) if duckdb_path else None
        self.separator = separator
        self.extractor_factory = extractor_factory
        self.writer = ParquetWriter(export_dir, compression=compression)

    def run(self) -> ExportReport:
        report = ExportReport()
        loader = DuckDBLoader(self.duckdb_path, separator=self.separator) if self.duckdb_path else None
        try:
            total = len(self.config.sources)
            for idx, source in enumerate(self.config.sources, 1):
                logger.info("Processing source %d/%d: %s", idx, total, source.name)
                report.sources.append(self._run_source(source, loader))
        finally:
            if loader is not None:
                loader.close()

        if report.success:
            logger.info("Export complete: %d items written", len(report.items))
        else:
            logger.error("Export finished with %d failures", report.failure_count)
        return report

    def _run_source(self, source: DataSourceConfig, loader: Optional[DuckDBLoader]) -> SourceResult:
        result = SourceResult(source_name=source.name)
        extractor = self.extractor_factory(source)
        try:
            self.writer.source_dir(source.name)
            items = plan(source, extractor, self.default_limit)
            for item in items:
                result.items.append(self._run_item(item, extractor, loader))
        except (SourceConnectionError, QueryError, WriteError) as exc:
            # Only reachable before any item ran: connection, discovery or directory setup.
            logger.error("Skipping source %s: %s", source.name, exc)
            result.error = str(exc)
            result.error_type = type(exc).__name__
        finally:
            extractor.close()
        return result

    def _run_item(
        self, item: WorkItem, extractor: SourceExtractor, loader: Optional[DuckDBLoader]
    ) -> ItemResult:
        logger.info("Exporting %s (limit=%s)", item.description, item.row_limit)
        result = ItemResult(item=item, success=False)
        step = "extract"
        try:
            table = extractor.fetch(item)
            step = "parquet"
            result.parquet_path = self.writer.write(table, item.source_name, item.output_stem)
            result.rows = table.num_rows
            del table
            if loader is not None:
                step = "duckdb"
                loader.replace_table(item.source_name, item.output_stem, result.parquet_path)
                result.loaded_to_duckdb = True
            result.success = True
        except ExportError as exc:
            if result.parquet_path is not None:
                # The Parquet file is complete and stays; only the DuckDB copy is missing.
                logger.error(
                    "Failed to load %s into DuckDB, Parquet output kept at %s: %s",
                    item.description,
                    result.parquet_path,
                    exc,
                )
            else:
                logger.error("Failed to export %s: %s", item.description, exc)
            result.failed_step = step
            result.error = str(exc)
            result.error_type = type(exc).__name__
        return result


def run_export(
    config: ExportConfig,
    default_limit: Optional[int],
    export_dir: str | Path,
    duckdb_path: Optional[str | Path] = None,
    separator: str = ".",
    extractor_factory: ExtractorFactory = SourceExtractor,
) -> ExportReport:
    """Run a full export and return its report."""
    engine = ExportEngine(
        config,
        export_dir,
        default_limit=default_limit,
        duckdb_path=duckdb_path,
        separator=separator,
        extractor_factory=extractor_factory,
    )
    return engine.run()
