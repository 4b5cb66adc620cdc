"""Results of an export run."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .planner import WorkItem


@dataclass
class ItemResult:
    """Outcome of a single work item."""

    item: WorkItem
    success: bool
    rows: int = 0
    parquet_path: Optional[Path] = None
    loaded_to_duckdb: bool = False
    # "extract", "parquet" or "duckdb"; a "duckdb" failure still has its Parquet file
    failed_step: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


@dataclass
class SourceResult:
    source_name: str
    items: List[ItemResult] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def failed_items(self) -> List[ItemResult]:
        return [r for r in self.items if not r.success]

    @property
    def success(self) -> bool:
        return self.error is None and not self.failed_items


@dataclass
class ExportReport:
    sources: List[SourceResult] = field(default_factory=list)

    @property
    def items(self) -> List[ItemResult]:
        return [r for source in self.sources for r in source.items]

    @property
    def success(self) -> bool:
        return all(source.success for source in self.sources)

    @property
    def failure_count(self) -> int:
        return sum(len(s.failed_items) + (1 if s.error else 0) for s in self.sources)

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def get(self, source_name: str, stem: str) -> List[ItemResult]:
        """All results for one output stem, in execution order."""
        return [
            r for r in self.items
            if r.item.source_name == source_name and r.item.output_stem == stem
        ]

    def summary_frame(self) -> pd.DataFrame:
        """One row per work item, plus one row per source that failed before planning."""
        rows = []
        for source in self.sources:
            if source.error:
                rows.append(
                    {
                        "source": source.source_name,
                        "output": "",
                        "kind": "source",
                        "status": "failed",
                        "rows": 0,
                        "parquet": "",
                        "step": "source",
                        "error": source.error,
                    }
                )
            for r in source.items:
                rows.append(
                    {
                        "source": r.item.source_name,
                        "output": r.item.output_stem,
                        "kind": r.item.kind.value,
                        "status": "ok" if r.success else "failed",
                        "rows": r.rows,
                        "parquet": "written" if r.parquet_path is not None else "",
                        "step": r.failed_step or "",
                        "error": r.error or "",
                    }
                )
        return pd.DataFrame(
            rows, columns=["source", "output", "kind", "status", "rows", "parquet", "step", "error"]
        )
