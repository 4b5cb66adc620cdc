"""Work-item planning for a single source."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional

from .limits import resolve_row_limit

if TYPE_CHECKING:
    from dbexport.config import DataSourceConfig
    from dbexport.data_access.extractor import SourceExtractor

logger = logging.getLogger(__name__)


class WorkItemKind(str, Enum):
    TABLE_EXPORT = "table"
    CUSTOM_QUERY = "query"


@dataclass(frozen=True)
class WorkItem:
    """One table export or custom query with its effective row cap."""

    source_name: str
    output_stem: str
    kind: WorkItemKind
    table: Optional[str] = None
    query: Optional[str] = None
    row_limit: Optional[int] = None

    @property
    def description(self) -> str:
        return f"{self.source_name}/{self.output_stem} ({self.kind.value})"


def plan_work_items(
    source: "DataSourceConfig",
    tables: Iterable[str],
    default_limit: Optional[int] = None,
) -> List[WorkItem]:
    """Build the ordered work list for ``source``.

    Table exports come first, in the order given, followed by custom queries
    in configuration order. A custom query sharing a stem with a table (or
    with an earlier query) therefore runs later and overwrites that output.
    """
    items = [
        WorkItem(
            source_name=source.name,
            output_stem=table,
            kind=WorkItemKind.TABLE_EXPORT,
            table=table,
            row_limit=resolve_row_limit(source, table, default_limit),
        )
        for table in tables
    ]
    table_stems = {item.output_stem for item in items}
    for custom in source.custom_queries:
        if custom.name in table_stems:
            logger.info(
                "Custom query %s on %s replaces the table export of the same name",
                custom.name,
                source.name,
            )
        items.append(
            WorkItem(
                source_name=source.name,
                output_stem=custom.name,
                kind=WorkItemKind.CUSTOM_QUERY,
                query=custom.query,
            )
        )
    return items


def plan(
    source: "DataSourceConfig",
    extractor: "SourceExtractor",
    default_limit: Optional[int] = None,
) -> List[WorkItem]:
    """Discover the source's tables and plan them with its custom queries."""
    tables = extractor.discover_tables()
    logger.info("Found %d tables in %s", len(tables), source.name)
    unused = sorted(set(source.override_limits) - set(tables))
    if unused:
        logger.debug("Unused row-limit overrides for %s: %s", source.name, unused)
    return plan_work_items(source, tables, default_limit)


__all__ = ["WorkItem", "WorkItemKind", "plan", "plan_work_items"]
