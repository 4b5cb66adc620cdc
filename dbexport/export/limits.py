"""Row-limit resolution for table exports."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from dbexport.config import DataSourceConfig


def _normalise(limit: Optional[int]) -> Optional[int]:
    if limit is None or limit < 0:
        return None
    return limit


def resolve_row_limit(
    source: "DataSourceConfig", table_name: str, default_limit: Optional[int] = None
) -> Optional[int]:
    """Return the row cap for ``table_name``; ``None`` means unlimited.

    A per-table override always wins over ``default_limit``. Negative values
    mean unlimited and zero exports the column schema with no rows. The cap
    is applied to the source's natural row order; use a custom query with
    ``ORDER BY`` to control which rows are kept.
    """
    if table_name in source.override_limits:
        return _normalise(source.override_limits[table_name])
    return _normalise(default_limit)


__all__ = ["resolve_row_limit"]
