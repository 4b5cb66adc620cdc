"""Planning and execution of exports."""
from .engine import ExportEngine, run_export
from .limits import resolve_row_limit
from .planner import WorkItem, WorkItemKind, plan, plan_work_items
from .report import ExportReport, ItemResult, SourceResult

__all__ = [
    "ExportEngine",
    "ExportReport",
    "ItemResult",
    "SourceResult",
    "WorkItem",
    "WorkItemKind",
    "plan",
    "plan_work_items",
    "resolve_row_limit",
    "run_export",
]
