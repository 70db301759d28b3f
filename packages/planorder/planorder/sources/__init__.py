"""Plan step catalogs and report renderers.

Oracle sources are imported lazily so the offline file sources work without
loading SQLAlchemy.
"""

from .base import PlanReportRenderer, PlanSource, PlanStepCatalog, PlanTarget
from .files import FileCatalog, FileReportRenderer, parse_catalog, split_plan_blocks


def __getattr__(name: str):
    """Lazy import for the Oracle executor and sources."""
    if name in ("OracleExecutor", "PlanTableSource", "CursorCacheSource", "AwrSource"):
        from . import oracle
        return getattr(oracle, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Contracts
    "PlanTarget",
    "PlanStepCatalog",
    "PlanReportRenderer",
    "PlanSource",
    # Files
    "FileCatalog",
    "FileReportRenderer",
    "parse_catalog",
    "split_plan_blocks",
    # Oracle (lazy)
    "OracleExecutor",
    "PlanTableSource",
    "CursorCacheSource",
    "AwrSource",
]
