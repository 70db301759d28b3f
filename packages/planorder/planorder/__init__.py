"""planorder — parent id and execution order columns for DBMS_XPLAN reports.

Pipeline:
1. Fetch:     plan steps (id, parent id, owner, name) from the catalog
2. Order:     depth-first walk -> execution order per step (per plan group)
3. Classify:  separator / header / data / continuation / passthrough lines
4. Inject:    Pid and Ord columns after the Id column
5. Qualify:   OWNER.NAME in a widened Name column (optional)

Usage:
    from planorder import annotate_report, ReportBlock, PlanStep

    steps = [PlanStep(0), PlanStep(1, 0, "SCOTT", "EMP")]
    report = annotate_report([ReportBlock(None, lines)], steps)
    print(report.render())
"""

__version__ = "0.1.0"

from .errors import (
    CatalogAccessError,
    ParameterError,
    PlanOrderError,
    RenderMismatchError,
    TreeIntegrityError,
)
from .schemas import (
    AnnotatedReport,
    AnnotateOptions,
    ExecutionOrder,
    FooterPlacement,
    LineKind,
    MismatchSeverity,
    PlanMap,
    PlanStep,
    ReportBlock,
    TextLine,
    column_width,
)
from .plan_tree import build_plan_map, ordered_steps, traversal_order
from .line_classifier import classify_line, classify_lines
from .column_injector import ColumnInjector
from .name_qualifier import NameQualifier, NameSizing, size_names
from .group_router import FOOTER_LINES, annotate_block, annotate_report, partition_steps
from .pipeline import annotate_plan

__all__ = [
    "__version__",
    # Errors
    "PlanOrderError",
    "CatalogAccessError",
    "TreeIntegrityError",
    "RenderMismatchError",
    "ParameterError",
    # Schemas
    "PlanStep",
    "ExecutionOrder",
    "PlanMap",
    "LineKind",
    "TextLine",
    "ReportBlock",
    "AnnotatedReport",
    "AnnotateOptions",
    "MismatchSeverity",
    "FooterPlacement",
    "column_width",
    # Pipeline stages
    "build_plan_map",
    "ordered_steps",
    "traversal_order",
    "classify_line",
    "classify_lines",
    "ColumnInjector",
    "NameQualifier",
    "NameSizing",
    "size_names",
    "partition_steps",
    "annotate_block",
    "annotate_report",
    "annotate_plan",
    "FOOTER_LINES",
]
