"""planorder schemas.

Data structures shared by the annotation pipeline:
- Catalog: PlanStep, ExecutionOrder, PlanMap
- Report text: LineKind, TextLine, ReportBlock, AnnotatedReport
- Options: MismatchSeverity, FooterPlacement, AnnotateOptions
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

# Smallest width of an injected column, including its trailing " |"
MIN_COLUMN_WIDTH = 6
COLUMN_WIDTH_MARGIN = 3


class LineKind(str, Enum):
    """Classification of a single report line."""
    SEPARATOR = "separator"
    HEADER = "header"
    DATA = "data"
    CONTINUATION = "continuation"
    PASSTHROUGH = "passthrough"


class MismatchSeverity(str, Enum):
    """What to do with a data line whose step id is not in the catalog."""
    IGNORE = "ignore"  # emit the row unannotated, silently
    WARN = "warn"      # emit the row unannotated, log a warning
    ERROR = "error"    # abort the report


class FooterPlacement(str, Enum):
    """Where the informational footer is appended."""
    REPORT = "report"  # once, after the last line
    GROUP = "group"    # once after every rendered plan block


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return int(value)


@dataclass(frozen=True)
class PlanStep:
    """One operation of an execution plan, as stored in the plan catalog."""
    id: int
    parent_id: Optional[int] = None
    object_owner: Optional[str] = None
    object_name: Optional[str] = None
    group_key: Any = None

    @property
    def qualified_name(self) -> Optional[str]:
        """OWNER.NAME, the bare name when there is no owner, or None."""
        if not self.object_name:
            return None
        if self.object_owner:
            return f"{self.object_owner}.{self.object_name}"
        return self.object_name

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PlanStep":
        """Build a step from a catalog row.

        Keys are matched case-insensitively. ``plan_hash_value`` is accepted
        as the group key; blank strings are treated as missing values.
        """
        data = {str(k).lower(): v for k, v in row.items()}
        if "id" not in data:
            raise ValueError(f"Catalog row has no id: {row!r}")
        group_key = data.get("group_key")
        if group_key is None or group_key == "":
            group_key = data.get("plan_hash_value")
        if isinstance(group_key, str):
            group_key = int(group_key) if group_key.strip().isdigit() else _clean(group_key)
        return cls(
            id=_to_int(data["id"]),
            parent_id=_to_int(data.get("parent_id")),
            object_owner=_clean(data.get("object_owner")),
            object_name=_clean(data.get("object_name")),
            group_key=group_key,
        )


@dataclass(frozen=True)
class ExecutionOrder:
    """Derived position of a step: its parent and its execution rank."""
    id: int
    parent_id: Optional[int]
    order_id: int


@dataclass
class PlanMap:
    """Per-group lookup table from step id to execution order."""
    group_key: Any = None
    entries: Dict[int, ExecutionOrder] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.entries)

    @property
    def max_order_id(self) -> int:
        return self.size

    @property
    def column_width(self) -> int:
        """Width of each injected column for this group."""
        return column_width(self.max_order_id)

    def lookup(self, step_id: int) -> Optional[ExecutionOrder]:
        return self.entries.get(step_id)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self.entries

    def __bool__(self) -> bool:
        return bool(self.entries)


def column_width(max_order_id: int) -> int:
    """Width of an injected column: digits of the largest rank + 3, at least 6."""
    return max(len(str(max_order_id)) + COLUMN_WIDTH_MARGIN, MIN_COLUMN_WIDTH)


@dataclass
class TextLine:
    """A classified line of the rendered report."""
    text: str
    kind: LineKind
    step_id: Optional[int] = None


@dataclass
class ReportBlock:
    """Rendered report lines for one plan group."""
    group_key: Any
    lines: List[str] = field(default_factory=list)


@dataclass
class AnnotatedReport:
    """Final output: annotated lines with their footers already appended."""
    lines: List[str] = field(default_factory=list)
    footer_count: int = 0
    unmatched_ids: List[int] = field(default_factory=list)

    def render(self) -> str:
        return "\n".join(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


@dataclass
class AnnotateOptions:
    """Switches for one annotation run."""
    qualify_names: bool = True
    mismatch_severity: MismatchSeverity = MismatchSeverity.IGNORE
    footer_placement: FooterPlacement = FooterPlacement.REPORT

    @classmethod
    def from_settings(cls, settings: Any = None) -> "AnnotateOptions":
        """Build options from application settings (defaults to get_settings())."""
        if settings is None:
            from .config import get_settings
            settings = get_settings()
        return cls(
            qualify_names=settings.qualify_names,
            mismatch_severity=MismatchSeverity(settings.mismatch_severity),
            footer_placement=FooterPlacement(settings.footer_placement),
        )
