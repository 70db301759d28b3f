"""Owner-qualify the Name column of an annotated plan table.

Runs after the column injector and only rewrites the part of each line to the
right of the injected cells. Sizing is a separate first pass over the catalog
so that every line of a group is widened by the same amount:

    | Name    |          | Name          |
    | DEPT    |    ->    | SCOTT.DEPT    |
    |         |          |               |
    | PK_DEPT |          | SCOTT.PK_DEPT |
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .column_injector import RULE_CHAR, SplicedLine
from .line_classifier import DELIMITER
from .schemas import LineKind, PlanStep

logger = logging.getLogger(__name__)

NAME_TITLE = "Name"


@dataclass(frozen=True)
class NameSizing:
    """Result of the sizing pass for one group."""
    max_len: int = 0
    name_pad: int = 0


def size_names(steps: Iterable[PlanStep]) -> NameSizing:
    """Longest qualified name and the extra width it needs over bare names."""
    max_len = 0
    max_bare = 0
    for step in steps:
        if not step.object_name:
            continue
        max_len = max(max_len, len(step.qualified_name))
        max_bare = max(max_bare, len(step.object_name))
    return NameSizing(max_len=max_len, name_pad=max_len - max_bare)


def find_name_field(tail: str) -> Optional[int]:
    """Index of the Name field within a header tail split on the delimiter."""
    for index, field in enumerate(tail.split(DELIMITER)):
        if field.strip() == NAME_TITLE:
            return index
    return None


class NameQualifier:
    """Widens the Name column and replaces names with OWNER.NAME."""

    def __init__(self, steps: Iterable[PlanStep], sizing: Optional[NameSizing] = None):
        steps = list(steps)
        self.steps: Dict[int, PlanStep] = {s.id: s for s in steps}
        self.sizing = sizing or size_names(steps)
        self.name_field: Optional[int] = None

    @property
    def name_pad(self) -> int:
        return self.sizing.name_pad

    def qualify_all(self, lines: List[SplicedLine]) -> List[SplicedLine]:
        """Qualify a whole group; the header locates the Name column."""
        for line in lines:
            if line.kind == LineKind.HEADER and line.annotated:
                self.name_field = find_name_field(line.tail)
                break
        if self.name_field is None:
            logger.debug("No Name column in report; names left as rendered")
            return lines
        return [self.qualify(line) for line in lines]

    def qualify(self, line: SplicedLine) -> SplicedLine:
        if not line.annotated or self.name_field is None:
            return line

        if line.kind == LineKind.SEPARATOR:
            line.tail = line.tail + RULE_CHAR * self.name_pad
            return line

        if line.kind not in (LineKind.HEADER, LineKind.DATA, LineKind.CONTINUATION):
            return line

        fields = line.tail.split(DELIMITER)
        # The last piece after the closing delimiter is not a field
        if self.name_field >= len(fields) - 1:
            return line

        field = fields[self.name_field]
        width = len(field) + self.name_pad
        step = self.steps.get(line.step_id) if line.kind == LineKind.DATA else None
        if step is not None and step.object_owner and step.object_name:
            field = f" {step.qualified_name}"
        fields[self.name_field] = field.ljust(width)
        line.tail = DELIMITER.join(fields)
        return line
