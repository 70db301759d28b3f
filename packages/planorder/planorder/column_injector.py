"""Splice the Pid and Ord columns into the plan table.

The new cells go immediately after the second delimiter of each line, i.e.
between the Id column and the Operation column:

    | Id  | Operation         |        | Id  | Pid | Ord | Operation         |
    |   0 | SELECT STATEMENT  |   ->   |   0 |     |   2 | SELECT STATEMENT  |
    |   1 |  TABLE ACCESS FULL|        |   1 |   0 |   1 |  TABLE ACCESS FULL|

Each cell is right-justified to the group's column width, which includes the
trailing " |". Separators grow by two column widths of rule characters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import RenderMismatchError
from .line_classifier import DELIMITER
from .schemas import LineKind, MismatchSeverity, PlanMap, TextLine

logger = logging.getLogger(__name__)

PARENT_LABEL = "Pid"
ORDER_LABEL = "Ord"
RULE_CHAR = "-"
SPLICE_OCCURRENCE = 2


@dataclass
class SplicedLine:
    """A report line cut at the splice point.

    ``head`` ends with the second delimiter, ``cells`` holds the injected
    columns and ``tail`` is everything to the right of them. Lines that were
    not annotated keep their whole text in ``head``.
    """
    kind: LineKind
    head: str
    cells: str = ""
    tail: str = ""
    step_id: Optional[int] = None
    annotated: bool = False

    @property
    def text(self) -> str:
        return self.head + self.cells + self.tail


def splice_index(text: str, occurrence: int = SPLICE_OCCURRENCE) -> Optional[int]:
    """Index just past the n-th delimiter, or None if there are fewer."""
    position = -1
    for _ in range(occurrence):
        position = text.find(DELIMITER, position + 1)
        if position < 0:
            return None
    return position + 1


def format_cell(value: object, width: int) -> str:
    """Right-justify ``value`` plus the closing delimiter to ``width``."""
    content = "" if value is None else str(value)
    return f"{content} {DELIMITER}".rjust(width)


class ColumnInjector:
    """Adds parent id and execution order cells to one plan group's lines."""

    def __init__(
        self,
        plan_map: PlanMap,
        severity: MismatchSeverity = MismatchSeverity.IGNORE,
    ):
        self.plan_map = plan_map
        self.severity = MismatchSeverity(severity)
        self.width = plan_map.column_width
        self.unmatched: List[int] = []

    def inject(self, line: TextLine) -> SplicedLine:
        """Annotate a single classified line."""
        if not self.plan_map:
            return SplicedLine(line.kind, line.text, step_id=line.step_id)

        if line.kind == LineKind.SEPARATOR:
            return SplicedLine(
                line.kind, "", RULE_CHAR * (self.width * 2), line.text, annotated=True
            )

        if line.kind == LineKind.HEADER:
            cells = format_cell(PARENT_LABEL, self.width) + format_cell(ORDER_LABEL, self.width)
            return self._splice(line, cells)

        if line.kind == LineKind.DATA:
            entry = self.plan_map.lookup(line.step_id)
            if entry is None:
                self._mismatch(line)
                return SplicedLine(line.kind, line.text, step_id=line.step_id)
            cells = format_cell(entry.parent_id, self.width) + format_cell(entry.order_id, self.width)
            return self._splice(line, cells)

        if line.kind == LineKind.CONTINUATION:
            blank = format_cell(None, self.width)
            return self._splice(line, blank + blank)

        return SplicedLine(line.kind, line.text)

    def inject_all(self, lines: List[TextLine]) -> List[SplicedLine]:
        return [self.inject(line) for line in lines]

    def _splice(self, line: TextLine, cells: str) -> SplicedLine:
        index = splice_index(line.text)
        if index is None:
            return SplicedLine(line.kind, line.text, step_id=line.step_id)
        return SplicedLine(
            line.kind,
            line.text[:index],
            cells,
            line.text[index:],
            step_id=line.step_id,
            annotated=True,
        )

    def _mismatch(self, line: TextLine) -> None:
        self.unmatched.append(line.step_id)
        error = RenderMismatchError(line.step_id, line.text, self.plan_map.group_key)
        if self.severity == MismatchSeverity.ERROR:
            raise error
        if self.severity == MismatchSeverity.WARN:
            logger.warning(f"{error}; row left unannotated")
        else:
            logger.debug(f"{error}; row left unannotated")
