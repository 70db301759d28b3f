"""Classify the lines of a rendered DBMS_XPLAN report.

Only the plan table itself is touched by the annotators. Everything around it
(SQL text, predicate sections, notes, our own footer) is passthrough:

    Plan hash value: 3625962092                      passthrough
                                                     passthrough
    ------------------------------------------      separator (next is header)
    | Id  | Operation          | Name    |          header
    ------------------------------------------      separator (after header)
    |   0 | SELECT STATEMENT   |         |          data, id 0
    |*  1 |  TABLE ACCESS FULL | EMP     |          data, id 1
    ------------------------------------------      separator (after data)
                                                     passthrough
    Predicate Information (identified by ...):      passthrough
    ---------------------------------------------   passthrough (not bordering the plan)
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Sequence

from .schemas import LineKind, TextLine

# ── Literal markers ─────────────────────────────────────────────────────

DELIMITER = "|"
RULE_CHARS = frozenset("-")
HEADER_TITLES = ("Id",)
# "*" flags a row with predicates, "-" an inactive row of an adaptive plan
STEP_MARKERS = "*-"

_HEADER_RE = re.compile(
    r"^\|\s*(?:%s)\s*\|" % "|".join(re.escape(t) for t in HEADER_TITLES)
)
_DATA_RE = re.compile(
    r"^\|\s*[%s]?\s*(?P<id>\d+)\s*\|" % re.escape(STEP_MARKERS)
)

# Kinds after which a rule line closes the plan table, or a delimited line
# belongs to it
_TABLE_KINDS = (LineKind.HEADER, LineKind.DATA, LineKind.CONTINUATION)


def is_rule(text: str) -> bool:
    """True when the line consists only of rule-drawing characters."""
    body = text.rstrip()
    return bool(body) and all(ch in RULE_CHARS for ch in body)


def is_header(text: str) -> bool:
    return bool(_HEADER_RE.match(text))


def extract_step_id(text: str) -> Optional[int]:
    """Step id of a plan data line, or None when the line is not one."""
    match = _DATA_RE.match(text)
    if match is None:
        return None
    return int(match.group("id"))


def classify_line(
    text: str,
    next_text: Optional[str] = None,
    previous_kind: Optional[LineKind] = None,
) -> TextLine:
    """Classify one report line.

    Args:
        text: The line to classify (without trailing newline).
        next_text: The following line, used to spot the rule above a header.
        previous_kind: Kind of the preceding line, used to spot the rules
            and continuation lines that belong to the plan table.
    """
    if is_rule(text):
        if (next_text is not None and is_header(next_text)) or previous_kind in _TABLE_KINDS:
            return TextLine(text, LineKind.SEPARATOR)
        return TextLine(text, LineKind.PASSTHROUGH)

    if is_header(text):
        return TextLine(text, LineKind.HEADER)

    step_id = extract_step_id(text)
    if step_id is not None:
        return TextLine(text, LineKind.DATA, step_id)

    if previous_kind in _TABLE_KINDS and DELIMITER in text:
        return TextLine(text, LineKind.CONTINUATION)

    return TextLine(text, LineKind.PASSTHROUGH)


def iter_classified(lines: Sequence[str]) -> Iterator[TextLine]:
    """Classify lines in order with one line of lookahead."""
    previous: Optional[LineKind] = None
    for index, text in enumerate(lines):
        next_text = lines[index + 1] if index + 1 < len(lines) else None
        line = classify_line(text, next_text, previous)
        previous = line.kind
        yield line


def classify_lines(lines: Sequence[str]) -> List[TextLine]:
    return list(iter_classified(lines))
