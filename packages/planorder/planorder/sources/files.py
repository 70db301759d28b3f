"""Offline plan sources: a captured report and a catalog export on disk.

The catalog is either JSON (a list of rows, or {"steps": [...]}) or CSV with
a header row, using the plan table column names:

    id,parent_id,object_owner,object_name,plan_hash_value
    0,,,,1234567
    1,0,SCOTT,EMP,1234567

The report is the DBMS_XPLAN text as spooled from SQL*Plus or any client.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, TextIO, Union

from ..errors import CatalogAccessError, TreeIntegrityError
from ..schemas import PlanStep, ReportBlock
from .base import PlanSource, PlanTarget

logger = logging.getLogger(__name__)

PLAN_HASH_RE = re.compile(r"^\s*Plan hash value:\s*(\d+)")
SQL_ID_LINE_RE = re.compile(r"^\s*SQL_ID\b")


def _read_text(source: Union[str, Path, TextIO]) -> str:
    if hasattr(source, "read"):
        return source.read()
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogAccessError(f"Cannot read {path}: {e}") from e


def parse_catalog(content: str, fmt: str = "json") -> List[PlanStep]:
    """Parse catalog rows from JSON or CSV text."""
    if fmt == "csv":
        rows: Iterable[Dict[str, Any]] = csv.DictReader(io.StringIO(content))
    else:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise TreeIntegrityError(f"Catalog is not valid JSON: {e}") from e
        rows = data.get("steps", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise TreeIntegrityError("Catalog must be a list of rows")

    steps = []
    for number, row in enumerate(rows, 1):
        try:
            steps.append(PlanStep.from_row(row))
        except (ValueError, TypeError, AttributeError) as e:
            raise TreeIntegrityError(f"Malformed catalog row {number}: {e}") from e
    return steps


def split_plan_blocks(lines: List[str]) -> Dict[int, List[str]]:
    """Split a multi-plan report into blocks keyed by plan hash value.

    A block starts at the SQL_ID line preceding its "Plan hash value" line
    (or at that line when there is none); lines before the first block
    belong to the first block.
    """
    markers = []
    for index, line in enumerate(lines):
        match = PLAN_HASH_RE.match(line)
        if match:
            markers.append((index, int(match.group(1))))
    if not markers:
        return {}

    starts = []
    previous_marker = -1
    for index, _ in markers:
        start = index
        for back in range(index - 1, previous_marker, -1):
            if SQL_ID_LINE_RE.match(lines[back]):
                start = back
                break
        starts.append(start)
        previous_marker = index
    starts[0] = 0

    blocks: Dict[int, List[str]] = {}
    for position, (start, (_, plan_hash)) in enumerate(zip(starts, markers)):
        end = starts[position + 1] if position + 1 < len(starts) else len(lines)
        blocks.setdefault(plan_hash, []).extend(lines[start:end])
    return blocks


class FileCatalog(PlanSource):
    """Catalog rows from a JSON or CSV file."""

    name = "file"

    def __init__(self, path: Union[str, Path], fmt: Optional[str] = None):
        self.path = Path(path)
        self.fmt = fmt or ("csv" if self.path.suffix.lower() == ".csv" else "json")

    def fetch_steps(self, target: Optional[PlanTarget] = None) -> List[PlanStep]:
        steps = parse_catalog(_read_text(self.path), self.fmt)
        logger.debug(f"Loaded {len(steps)} step(s) from {self.path}")
        return steps


class FileReportRenderer(PlanSource):
    """Report lines from a captured DBMS_XPLAN text file or stream."""

    name = "file"

    def __init__(self, source: Union[str, Path, TextIO]):
        self.lines = _read_text(source).splitlines()
        self._blocks: Optional[Dict[int, List[str]]] = None

    def render(self, target: Optional[PlanTarget] = None, group_key: Any = None) -> List[str]:
        """All lines, or the block of one plan hash value.

        A report without per-plan blocks is returned whole for any group.
        """
        if group_key is None:
            return list(self.lines)
        blocks = self._split()
        if not blocks:
            return list(self.lines)
        if group_key not in blocks:
            logger.warning(f"No 'Plan hash value: {group_key}' block in report")
            return []
        return list(blocks[group_key])

    def render_all(self, target: Optional[PlanTarget], group_keys: Sequence[Any]) -> List[ReportBlock]:
        """Every block of the captured report, whether the catalog has it or not.

        The text was rendered before the catalog was read, so nothing is
        dropped: blocks without a catalog group pass through unannotated.
        """
        blocks = self._split()
        if not blocks:
            return [ReportBlock(None, list(self.lines))]
        # A lone block is paired with a lone catalog group whatever its key
        if len(blocks) > 1 or len(group_keys) > 1:
            for key in group_keys:
                if key not in blocks:
                    logger.warning(f"No 'Plan hash value: {key}' block in report")
        return [ReportBlock(key, list(lines)) for key, lines in blocks.items()]

    def _split(self) -> Dict[int, List[str]]:
        if self._blocks is None:
            self._blocks = split_plan_blocks(self.lines)
        return self._blocks
