"""Exceptions raised by the plan annotation pipeline."""

from __future__ import annotations

from typing import Iterable, Optional


class PlanOrderError(Exception):
    """Base class for all planorder errors."""


class CatalogAccessError(PlanOrderError):
    """The plan catalog or report renderer could not be reached or queried."""


class TreeIntegrityError(PlanOrderError):
    """Plan steps do not form a single tree rooted at id 0."""

    def __init__(self, message: str, step_ids: Iterable[int] = ()):
        self.step_ids = tuple(sorted(set(step_ids)))
        if self.step_ids:
            message = f"{message} (step ids: {', '.join(str(i) for i in self.step_ids)})"
        super().__init__(message)


class RenderMismatchError(PlanOrderError):
    """A report data line references a step id missing from the catalog."""

    def __init__(self, step_id: int, line: str, group_key: Optional[object] = None):
        self.step_id = step_id
        self.line = line
        self.group_key = group_key
        where = f" in plan {group_key}" if group_key is not None else ""
        super().__init__(f"No catalog entry for step id {step_id}{where}: {line.rstrip()}")


class ParameterError(PlanOrderError):
    """A plan identifier, selector or format option is malformed."""
