"""Collaborator contracts: where plan steps and rendered reports come from."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, List, Optional, Protocol, Sequence

from ..parameters import DEFAULT_FORMAT
from ..schemas import PlanStep, ReportBlock


@dataclass(frozen=True)
class PlanTarget:
    """Which plan to report on.

    Attributes:
        identifier: Plan table name (display) or SQL_ID (cursor, AWR).
        selector: Statement id, cursor child number or plan hash value.
        format: DBMS_XPLAN format options, passed through unchanged.
        dbid: Database id for AWR reports (None = current database).
    """
    identifier: Optional[str] = None
    selector: Any = None
    format: str = DEFAULT_FORMAT
    dbid: Optional[int] = None

    def with_values(self, **changes: Any) -> "PlanTarget":
        return replace(self, **changes)

    def describe(self) -> str:
        parts = [str(self.identifier or "<default>")]
        if self.selector is not None:
            parts.append(str(self.selector))
        if self.dbid is not None:
            parts.append(f"dbid={self.dbid}")
        return "/".join(parts)


class PlanStepCatalog(Protocol):
    """Returns the flat step rows for a plan target."""

    def resolve(self, target: PlanTarget) -> PlanTarget:
        """Fill in defaulted parts of the target (e.g. the last SQL_ID)."""
        ...

    def fetch_steps(self, target: PlanTarget) -> List[PlanStep]:
        """Return every step of every plan group for the target."""
        ...


class PlanReportRenderer(Protocol):
    """Returns the unannotated, fixed-width report lines."""

    def render(self, target: PlanTarget, group_key: Any = None) -> List[str]:
        """Render the plan of one group (None for single-plan reports)."""
        ...

    def render_all(self, target: PlanTarget, group_keys: Sequence[Any]) -> List[ReportBlock]:
        """Render the blocks of a whole report for the catalog's groups."""
        ...


class PlanSource:
    """Base for sources acting as both catalog and renderer."""

    name = "source"

    def resolve(self, target: PlanTarget) -> PlanTarget:
        return target

    def fetch_steps(self, target: PlanTarget) -> List[PlanStep]:
        raise NotImplementedError

    def render(self, target: PlanTarget, group_key: Any = None) -> List[str]:
        raise NotImplementedError

    def render_all(self, target: PlanTarget, group_keys: Sequence[Any]) -> List[ReportBlock]:
        """One rendered block per catalog group."""
        return [ReportBlock(key, self.render(target, key)) for key in group_keys]
