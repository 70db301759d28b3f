"""Execution order from a flat parent-pointer plan table.

The plan catalog stores each operation with its parent id only. Walking the
tree depth-first from the root, taking children in descending id order, and
then reversing the visit sequence gives the physical execution order: every
child finishes before its parent, and siblings finish lowest id first.

    Id  Operation                      Pid  Ord
     0  SELECT STATEMENT                      6
     1   MERGE JOIN                      0    5
     2    TABLE ACCESS BY INDEX ROWID    1    2
     3     INDEX FULL SCAN               2    1
     4    SORT JOIN                      1    4
     5     TABLE ACCESS FULL             4    3
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from .errors import TreeIntegrityError
from .schemas import ExecutionOrder, PlanMap, PlanStep

logger = logging.getLogger(__name__)

ROOT_ID = 0


def _check_steps(steps: List[PlanStep]) -> Dict[int, PlanStep]:
    """Index steps by id, rejecting anything that cannot form one tree."""
    by_id: Dict[int, PlanStep] = {}
    duplicates = set()
    for step in steps:
        if step.id is None or step.id < 0:
            raise TreeIntegrityError("Step id must be a non-negative integer", [])
        if step.id in by_id:
            duplicates.add(step.id)
        by_id[step.id] = step

    if ROOT_ID in duplicates:
        raise TreeIntegrityError("Plan has more than one root step", [ROOT_ID])
    if duplicates:
        raise TreeIntegrityError("Duplicate step ids", duplicates)

    root = by_id.get(ROOT_ID)
    if root is None:
        raise TreeIntegrityError("Plan has no root step (id 0)", by_id.keys())
    if root.parent_id is not None:
        raise TreeIntegrityError("Root step must not have a parent", [ROOT_ID])

    orphans = [s.id for s in steps if s.id != ROOT_ID and s.parent_id is None]
    if orphans:
        raise TreeIntegrityError("Plan has more than one root step", orphans)

    dangling = [s.id for s in steps if s.parent_id is not None and s.parent_id not in by_id]
    if dangling:
        raise TreeIntegrityError("Parent id references a missing step", dangling)

    return by_id


def _children_map(steps: Iterable[PlanStep]) -> Dict[int, List[int]]:
    """Parent id -> child ids, in ascending order."""
    children: Dict[int, List[int]] = defaultdict(list)
    for step in steps:
        if step.parent_id is not None:
            children[step.parent_id].append(step.id)
    for ids in children.values():
        ids.sort()
    return children


def traversal_order(steps: Iterable[PlanStep]) -> List[int]:
    """Step ids in depth-first order from the root, highest child id first.

    Raises:
        TreeIntegrityError: If the steps do not form a single tree.
    """
    steps = list(steps)
    by_id = _check_steps(steps)
    children = _children_map(steps)

    visited: List[int] = []
    seen = set()
    stack = [ROOT_ID]
    while stack:
        step_id = stack.pop()
        if step_id in seen:
            raise TreeIntegrityError("Plan contains a cycle", [step_id])
        seen.add(step_id)
        visited.append(step_id)
        # Ascending push so the highest id is popped first
        stack.extend(children.get(step_id, ()))

    unreachable = set(by_id) - seen
    if unreachable:
        raise TreeIntegrityError("Steps are not reachable from the root (cycle)", unreachable)
    return visited


def ordered_steps(steps: Iterable[PlanStep]) -> List[PlanStep]:
    """Steps in traversal order (see traversal_order)."""
    steps = list(steps)
    by_id = {s.id: s for s in steps}
    return [by_id[i] for i in traversal_order(steps)]


def build_plan_map(steps: Iterable[PlanStep], group_key: Optional[Any] = None) -> PlanMap:
    """Compute parent id and execution order for every step of one plan.

    Args:
        steps: Flat catalog rows of a single plan group.
        group_key: Group identifier stored on the returned map.

    Returns:
        PlanMap keyed by step id. Empty when there are no steps.

    Raises:
        TreeIntegrityError: On duplicate/missing roots, dangling parents,
            duplicate ids or cycles.
    """
    steps = list(steps)
    if not steps:
        logger.debug(f"No plan steps for group {group_key!r}")
        return PlanMap(group_key=group_key)

    visited = traversal_order(steps)
    parents = {s.id: s.parent_id for s in steps}
    total = len(visited)

    entries = {
        step_id: ExecutionOrder(
            id=step_id,
            parent_id=parents[step_id],
            order_id=total - position,
        )
        for position, step_id in enumerate(visited)
    }
    logger.debug(f"Built plan map for group {group_key!r}: {total} steps")
    return PlanMap(group_key=group_key, entries=entries)
