"""Annotate single- and multi-plan reports group by group.

A report from the AWR repository can hold one plan per plan hash value. Each
group gets its own plan map, column width and name padding, computed from its
own steps only, and the annotated blocks are concatenated in ascending group
key order.

Every group's tree is built before any block is annotated, so a malformed
plan aborts the report without producing output.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from . import __version__
from .column_injector import ColumnInjector
from .line_classifier import classify_lines
from .name_qualifier import NameQualifier
from .plan_tree import build_plan_map
from .schemas import (
    AnnotatedReport,
    AnnotateOptions,
    FooterPlacement,
    PlanMap,
    PlanStep,
    ReportBlock,
)

logger = logging.getLogger(__name__)

FOOTER_LINES = (
    "",
    "About",
    "------",
    f"  - planorder v{__version__}: Pid = parent operation id, Ord = execution order",
)


def _group_sort_key(key: Any) -> tuple:
    # None sorts first; mixed key types fall back to their string form
    if key is None:
        return (0, 0, "")
    if isinstance(key, (int, float)):
        return (1, key, "")
    return (2, 0, str(key))


def sorted_group_keys(keys: Iterable[Any]) -> List[Any]:
    return sorted(set(keys), key=_group_sort_key)


def partition_steps(steps: Iterable[PlanStep]) -> "OrderedDict[Any, List[PlanStep]]":
    """Split catalog rows by group key, in ascending key order."""
    groups: Dict[Any, List[PlanStep]] = {}
    for step in steps:
        groups.setdefault(step.group_key, []).append(step)
    return OrderedDict((key, groups[key]) for key in sorted_group_keys(groups))


def build_group_maps(groups: Dict[Any, List[PlanStep]]) -> Dict[Any, PlanMap]:
    """Build every group's plan map up front (raises TreeIntegrityError)."""
    return {key: build_plan_map(steps, group_key=key) for key, steps in groups.items()}


def annotate_block(
    lines: Sequence[str],
    steps: Sequence[PlanStep],
    options: Optional[AnnotateOptions] = None,
    plan_map: Optional[PlanMap] = None,
    unmatched: Optional[List[int]] = None,
) -> List[str]:
    """Run classify -> inject -> qualify over one group's rendered lines.

    Two passes: the whole block is classified and sized before any line is
    rendered.
    """
    options = options or AnnotateOptions()
    if plan_map is None:
        group_key = steps[0].group_key if steps else None
        plan_map = build_plan_map(steps, group_key=group_key)

    classified = classify_lines(list(lines))
    if not plan_map:
        logger.info("No plan steps found; report left unannotated")
        return [line.text for line in classified]

    injector = ColumnInjector(plan_map, options.mismatch_severity)
    spliced = injector.inject_all(classified)
    if unmatched is not None:
        unmatched.extend(injector.unmatched)

    if options.qualify_names:
        qualifier = NameQualifier(steps)
        spliced = qualifier.qualify_all(spliced)

    return [line.text for line in spliced]


def annotate_report(
    blocks: Sequence[ReportBlock],
    steps: Iterable[PlanStep],
    options: Optional[AnnotateOptions] = None,
) -> AnnotatedReport:
    """Annotate rendered blocks against the catalog and append footers.

    Args:
        blocks: Rendered report, one block per group (a single block with
            group key None for single-plan reports).
        steps: Catalog rows for every group.
        options: Annotation switches.

    Returns:
        AnnotatedReport. Empty (no lines, no footer) when nothing was rendered.
    """
    options = options or AnnotateOptions()
    groups = partition_steps(steps)
    maps = build_group_maps(groups)

    # A single-group catalog matches a single unkeyed block
    if len(groups) == 1 and len(blocks) == 1:
        only_key = next(iter(groups))
        blocks = [ReportBlock(only_key, list(blocks[0].lines))]

    report = AnnotatedReport()
    ordered = sorted(blocks, key=lambda b: _group_sort_key(b.group_key))
    rendered_blocks = [b for b in ordered if b.lines]
    for block in rendered_blocks:
        group_steps = groups.get(block.group_key, [])
        plan_map = maps.get(block.group_key) or PlanMap(group_key=block.group_key)
        report.lines.extend(
            annotate_block(
                block.lines,
                group_steps,
                options,
                plan_map=plan_map,
                unmatched=report.unmatched_ids,
            )
        )
        if options.footer_placement == FooterPlacement.GROUP:
            _append_footer(report)

    if rendered_blocks and options.footer_placement == FooterPlacement.REPORT:
        _append_footer(report)

    logger.debug(
        f"Annotated {len(rendered_blocks)} block(s), {len(report.lines)} lines, "
        f"{len(report.unmatched_ids)} unmatched row(s)"
    )
    return report


def _append_footer(report: AnnotatedReport) -> None:
    report.lines.extend(FOOTER_LINES)
    report.footer_count += 1
