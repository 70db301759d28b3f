"""End-to-end annotation: catalog fetch -> tree build -> render -> annotate.

Usage:
    from planorder.pipeline import annotate_plan
    from planorder.sources import OracleExecutor, PlanTarget, PlanTableSource

    with OracleExecutor() as db:
        source = PlanTableSource(db)
        report = annotate_plan(source, source, PlanTarget("PLAN_TABLE"))
    print(report.render())
"""

from __future__ import annotations

import logging
from typing import Optional

from .group_router import annotate_report, build_group_maps, partition_steps
from .schemas import AnnotatedReport, AnnotateOptions
from .sources.base import PlanReportRenderer, PlanStepCatalog, PlanTarget

logger = logging.getLogger(__name__)


def annotate_plan(
    catalog: PlanStepCatalog,
    renderer: PlanReportRenderer,
    target: PlanTarget,
    options: Optional[AnnotateOptions] = None,
) -> AnnotatedReport:
    """Fetch, validate, render and annotate the plan(s) for ``target``.

    The catalog is read once and every group's tree is validated before the
    renderer is called, so integrity failures never produce partial output.

    Raises:
        CatalogAccessError: The catalog or renderer could not be queried.
        TreeIntegrityError: The catalog rows do not form valid trees.
        RenderMismatchError: Only with MismatchSeverity.ERROR.
    """
    options = options or AnnotateOptions()
    target = catalog.resolve(target)

    steps = catalog.fetch_steps(target)
    logger.info(f"Fetched {len(steps)} plan step(s) for {target.describe()}")

    groups = partition_steps(steps)
    build_group_maps(groups)

    if not groups:
        logger.warning(f"No matching plan for {target.describe()}")
        return AnnotatedReport()

    blocks = renderer.render_all(target, list(groups))
    return annotate_report(blocks, steps, options)
