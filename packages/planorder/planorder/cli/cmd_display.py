"""planorder display — last explained plan from a plan table.

Usage:
    planorder display
    planorder display --statement-id my_statement
    planorder display --plan-table my_plan_table --format "basic +projection"
"""

from __future__ import annotations

from typing import Optional

import click

from ._common import annotation_options, build_options, handle_errors, run_oracle_report


@click.command()
@click.option("--plan-table", default=None, help="Plan table name (default: PLAN_TABLE).")
@click.option("--statement-id", default=None, help="Statement id given to EXPLAIN PLAN.")
@click.option("--format", "plan_format", default=None, help="DBMS_XPLAN format options (default: TYPICAL).")
@annotation_options
@click.pass_context
def display(
    ctx: click.Context,
    plan_table: Optional[str],
    statement_id: Optional[str],
    plan_format: Optional[str],
    qualify_names: Optional[bool],
    on_mismatch: Optional[str],
    footer: Optional[str],
) -> None:
    """Annotate DBMS_XPLAN.DISPLAY output for an explained statement."""
    from planorder.config import get_settings
    from planorder.parameters import validate_format, validate_statement_id, validate_table_name
    from planorder.sources.base import PlanTarget
    from planorder.sources.oracle import PlanTableSource

    settings = get_settings()
    with handle_errors():
        target = PlanTarget(
            identifier=validate_table_name(plan_table or settings.plan_table),
            selector=validate_statement_id(statement_id),
            format=validate_format(plan_format or settings.plan_format),
        )
        options = build_options(qualify_names, on_mismatch, footer)

    run_oracle_report(ctx, PlanTableSource, target, options)
