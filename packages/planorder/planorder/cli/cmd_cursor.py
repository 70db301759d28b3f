"""planorder cursor — plan of a cursor in the shared pool.

Usage:
    planorder cursor 9vfvgsk7mtkr4
    planorder cursor 9vfvgsk7mtkr4 --child-number 1 --format "allstats last"
"""

from __future__ import annotations

from typing import Optional

import click

from ._common import annotation_options, build_options, handle_errors, run_oracle_report


@click.command()
@click.argument("sql_id", required=False)
@click.option("--child-number", default=None, help="Cursor child number (default: 0).")
@click.option("--format", "plan_format", default=None, help="DBMS_XPLAN format options (default: TYPICAL).")
@annotation_options
@click.pass_context
def cursor(
    ctx: click.Context,
    sql_id: Optional[str],
    child_number: Optional[str],
    plan_format: Optional[str],
    qualify_names: Optional[bool],
    on_mismatch: Optional[str],
    footer: Optional[str],
) -> None:
    """Annotate DBMS_XPLAN.DISPLAY_CURSOR output.

    Without SQL_ID the previous cursor of the connecting session is used.
    """
    from planorder.config import get_settings
    from planorder.parameters import parse_non_negative_int, validate_format, validate_sql_id
    from planorder.sources.base import PlanTarget
    from planorder.sources.oracle import CursorCacheSource

    settings = get_settings()
    with handle_errors():
        target = PlanTarget(
            identifier=validate_sql_id(sql_id, required=False),
            selector=parse_non_negative_int(child_number, "Child number"),
            format=validate_format(plan_format or settings.plan_format),
        )
        options = build_options(qualify_names, on_mismatch, footer)

    run_oracle_report(ctx, CursorCacheSource, target, options)
