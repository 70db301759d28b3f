"""planorder awr — historical plans from the AWR repository.

Usage:
    planorder awr 9vfvgsk7mtkr4
    planorder awr 9vfvgsk7mtkr4 --plan-hash-value 3625962092 --yes

Every plan hash value captured for the SQL_ID is annotated separately.
"""

from __future__ import annotations

import sys
from typing import Optional

import click

from ._common import (
    EXIT_FAILURE,
    annotation_options,
    build_options,
    console,
    handle_errors,
    print_error,
    run_oracle_report,
)

LICENCE_NOTICE = (
    "This report reads the DBA_HIST_* views, which need a licence\n"
    "for the Oracle Diagnostics Pack. Continue only if the target\n"
    "database is licensed."
)


def confirm_licence(assume_yes: bool) -> bool:
    """Ask before touching AWR unless already acknowledged."""
    from rich.panel import Panel

    from planorder.config import get_settings

    if assume_yes or get_settings().diagnostics_pack_licensed:
        return True
    console.print(Panel(LICENCE_NOTICE, title="IMPORTANT: PLEASE READ", border_style="yellow"))
    return click.confirm("Continue?", default=False, err=True)


@click.command()
@click.argument("sql_id")
@click.option("--plan-hash-value", default=None, help="Restrict to one plan hash value.")
@click.option("--dbid", default=None, help="Database id (default: current database).")
@click.option("--format", "plan_format", default=None, help="DBMS_XPLAN format options (default: TYPICAL).")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Confirm the Diagnostics Pack licence.")
@annotation_options
@click.pass_context
def awr(
    ctx: click.Context,
    sql_id: str,
    plan_hash_value: Optional[str],
    dbid: Optional[str],
    plan_format: Optional[str],
    assume_yes: bool,
    qualify_names: Optional[bool],
    on_mismatch: Optional[str],
    footer: Optional[str],
) -> None:
    """Annotate DBMS_XPLAN.DISPLAY_AWR output for every plan of SQL_ID."""
    from planorder.config import get_settings
    from planorder.parameters import parse_non_negative_int, validate_format, validate_sql_id
    from planorder.sources.base import PlanTarget
    from planorder.sources.oracle import AwrSource

    settings = get_settings()
    with handle_errors():
        target = PlanTarget(
            identifier=validate_sql_id(sql_id),
            selector=parse_non_negative_int(plan_hash_value, "Plan hash value"),
            format=validate_format(plan_format or settings.plan_format),
            dbid=parse_non_negative_int(dbid, "DBID"),
        )
        options = build_options(qualify_names, on_mismatch, footer)

    if not confirm_licence(assume_yes):
        print_error("Cancelled.")
        sys.exit(EXIT_FAILURE)

    run_oracle_report(ctx, AwrSource, target, options)
