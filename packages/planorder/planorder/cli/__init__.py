"""planorder CLI — Pid and Ord columns for DBMS_XPLAN reports.

Usage: planorder [--dsn ...] <command> [options]

Commands:
    planorder display [--plan-table T] [--statement-id S]   Explained plan (PLAN_TABLE)
    planorder cursor SQL_ID [--child-number N]               Cursor cache (V$SQL_PLAN)
    planorder awr SQL_ID [--plan-hash-value N]               AWR history (DBA_HIST_SQL_PLAN)
    planorder annotate REPORT --catalog FILE                 Offline, from captured files
"""

from __future__ import annotations

from typing import Optional

import click

from planorder import __version__


@click.group()
@click.version_option(version=__version__, prog_name="planorder")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential output.")
@click.option("--dsn", default=None, help="Oracle Easy Connect string or SQLAlchemy URL.")
@click.option("--user", default=None, help="Oracle user.")
@click.option("--password", default=None, help="Oracle password.")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    dsn: Optional[str],
    user: Optional[str],
    password: Optional[str],
) -> None:
    """planorder — add parent id and execution order to DBMS_XPLAN output."""
    import logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["dsn"] = dsn
    ctx.obj["user"] = user
    ctx.obj["password"] = password

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(message)s")
    elif quiet:
        logging.basicConfig(level=logging.WARNING)
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")


def _register_commands() -> None:
    """Import and register all sub-commands."""
    from .cmd_display import display
    from .cmd_cursor import cursor
    from .cmd_awr import awr
    from .cmd_annotate import annotate

    main.add_command(display)
    main.add_command(cursor)
    main.add_command(awr)
    main.add_command(annotate)


_register_commands()
