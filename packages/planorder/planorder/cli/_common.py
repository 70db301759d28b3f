"""Shared CLI helpers: annotation options, error handling, output."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import click
from rich.console import Console

from planorder.errors import ParameterError, PlanOrderError
from planorder.schemas import AnnotatedReport, AnnotateOptions, FooterPlacement, MismatchSeverity

# Status and errors go to stderr; stdout carries only the report
console = Console(stderr=True)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def print_error(text: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {text}", highlight=False)


def print_warning(text: str) -> None:
    console.print(f"[yellow]{text}[/yellow]", highlight=False)


def annotation_options(func: Callable) -> Callable:
    """Options shared by every report command."""
    func = click.option(
        "--footer",
        type=click.Choice([p.value for p in FooterPlacement]),
        default=None,
        help="Append the footer once per report or once per plan block.",
    )(func)
    func = click.option(
        "--on-mismatch",
        type=click.Choice([s.value for s in MismatchSeverity]),
        default=None,
        help="Rows whose id is missing from the catalog: ignore, warn or error.",
    )(func)
    func = click.option(
        "--qualify-names/--no-qualify-names",
        default=None,
        help="Show OWNER.NAME in a widened Name column.",
    )(func)
    return func


def build_options(
    qualify_names: Optional[bool],
    on_mismatch: Optional[str],
    footer: Optional[str],
) -> AnnotateOptions:
    """Settings-based options with command-line overrides applied."""
    try:
        options = AnnotateOptions.from_settings()
    except ValueError as e:
        raise ParameterError(f"Invalid annotation setting: {e}") from e
    if qualify_names is not None:
        options.qualify_names = qualify_names
    if on_mismatch is not None:
        options.mismatch_severity = MismatchSeverity(on_mismatch)
    if footer is not None:
        options.footer_placement = FooterPlacement(footer)
    return options


@contextmanager
def handle_errors() -> Iterator[None]:
    """Map planorder errors to a message and exit status."""
    try:
        yield
    except ParameterError as e:
        print_error(str(e))
        sys.exit(EXIT_USAGE)
    except PlanOrderError as e:
        print_error(str(e))
        sys.exit(EXIT_FAILURE)


def emit_report(report: AnnotatedReport) -> None:
    """Write the annotated report to stdout, one line at a time."""
    if not report.lines:
        print_warning("No matching plan found.")
        return
    for line in report:
        click.echo(line)


def run_oracle_report(ctx: click.Context, source_cls: Any, target: Any, options: AnnotateOptions) -> None:
    """Open a connection, annotate the target's plan and print it."""
    from planorder.pipeline import annotate_plan
    from planorder.sources.oracle import OracleExecutor

    obj = ctx.obj or {}
    with handle_errors():
        executor = OracleExecutor(dsn=obj.get("dsn"), user=obj.get("user"), password=obj.get("password"))
        with executor:
            source = source_cls(executor)
            report = annotate_plan(source, source, target, options)
    emit_report(report)
