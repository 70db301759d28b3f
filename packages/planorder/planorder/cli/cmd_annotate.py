"""planorder annotate — annotate a captured report offline.

Usage:
    planorder annotate plan.txt --catalog plan_rows.json
    sqlplus -s scott/tiger @show_plan | planorder annotate - --catalog rows.csv

The catalog holds the plan table rows (id, parent_id, object_owner,
object_name and, for multi-plan reports, plan_hash_value).
"""

from __future__ import annotations

from typing import Optional, TextIO

import click

from ._common import annotation_options, build_options, emit_report, handle_errors


@click.command()
@click.argument("report", type=click.File("r", encoding="utf-8"))
@click.option(
    "--catalog",
    "catalog_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Plan rows as JSON or CSV.",
)
@click.option(
    "--catalog-format",
    type=click.Choice(["json", "csv"]),
    default=None,
    help="Catalog file format (default: from the file extension).",
)
@annotation_options
def annotate(
    report: TextIO,
    catalog_path: str,
    catalog_format: Optional[str],
    qualify_names: Optional[bool],
    on_mismatch: Optional[str],
    footer: Optional[str],
) -> None:
    """Annotate REPORT (a DBMS_XPLAN text file, or - for stdin)."""
    from planorder.pipeline import annotate_plan
    from planorder.sources.base import PlanTarget
    from planorder.sources.files import FileCatalog, FileReportRenderer

    with handle_errors():
        options = build_options(qualify_names, on_mismatch, footer)
        catalog = FileCatalog(catalog_path, catalog_format)
        renderer = FileReportRenderer(report)
        result = annotate_plan(catalog, renderer, PlanTarget(identifier=catalog_path), options)

    emit_report(result)
