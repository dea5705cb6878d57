"""Compile command - resolve, transform and inline templates"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from tmprep.config import DEFAULT_CONFIG_FILE, PrepConfig
from tmprep.pipeline import Pipeline, Stage, TemplateResult

from .utils import console, handle_error


def _print_results(results: list[TemplateResult]) -> None:
    if not results:
        console.print("[yellow]No templates found[/yellow]")
        return

    table = Table()
    table.add_column("Template", style="cyan")
    table.add_column("Status")
    table.add_column("Output")
    table.add_column("Notes")

    for result in results:
        if result.stage == Stage.DONE:
            status = "[yellow]done[/yellow]" if result.warnings else "[green]done[/green]"
            notes = f"{len(result.warnings)} warning(s)" if result.warnings else ""
        else:
            status = f"[red]failed ({result.stage.value})[/red]"
            notes = str(result.error) if result.error else ""
        table.add_row(
            result.name,
            status,
            str(result.output_path) if result.output_path else "",
            notes,
        )

    console.print(table)


def compile_command(
    input_dir: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    css: Optional[Path] = None,
    template: Optional[str] = None,
    config_file: Optional[Path] = None,
    jobs: Optional[int] = None,
) -> None:
    """Compile templates by resolving inheritance and converting layout tags."""
    try:
        config = PrepConfig.load(config_file or Path(DEFAULT_CONFIG_FILE))
        config = config.with_overrides(
            src_dir=input_dir,
            dist_dir=output_dir,
            css_path=css,
            template=template,
            jobs=jobs,
        )
        results = Pipeline(config).run()
    except Exception as e:
        handle_error(e)

    _print_results(results)
    if any(not r.ok for r in results):
        raise typer.Exit(code=1)
