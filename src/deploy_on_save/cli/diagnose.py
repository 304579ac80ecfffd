import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from deploy_on_save.core.diagnostics import parse_compiler_error, parse_component_failures
from deploy_on_save.core.parsers import get_filename
from deploy_on_save.editor.console import render_diagnostics
from deploy_on_save.models import TextDocument

console = Console()


def diagnose(
    message: Annotated[str, typer.Argument(help="Raw compiler message, or a JSON failure list with --failures.")],
    file: Annotated[
        Path, typer.Option("--file", help="Local file the message refers to.", exists=True, dir_okay=False)
    ],
    failures: Annotated[bool, typer.Option(help="Treat MESSAGE as tooling componentFailures JSON.")] = False,
) -> None:
    """Show where a remote compile error lands in a local file."""
    document = TextDocument.from_path(file)
    if failures:
        try:
            records = json.loads(message)
        except json.JSONDecodeError as exc:
            console.print(f"[red]Invalid JSON:[/red] {exc}")
            raise typer.Exit(1) from exc
        if isinstance(records, dict):
            records = [records]
        diagnostics = parse_component_failures(records, document.line_count)
    else:
        diagnostics = [parse_compiler_error(message, get_filename(document.file_name), document.line_count)]
    render_diagnostics(console, document, diagnostics)
