from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from deploy_on_save.models import CompileStatus, NormalizedDiagnostic, Severity, TextDocument

_STATUS_LABELS = {
    CompileStatus.SUCCESS.value: "[green]deployed[/green]",
    CompileStatus.FAILURE.value: "[red]failed[/red]",
    CompileStatus.NOOP.value: "[dim]nothing to deploy[/dim]",
}


class ConsoleEditor:
    """Terminal stand-in for the editor: one active document, alerts on stderr.

    Implements the ``EditorPort`` protocol.
    """

    def __init__(self, console: Console | None = None, active: TextDocument | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._active = active
        self.alerts: list[str] = []

    def open(self, document: TextDocument | None) -> None:
        self._active = document

    def active_document(self) -> TextDocument | None:
        return self._active

    def show_error(self, message: str) -> None:
        self.alerts.append(message)
        self._console.print(f"[red]{escape(message)}[/red]")


def render_status(console: Console, key: str, status: str) -> None:
    label = _STATUS_LABELS.get(status, escape(status))
    console.print(f"{status} {label} {escape(key)}".strip())


def render_diagnostics(
    console: Console,
    document: TextDocument,
    diagnostics: Sequence[NormalizedDiagnostic],
) -> None:
    if not diagnostics:
        console.print(f"[green]No problems[/green] in {escape(document.file_name)}")
        return

    table = Table(title=document.file_name, show_lines=False)
    table.add_column("line", justify="right")
    table.add_column("col", justify="right")
    table.add_column("severity")
    table.add_column("message")
    for diagnostic in diagnostics:
        style = "red" if diagnostic.severity is Severity.ERROR else "yellow"
        table.add_row(
            str(diagnostic.line + 1),
            str(diagnostic.column + 1) if diagnostic.column is not None else "-",
            f"[{style}]{diagnostic.severity.value}[/{style}]",
            escape(diagnostic.message),
        )
    console.print(table)
    console.print(f"({len(diagnostics)} problems)")
