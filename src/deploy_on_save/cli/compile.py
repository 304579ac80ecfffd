import asyncio
import contextlib
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from deploy_on_save.cli.session import open_session
from deploy_on_save.config import ConfigError
from deploy_on_save.editor.console import ConsoleEditor, render_diagnostics, render_status
from deploy_on_save.editor.diagnostics import InMemoryDiagnostics
from deploy_on_save.editor.jobs import LongJobRunner
from deploy_on_save.models import CompileStatus, TextDocument
from deploy_on_save.watcher.watchfiles_adapter import WatchfilesWatcher

console = Console()
err_console = Console(stderr=True)

_NOT_CONFIGURED = "[red]No stored credentials for this workspace.[/red]"


def compile_file(
    path: Annotated[Path, typer.Argument(help="File to deploy.", exists=True, dir_okay=False)],
    workspace: Annotated[Path, typer.Option(help="Workspace folder holding src/ and .vscode/.")] = Path("."),
) -> None:
    """Deploy a file now, even when deploy-on-save is disabled."""
    document = TextDocument.from_path(path)
    editor = ConsoleEditor(err_console, active=document)
    diagnostics = InMemoryDiagnostics()
    statuses: list[str] = []
    runner = LongJobRunner(on_status=lambda _key, status: statuses.append(status))

    async def _run() -> bool:
        session = await open_session(workspace, editor, runner, diagnostics)
        if session is None:
            return False
        try:
            await session.compiler.compile(user_requested=True)
        finally:
            await session.close()
        return True

    try:
        configured = asyncio.run(_run())
    except ConfigError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    if not configured:
        err_console.print(_NOT_CONFIGURED)
        raise typer.Exit(1)

    if not statuses:
        console.print("[dim]Nothing to deploy for this file.[/dim]")
        return
    render_status(console, document.file_name, statuses[-1])
    found = diagnostics.get(document.uri)
    if found is not None:
        render_diagnostics(console, document, found)
    if statuses[-1] == CompileStatus.FAILURE.value:
        raise typer.Exit(1)


def watch(
    workspace: Annotated[Path, typer.Option(help="Workspace folder holding src/ and .vscode/.")] = Path("."),
) -> None:
    """Deploy files under <workspace>/src as they are saved."""
    documents: dict[str, TextDocument] = {}
    diagnostics = InMemoryDiagnostics()
    editor = ConsoleEditor(err_console)

    def _on_status(key: str, status: str) -> None:
        # the reporting job still counts as queued
        if runner.queued(key) > 1:
            document = documents.get(key)
        else:
            document = documents.pop(key, None)
        render_status(console, document.file_name if document else key, status)
        found = diagnostics.get(key)
        if document is not None and found:
            render_diagnostics(console, document, found)

    runner = LongJobRunner(on_status=_on_status)

    async def _run() -> bool:
        session = await open_session(workspace, editor, runner, diagnostics)
        if session is None:
            return False

        async def _on_change(paths: set[Path]) -> None:
            for changed in sorted(paths):
                document = TextDocument.from_path(changed)
                documents[document.uri] = document
                await session.compiler.compile(document)
                if not runner.queued(document.uri):
                    documents.pop(document.uri, None)

        watcher = WatchfilesWatcher(workspace / "src", _on_change)
        console.print(f"[green]Watching {workspace / 'src'}[/green] (Ctrl+C to stop)")
        await watcher.start()
        try:
            await watcher.wait()
        finally:
            await watcher.stop()
            await session.close()
        return True

    try:
        with contextlib.suppress(KeyboardInterrupt):
            configured = asyncio.run(_run())
            if not configured:
                err_console.print(_NOT_CONFIGURED)
                raise typer.Exit(1)
    except ConfigError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
