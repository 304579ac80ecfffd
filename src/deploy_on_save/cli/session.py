from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from deploy_on_save.config import FileConfigService
from deploy_on_save.core.compile import Compiler
from deploy_on_save.editor.console import ConsoleEditor
from deploy_on_save.editor.diagnostics import InMemoryDiagnostics
from deploy_on_save.editor.jobs import LongJobRunner
from deploy_on_save.sfdc.connector import ToolingConnector
from deploy_on_save.sfdc.tooling import MetadataContainerCompiler


@dataclass
class Session:
    compiler: Compiler
    connector: ToolingConnector
    runner: LongJobRunner
    diagnostics: InMemoryDiagnostics
    editor: ConsoleEditor

    async def close(self) -> None:
        await self.runner.join()
        await self.connector.aclose()


async def open_session(
    workspace: Path,
    editor: ConsoleEditor,
    runner: LongJobRunner,
    diagnostics: InMemoryDiagnostics | None = None,
) -> Session | None:
    """Wire a ``Compiler`` to the org configured for ``workspace``.

    Returns None when the workspace has no stored credential.
    """
    config_service = FileConfigService(workspace)
    cfg = await config_service.get_config()
    credential = cfg.current
    if not cfg.stored or credential is None:
        return None

    connector = ToolingConnector(credential)
    if diagnostics is None:
        diagnostics = InMemoryDiagnostics()
    compiler = Compiler(
        config=config_service,
        connector=connector,
        tooling=MetadataContainerCompiler(connector),
        diagnostics=diagnostics,
        jobs=runner,
        editor=editor,
    )
    return Session(compiler=compiler, connector=connector, runner=runner, diagnostics=diagnostics, editor=editor)
