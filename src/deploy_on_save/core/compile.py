import logging
from collections.abc import Sequence
from functools import partial

from wcmatch import glob

from deploy_on_save.config.loader import ConfigError
from deploy_on_save.core.classifier import classify, workspace_relative_path
from deploy_on_save.core.ports.config import ConfigService
from deploy_on_save.core.ports.connector import RemoteConnector
from deploy_on_save.core.ports.editor import DiagnosticsSink, EditorPort
from deploy_on_save.core.ports.jobs import DoneCallback, JobRunnerPort
from deploy_on_save.core.ports.tooling import ToolingCompiler
from deploy_on_save.core.strategies import (
    compile_aura_definition,
    compile_lightning_web_component,
    compile_metadata_container,
    compile_static_resource,
)
from deploy_on_save.models import (
    Artifact,
    AuraArtifact,
    CompileOutcome,
    CompileStatus,
    LwcArtifact,
    StaticResourceArtifact,
    TextDocument,
)

logger = logging.getLogger(__name__)

# Each pattern matches on its own, with minimatch defaults: "*" stays within one
# path segment and a leading "!" matches everything except the rest.
_GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.EXTGLOB | glob.NEGATE | glob.NEGATEALL


def is_excluded(relative_path: str, patterns: Sequence[str]) -> bool:
    if not patterns:
        return False
    return any(glob.globmatch(relative_path, pattern, flags=_GLOB_FLAGS) for pattern in patterns)


class Compiler:
    """Deploy saved documents to the org and publish the resulting diagnostics.

    Every collaborator is injected so the dispatcher can run without an
    editor host.
    """

    def __init__(
        self,
        config: ConfigService,
        connector: RemoteConnector,
        tooling: ToolingCompiler,
        diagnostics: DiagnosticsSink,
        jobs: JobRunnerPort,
        editor: EditorPort,
    ) -> None:
        self._config = config
        self._connector = connector
        self._tooling = tooling
        self._diagnostics = diagnostics
        self._jobs = jobs
        self._editor = editor

    async def compile(self, document: TextDocument | None = None, *, user_requested: bool | None = None) -> None:
        """Schedule a compile of ``document`` (or the active document).

        Save events pass the document; an explicit user command passes
        nothing. ``user_requested`` overrides that inference. Files that are
        unconfigured, opted out, unclassifiable or excluded are skipped without
        any side effect.
        """
        if user_requested is None:
            user_requested = document is None

        try:
            cfg = await self._config.get_config()
            sfdy_config = self._config.get_sfdy_config_sync()
        except ConfigError as exc:
            logger.warning("Skipping compile: %s", exc)
            return
        if not cfg.stored:
            return

        if document is None:
            document = self._editor.active_document()
        if document is None:
            return

        credential = cfg.current
        if not user_requested and (credential is None or not credential.deploy_on_save):
            return

        artifact = classify(document)
        if artifact is None:
            return

        relative_path = workspace_relative_path(document.file_name, self._config.workspace_folder)
        if is_excluded(relative_path, sfdy_config.exclude_files or []):
            logger.debug("Skipping excluded file %s", relative_path)
            return

        self._jobs.start_long_job(partial(self._run_job, document, artifact), document.uri, exclusive=True)

    async def _run_job(self, document: TextDocument, artifact: Artifact, done: DoneCallback) -> None:
        status = CompileStatus.FAILURE
        try:
            outcome = await self._dispatch(document, artifact)
            self._apply(document, outcome)
            status = outcome.status
        except Exception as exc:
            logger.exception("Unexpected error compiling %s", document.file_name)
            self._editor.show_error(str(exc))
        finally:
            done(status.value)

    async def _dispatch(self, document: TextDocument, artifact: Artifact) -> CompileOutcome:
        if isinstance(artifact, AuraArtifact):
            return await compile_aura_definition(document, artifact, self._connector)
        if isinstance(artifact, LwcArtifact):
            return await compile_lightning_web_component(document, artifact, self._connector)
        if isinstance(artifact, StaticResourceArtifact):
            return await compile_static_resource(document, artifact, self._connector)
        return await compile_metadata_container(document, artifact, self._tooling)

    def _apply(self, document: TextDocument, outcome: CompileOutcome) -> None:
        if outcome.diagnostics is not None:
            self._diagnostics.set(document.uri, outcome.diagnostics)
        if outcome.alert is not None:
            self._editor.show_error(outcome.alert)
