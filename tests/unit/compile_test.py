"""Tests for the compile dispatcher."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

from deploy_on_save.config import ConfigError, Credential, SfdyConfig, StoredConfig
from deploy_on_save.core.compile import Compiler, is_excluded
from deploy_on_save.editor.jobs import LongJobRunner
from deploy_on_save.models import CompileStatus, NormalizedDiagnostic, TextDocument, ToolingCompileResult

MakeDocument = Callable[..., TextDocument]

_WORKSPACE = "/work/project"


class _StaticConfig:
    def __init__(
        self,
        stored: bool = True,
        deploy_on_save: bool = True,
        exclude_files: list[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.workspace_folder = _WORKSPACE
        self.stored = stored
        self.deploy_on_save = deploy_on_save
        self.exclude_files = exclude_files
        self.error = error

    async def get_config(self) -> StoredConfig:
        if self.error is not None:
            raise self.error
        return StoredConfig(
            stored=self.stored,
            credentials={"0": Credential(username="dev@example.com", deploy_on_save=self.deploy_on_save)},
            current_credential="0",
        )

    def get_sfdy_config_sync(self) -> SfdyConfig:
        return SfdyConfig(exclude_files=self.exclude_files)


class _RecordingSink:
    def __init__(self) -> None:
        self.sets: list[tuple[str, list[NormalizedDiagnostic]]] = []

    def set(self, uri: str, diagnostics: Sequence[NormalizedDiagnostic]) -> None:
        self.sets.append((uri, list(diagnostics)))


class _Editor:
    def __init__(self, active: TextDocument | None = None) -> None:
        self.active = active
        self.alerts: list[str] = []

    def active_document(self) -> TextDocument | None:
        return self.active

    def show_error(self, message: str) -> None:
        self.alerts.append(message)


class _Harness:
    def __init__(self, connector: Any, tooling: Any, config: _StaticConfig, active: TextDocument | None = None) -> None:
        self.connector = connector
        self.tooling = tooling
        self.sink = _RecordingSink()
        self.editor = _Editor(active)
        self.statuses: list[tuple[str, str]] = []
        self.runner = LongJobRunner(on_status=lambda key, status: self.statuses.append((key, status)))
        self.compiler = Compiler(
            config=config,
            connector=connector,
            tooling=tooling,
            diagnostics=self.sink,
            jobs=self.runner,
            editor=self.editor,
        )

    async def compile(self, document: TextDocument | None = None, **kwargs: Any) -> None:
        await self.compiler.compile(document, **kwargs)
        await self.runner.join()


@pytest.fixture
def harness_factory(connector: Any, tooling: Any) -> Callable[..., _Harness]:
    def _make(active: TextDocument | None = None, **config_kwargs: Any) -> _Harness:
        return _Harness(connector, tooling, _StaticConfig(**config_kwargs), active)

    return _make


class TestGuards:
    @pytest.mark.asyncio
    async def test_unstored_config_is_a_silent_noop(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory(stored=False)
        await harness.compile(make_document("classes/Foo.cls"))
        assert harness.statuses == []
        assert harness.sink.sets == []
        assert harness.tooling.requests == []

    @pytest.mark.asyncio
    async def test_config_error_is_a_silent_noop(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory(error=ConfigError("broken json"))
        await harness.compile(make_document("classes/Foo.cls"))
        assert harness.statuses == []
        assert harness.editor.alerts == []

    @pytest.mark.asyncio
    async def test_no_document_and_no_active_editor(self, harness_factory: Callable[..., _Harness]) -> None:
        harness = harness_factory()
        await harness.compile()
        assert harness.statuses == []

    @pytest.mark.asyncio
    async def test_save_with_deploy_on_save_disabled(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory(deploy_on_save=False)
        await harness.compile(make_document("classes/Foo.cls"))
        assert harness.statuses == []
        assert harness.tooling.requests == []

    @pytest.mark.asyncio
    async def test_explicit_command_ignores_deploy_on_save(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        document = make_document("classes/Foo.cls")
        harness = harness_factory(active=document, deploy_on_save=False)
        await harness.compile()
        assert harness.statuses == [(document.uri, CompileStatus.SUCCESS.value)]

    @pytest.mark.asyncio
    async def test_user_requested_flag_with_explicit_document(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory(deploy_on_save=False)
        await harness.compile(make_document("classes/Foo.cls"), user_requested=True)
        assert len(harness.statuses) == 1

    @pytest.mark.asyncio
    async def test_unclassifiable_document_touches_nothing(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory()
        await harness.compile(make_document("objects/Account.object"))
        assert harness.statuses == []
        assert harness.sink.sets == []
        assert harness.connector.calls == []
        assert harness.tooling.requests == []

    @pytest.mark.asyncio
    async def test_excluded_file_is_skipped(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory(exclude_files=["classes/Generated*.cls"])
        await harness.compile(make_document("classes/GeneratedStub.cls"))
        await harness.compile(make_document("classes/Service.cls"))
        assert [key for key, _ in harness.statuses] == [make_document("classes/Service.cls").uri]


class TestDispatch:
    @pytest.mark.asyncio
    async def test_container_success_clears_diagnostics(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory()
        document = make_document("classes/Foo.cls")
        await harness.compile(document)
        assert harness.statuses == [(document.uri, CompileStatus.SUCCESS.value)]
        assert harness.sink.sets == [(document.uri, [])]

    @pytest.mark.asyncio
    async def test_container_failure_populates_diagnostics(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory()
        harness.tooling.result = ToolingCompileResult.model_validate(
            {"State": "Failed", "DeployDetails": {"componentFailures": [{"problem": "bad", "lineNumber": 2}]}}
        )
        document = make_document("classes/Foo.cls")
        await harness.compile(document)
        assert harness.statuses == [(document.uri, CompileStatus.FAILURE.value)]
        uri, diagnostics = harness.sink.sets[0]
        assert uri == document.uri
        assert [d.line for d in diagnostics] == [1]

    @pytest.mark.asyncio
    async def test_static_resource_without_match_is_noop(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory()
        await harness.compile(make_document("staticresources/lib.resource"))
        assert [status for _, status in harness.statuses] == [CompileStatus.NOOP.value]
        assert harness.sink.sets == []

    @pytest.mark.asyncio
    async def test_aura_routes_to_aura_strategy(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory()
        harness.connector.aura_records[("myCmp", "HELPER")] = {"Id": "0Ad1"}
        await harness.compile(make_document("aura/myCmp/myCmpHelper.js"))
        assert harness.connector.upserts[0][0] == "AuraDefinition"
        assert harness.statuses[0][1] == CompileStatus.SUCCESS.value

    @pytest.mark.asyncio
    async def test_lwc_routes_to_lwc_strategy(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory()
        await harness.compile(make_document("lwc/card/card.js"))
        assert harness.connector.upserts[0][0] == "LightningComponentResource"

    @pytest.mark.asyncio
    async def test_alert_is_shown(self, harness_factory: Callable[..., _Harness], make_document: MakeDocument) -> None:
        harness = harness_factory()
        harness.tooling.fail_with = ConnectionError("offline")
        await harness.compile(make_document("classes/Foo.cls"))
        assert harness.editor.alerts == ["offline"]
        assert harness.sink.sets == []
        assert [status for _, status in harness.statuses] == [CompileStatus.FAILURE.value]


class TestTerminalStatus:
    @pytest.mark.asyncio
    async def test_unexpected_error_still_reports_once(
        self,
        harness_factory: Callable[..., _Harness],
        make_document: MakeDocument,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        harness = harness_factory()

        async def _boom(*_args: Any) -> Any:
            raise RuntimeError("boom")

        monkeypatch.setattr(harness.compiler, "_dispatch", _boom)
        await harness.compile(make_document("classes/Foo.cls"))
        assert [status for _, status in harness.statuses] == [CompileStatus.FAILURE.value]
        assert harness.editor.alerts == ["boom"]

    @pytest.mark.asyncio
    async def test_repeated_success_is_idempotent(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory()
        document = make_document("classes/Foo.cls")
        await harness.compile(document)
        await harness.compile(document)
        assert harness.sink.sets == [(document.uri, []), (document.uri, [])]
        assert len(harness.statuses) == 2

    @pytest.mark.asyncio
    async def test_overlapping_compiles_each_report_and_last_write_wins(
        self, harness_factory: Callable[..., _Harness], make_document: MakeDocument
    ) -> None:
        harness = harness_factory()
        document = make_document("lwc/card/card.js")
        harness.connector.fail_with = Exception("card:1,1:broken")

        await harness.compiler.compile(document)
        await harness.runner.join()
        harness.connector.fail_with = None
        await harness.compiler.compile(document)
        await harness.compiler.compile(document)
        await harness.runner.join()

        assert [status for _, status in harness.statuses] == [
            CompileStatus.FAILURE.value,
            CompileStatus.SUCCESS.value,
            CompileStatus.SUCCESS.value,
        ]
        assert harness.sink.sets[-1] == (document.uri, [])


class TestIsExcluded:
    def test_no_patterns(self) -> None:
        assert is_excluded("classes/Foo.cls", []) is False

    def test_double_star(self) -> None:
        assert is_excluded("staticresources/big.resource", ["**/*.resource"]) is True

    def test_no_match(self) -> None:
        assert is_excluded("classes/Foo.cls", ["triggers/*"]) is False

    def test_star_stays_within_one_segment(self) -> None:
        assert is_excluded("Foo.cls", ["*.cls"]) is True
        assert is_excluded("classes/Foo.cls", ["*.cls"]) is False

    def test_bare_directory_matches_only_that_path(self) -> None:
        assert is_excluded("classes/Foo.cls", ["classes"]) is False
        assert is_excluded("classes/Foo.cls", ["classes/**"]) is True

    def test_negated_pattern_matches_everything_else(self) -> None:
        assert is_excluded("classes/Foo.cls", ["!classes/Bar.cls"]) is True
        assert is_excluded("classes/Bar.cls", ["!classes/Bar.cls"]) is False

    def test_brace_expansion(self) -> None:
        assert is_excluded("triggers/Account.trigger", ["{classes,triggers}/*"]) is True
