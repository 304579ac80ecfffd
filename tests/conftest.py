"""Shared fixtures and fakes for tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from deploy_on_save.models import TextDocument, ToolingCompileResult

_REPO_ROOT = Path(__file__).parent.parent

WORKSPACE = "/work/project"


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Fakes for the remote collaborators
# ---------------------------------------------------------------------------


class FakeConnector:
    """Records every call; lookups answer from the dicts set up by the test."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.aura_records: dict[tuple[str, str], dict[str, Any]] = {}
        self.lwc_bundle_ids: dict[str, str] = {}
        self.lwc_records: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.query_records: list[dict[str, Any]] = []
        self.upserts: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def find_aura_by_name_and_def_type(self, bundle_name: str, def_type: str) -> dict[str, Any] | None:
        self.calls.append(("find_aura_by_name_and_def_type", (bundle_name, def_type)))
        return self.aura_records.get((bundle_name, def_type))

    async def upsert_aura_obj(self, record: dict[str, Any]) -> str:
        self.calls.append(("upsert_aura_obj", (record,)))
        self._maybe_fail()
        self.upserts.append(("AuraDefinition", record))
        return record.get("Id", "new-aura")

    async def find_lwc_bundle_id(self, bundle_name: str) -> str | None:
        self.calls.append(("find_lwc_bundle_id", (bundle_name,)))
        return self.lwc_bundle_ids.get(bundle_name)

    async def find_lwc_by_name_and_def_type(
        self, bundle_name: str, resource_format: str, file_path: str
    ) -> dict[str, Any] | None:
        self.calls.append(("find_lwc_by_name_and_def_type", (bundle_name, resource_format, file_path)))
        return self.lwc_records.get((bundle_name, resource_format, file_path))

    async def upsert_lwc_obj(self, record: dict[str, Any]) -> str:
        self.calls.append(("upsert_lwc_obj", (record,)))
        self._maybe_fail()
        self.upserts.append(("LightningComponentResource", record))
        return record.get("Id", "new-lwc")

    async def upsert_obj(self, type_name: str, payload: dict[str, Any]) -> str:
        self.calls.append(("upsert_obj", (type_name, payload)))
        self._maybe_fail()
        self.upserts.append((type_name, payload))
        return payload.get("Id", "new-id")

    async def query(self, soql: str) -> dict[str, Any]:
        self.calls.append(("query", (soql,)))
        return {"records": list(self.query_records)}


class FakeTooling:
    def __init__(self) -> None:
        self.result = ToolingCompileResult(State="Completed")
        self.requests: list[tuple[str, dict[str, str]]] = []
        self.fail_with: Exception | None = None

    async def request_compile(self) -> Any:
        async def _compile(tooling_type: str, payload: dict[str, str]) -> ToolingCompileResult:
            self.requests.append((tooling_type, payload))
            if self.fail_with is not None:
                raise self.fail_with
            return self.result

        return _compile


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def tooling() -> FakeTooling:
    return FakeTooling()


@pytest.fixture
def make_document() -> Callable[..., TextDocument]:
    """Build a document under the fake workspace's src/ folder."""

    def _make(relative_path: str, text: str = "line one\nline two\nline three\n") -> TextDocument:
        file_name = f"{WORKSPACE}/src/{relative_path}"
        return TextDocument(uri=f"file://{file_name}", file_name=file_name, text=text)

    return _make
