from collections.abc import Sequence

from deploy_on_save.models import NormalizedDiagnostic


class InMemoryDiagnostics:
    """Problem list keyed by document URI; each ``set`` replaces the whole entry."""

    def __init__(self) -> None:
        self._by_uri: dict[str, list[NormalizedDiagnostic]] = {}

    def set(self, uri: str, diagnostics: Sequence[NormalizedDiagnostic]) -> None:
        self._by_uri[uri] = list(diagnostics)

    def get(self, uri: str) -> list[NormalizedDiagnostic] | None:
        return self._by_uri.get(uri)

    def items(self) -> list[tuple[str, list[NormalizedDiagnostic]]]:
        return list(self._by_uri.items())

    def clear(self) -> None:
        self._by_uri.clear()
