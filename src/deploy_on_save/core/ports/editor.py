from collections.abc import Sequence
from typing import Protocol

from deploy_on_save.models import NormalizedDiagnostic, TextDocument


class DiagnosticsSink(Protocol):
    def set(self, uri: str, diagnostics: Sequence[NormalizedDiagnostic]) -> None: ...


class EditorPort(Protocol):
    def active_document(self) -> TextDocument | None: ...

    def show_error(self, message: str) -> None: ...
