from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class NormalizedDiagnostic(BaseModel):
    """A compile problem anchored to a zero-based line and optional column.

    ``column`` of ``None`` means the diagnostic spans the whole line.
    """

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    column: int | None = None
    message: str
    severity: Severity = Severity.ERROR


@dataclass(frozen=True)
class TextDocument:
    uri: str
    file_name: str
    text: str

    @classmethod
    def from_path(cls, path: str | Path) -> "TextDocument":
        file_path = Path(path).resolve()
        try:
            text = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            text = file_path.read_bytes().decode("utf-8", errors="replace")
        return cls(uri=file_path.as_uri(), file_name=str(file_path), text=text)

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_at(self, index: int) -> str:
        return self.lines[index].rstrip("\r")


# ---------------------------------------------------------------------------
# Artifact kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuraArtifact:
    bundle_name: str
    def_type: str
    file_name: str


@dataclass(frozen=True)
class LwcArtifact:
    bundle_name: str
    def_type: str
    file_name: str

    @property
    def file_path(self) -> str:
        return f"lwc/{self.bundle_name}/{self.file_name}.{self.def_type}"

    @property
    def resource_format(self) -> str:
        # meta.xml resources are stored with format js by metadata deployments
        return "js" if self.def_type == "xml" else self.def_type


@dataclass(frozen=True)
class StaticResourceArtifact:
    name: str


@dataclass(frozen=True)
class ContainerArtifact:
    tooling_type: str
    full_name: str


Artifact = AuraArtifact | LwcArtifact | StaticResourceArtifact | ContainerArtifact


# ---------------------------------------------------------------------------
# Compile results
# ---------------------------------------------------------------------------


class CompileStatus(str, Enum):
    SUCCESS = "👍🏻"
    FAILURE = "👎🏻"
    NOOP = ""


@dataclass(frozen=True)
class CompileOutcome:
    """What a strategy wants applied once its remote calls are over.

    ``diagnostics`` of ``None`` leaves the document's problem list untouched;
    a list (possibly empty) replaces it.
    """

    status: CompileStatus
    diagnostics: list[NormalizedDiagnostic] | None = None
    alert: str | None = None


class DeployDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    component_failures: list[dict[str, Any]] = Field(default_factory=list, alias="componentFailures")

    @field_validator("component_failures", mode="before")
    @classmethod
    def _coerce_failures(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value


class ToolingCompileResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    state: str = Field(alias="State")
    deploy_details: DeployDetails = Field(default_factory=DeployDetails, alias="DeployDetails")
    error_msg: str | None = Field(default=None, alias="ErrorMsg")

    @field_validator("deploy_details", mode="before")
    @classmethod
    def _coerce_details(cls, value: Any) -> Any:
        return {} if value is None else value
