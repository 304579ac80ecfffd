"""Turn remote compile errors into editor diagnostics.

Two payload shapes come back from the platform:

* tooling container compiles return a list of component failure records
  (``parse_component_failures``);
* Aura and LWC upserts fail with a single free-text compiler message
  (``parse_compiler_error``).

Both produce zero-based ``NormalizedDiagnostic`` values clamped to the
document's line range.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

from deploy_on_save.models import NormalizedDiagnostic, Severity

# whole message, with a "[line:col]" / "[line, col]" token somewhere in it
_BRACKET_POSITION = re.compile(r".*\[(\d+)[:, ]+(\d+)\].*")

_DEFAULT_POSITION = "1,1:"


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _clamp_line(line: int, line_count: int) -> int:
    return min(max(line, 0), max(line_count - 1, 0))


def parse_component_failures(
    failures: Iterable[Mapping[str, Any]],
    line_count: int,
) -> list[NormalizedDiagnostic]:
    """Map tooling ``componentFailures`` records to diagnostics.

    Records carrying ``ProblemType == "Error"`` are left out; they reach the
    user through the compile status instead.
    """
    diagnostics: list[NormalizedDiagnostic] = []
    for failure in failures:
        if failure.get("ProblemType") == "Error":
            continue
        line_number = abs(_to_int(failure.get("lineNumber") or failure.get("LineNumber") or 1) or 1)
        column_number = _to_int(failure.get("columnNumber")) or 0
        severity = Severity.WARNING if failure.get("problemType") == "Warning" else Severity.ERROR
        diagnostics.append(
            NormalizedDiagnostic(
                line=_clamp_line(line_number - 1, line_count),
                column=column_number - 1 if column_number > 0 else None,
                message=str(failure.get("problem") or ""),
                severity=severity,
            )
        )
    return diagnostics


def parse_compiler_error(message: str, filename: str, line_count: int) -> NormalizedDiagnostic:
    """Map a free-text Aura/LWC compiler message to exactly one diagnostic.

    Messages embedding ``[line:col]`` keep the whole text as the message.
    Otherwise the position is read from ``<filename>:<line>,<col>:<text>``,
    defaulting to ``1,1`` when the filename marker is missing. Fragments that
    are not numbers fall back to the first line and a whole-line range.
    """
    match = _BRACKET_POSITION.fullmatch(message)
    if match:
        error_message = match.group(0)
        line = int(match.group(1)) - 1
        column: int | None = int(match.group(2))
    else:
        parts = message.split(filename + ":")
        part_two = parts[1] if len(parts) > 1 else _DEFAULT_POSITION + message
        idx = part_two.find(":") + 1
        range_parts = part_two[:idx].rstrip(":").split(",")
        error_message = part_two[idx:]
        line_number = _to_int(range_parts[0])
        line = line_number - 1 if line_number is not None else 0
        column = _to_int(range_parts[1]) if len(range_parts) > 1 else None

    return NormalizedDiagnostic(
        line=_clamp_line(line, line_count),
        column=column if column is not None and column > 0 else None,
        message=error_message,
        severity=Severity.ERROR,
    )
