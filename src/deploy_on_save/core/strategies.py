"""Per-kind upsert strategies.

Each strategy resolves the remote identity of a document, builds the payload
its kind needs, upserts it and reports back a ``CompileOutcome``. Strategies
never raise; the dispatcher applies the outcome.
"""

import logging
from typing import Any

from deploy_on_save.core.diagnostics import parse_compiler_error, parse_component_failures
from deploy_on_save.core.metadata import encode_base64, prepare_bundle_metadata
from deploy_on_save.core.parsers import escape_soql
from deploy_on_save.core.ports.connector import RemoteConnector
from deploy_on_save.core.ports.tooling import ToolingCompiler
from deploy_on_save.models import (
    AuraArtifact,
    CompileOutcome,
    CompileStatus,
    ContainerArtifact,
    LwcArtifact,
    StaticResourceArtifact,
    TextDocument,
)

logger = logging.getLogger(__name__)

_COMPLETED = "Completed"


class RecordNotFoundError(Exception):
    """The document has no counterpart on the org."""


def _compiler_error_outcome(exc: Exception, document: TextDocument, file_name: str) -> CompileOutcome:
    diagnostic = parse_compiler_error(str(exc), file_name, document.line_count)
    return CompileOutcome(status=CompileStatus.FAILURE, diagnostics=[diagnostic])


async def compile_aura_definition(
    document: TextDocument,
    artifact: AuraArtifact,
    connector: RemoteConnector,
) -> CompileOutcome:
    try:
        record = await connector.find_aura_by_name_and_def_type(artifact.bundle_name, artifact.def_type)
        if not record:
            raise RecordNotFoundError("File not found on Salesforce server")
        await connector.upsert_aura_obj({**record, "Source": document.text})
    except Exception as exc:
        return _compiler_error_outcome(exc, document, artifact.file_name)
    return CompileOutcome(status=CompileStatus.SUCCESS, diagnostics=[])


async def compile_lightning_web_component(
    document: TextDocument,
    artifact: LwcArtifact,
    connector: RemoteConnector,
) -> CompileOutcome:
    try:
        bundle_id = await connector.find_lwc_bundle_id(artifact.bundle_name)
        if artifact.def_type == "xml":
            await connector.upsert_obj(
                "LightningComponentBundle",
                {"Id": bundle_id, "Metadata": prepare_bundle_metadata(document.text)},
            )

        record: dict[str, Any] | None = await connector.find_lwc_by_name_and_def_type(
            artifact.bundle_name, artifact.resource_format, artifact.file_path
        )
        if not record:
            record = {
                "Format": artifact.resource_format,
                "LightningComponentBundleId": bundle_id,
                "FilePath": artifact.file_path,
            }
        await connector.upsert_lwc_obj({**record, "Source": document.text})
    except Exception as exc:
        return _compiler_error_outcome(exc, document, artifact.file_name)
    return CompileOutcome(status=CompileStatus.SUCCESS, diagnostics=[])


async def compile_static_resource(
    document: TextDocument,
    artifact: StaticResourceArtifact,
    connector: RemoteConnector,
) -> CompileOutcome:
    try:
        result = await connector.query(f"SELECT Id FROM StaticResource WHERE Name = '{escape_soql(artifact.name)}'")
        records = result.get("records") or []
        if not records:
            return CompileOutcome(status=CompileStatus.NOOP)
        logger.info("Updating %s", document.file_name)
        await connector.upsert_obj(
            "StaticResource",
            {"Id": records[0]["Id"], "Body": encode_base64(document.text)},
        )
    except Exception as exc:
        return CompileOutcome(status=CompileStatus.FAILURE, alert=str(exc))
    return CompileOutcome(status=CompileStatus.SUCCESS)


async def compile_metadata_container(
    document: TextDocument,
    artifact: ContainerArtifact,
    tooling: ToolingCompiler,
) -> CompileOutcome:
    try:
        logger.info("Compiling %s", document.file_name)
        compile_request = await tooling.request_compile()
        result = await compile_request(
            artifact.tooling_type,
            {"Body": document.text, "FullName": artifact.full_name},
        )
        logger.info("Done.")
    except Exception as exc:
        return CompileOutcome(status=CompileStatus.FAILURE, alert=str(exc))

    diagnostics = parse_component_failures(result.deploy_details.component_failures, document.line_count)
    status = CompileStatus.SUCCESS if result.state == _COMPLETED else CompileStatus.FAILURE
    return CompileOutcome(status=status, diagnostics=diagnostics)
