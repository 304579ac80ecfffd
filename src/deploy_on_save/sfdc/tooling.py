import asyncio
import logging
import uuid
from typing import Any

import httpx

from deploy_on_save.core.parsers import escape_soql
from deploy_on_save.core.ports.tooling import CompileRequest
from deploy_on_save.models import ToolingCompileResult
from deploy_on_save.sfdc.connector import ToolingConnector
from deploy_on_save.sfdc.errors import SalesforceError, ToolingCompileError

logger = logging.getLogger(__name__)

_MEMBER_ENTITY_TYPES = {
    "ApexClassMember": "ApexClass",
    "ApexTriggerMember": "ApexTrigger",
    "ApexPageMember": "ApexPage",
    "ApexComponentMember": "ApexComponent",
}

_QUEUED = "Queued"


def _container_name() -> str:
    # MetadataContainer names are capped at 32 characters
    return f"DeployOnSave-{uuid.uuid4().hex[:12]}"


class MetadataContainerCompiler:
    """Compile Apex sources through a throwaway ``MetadataContainer``.

    Implements the ``ToolingCompiler`` protocol.
    """

    def __init__(self, connector: ToolingConnector, poll_interval: float = 1.0) -> None:
        self._connector = connector
        self._poll_interval = poll_interval

    async def request_compile(self) -> CompileRequest:
        return self._compile

    async def _compile(self, tooling_type: str, payload: dict[str, str]) -> ToolingCompileResult:
        entity_type = _MEMBER_ENTITY_TYPES.get(tooling_type)
        if entity_type is None:
            raise ToolingCompileError(f"Unsupported tooling type {tooling_type}")

        full_name = payload["FullName"]
        entities = await self._connector.tooling_query(
            f"SELECT Id FROM {entity_type} WHERE Name = '{escape_soql(full_name)}'"
        )
        records = entities.get("records") or []
        if not records:
            raise ToolingCompileError(f"{entity_type} {full_name} not found on Salesforce server")

        container_id = await self._connector.create("MetadataContainer", {"Name": _container_name()})
        try:
            await self._connector.create(
                tooling_type,
                {
                    "MetadataContainerId": container_id,
                    "ContentEntityId": records[0]["Id"],
                    "Body": payload["Body"],
                },
            )
            request_id = await self._connector.create(
                "ContainerAsyncRequest",
                {"MetadataContainerId": container_id, "IsCheckOnly": False},
            )
            return await self._wait_for(request_id)
        finally:
            await self._discard_container(container_id)

    async def _wait_for(self, request_id: str) -> ToolingCompileResult:
        while True:
            record: dict[str, Any] = await self._connector.retrieve("ContainerAsyncRequest", request_id)
            if record.get("State") != _QUEUED:
                return ToolingCompileResult.model_validate(record)
            await asyncio.sleep(self._poll_interval)

    async def _discard_container(self, container_id: str) -> None:
        try:
            await self._connector.delete("MetadataContainer", container_id)
        except (SalesforceError, httpx.HTTPError) as exc:
            logger.warning("Could not delete MetadataContainer %s: %s", container_id, exc)
