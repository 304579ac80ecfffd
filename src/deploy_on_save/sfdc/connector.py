import logging
from typing import Any

import httpx

from deploy_on_save.config.models import Credential
from deploy_on_save.core.parsers import escape_soql
from deploy_on_save.sfdc.errors import SalesforceError

logger = logging.getLogger(__name__)

_NON_PAYLOAD_KEYS = frozenset({"Id", "attributes"})


def _payload(record: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in record.items() if k not in _NON_PAYLOAD_KEYS}


class ToolingConnector:
    """Talks to the org's REST and Tooling APIs with a pre-issued access token.

    Implements the ``RemoteConnector`` protocol.
    """

    def __init__(
        self,
        credential: Credential,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        base_url = f"{credential.instance_url.rstrip('/')}/services/data/v{credential.api_version}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {credential.access_token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, url, **kwargs)
        if response.is_error:
            raise SalesforceError.from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # -- generic ------------------------------------------------------------

    async def query(self, soql: str) -> dict[str, Any]:
        result = await self._request("GET", "/query", params={"q": soql})
        return result or {"records": []}

    async def tooling_query(self, soql: str) -> dict[str, Any]:
        result = await self._request("GET", "/tooling/query", params={"q": soql})
        return result or {"records": []}

    async def create(self, type_name: str, payload: dict[str, Any]) -> str:
        result = await self._request("POST", f"/tooling/sobjects/{type_name}", json=_payload(payload))
        return str(result["id"])

    async def update(self, type_name: str, record_id: str, payload: dict[str, Any]) -> str:
        await self._request("PATCH", f"/tooling/sobjects/{type_name}/{record_id}", json=_payload(payload))
        return record_id

    async def retrieve(self, type_name: str, record_id: str) -> dict[str, Any]:
        result = await self._request("GET", f"/tooling/sobjects/{type_name}/{record_id}")
        return result or {}

    async def delete(self, type_name: str, record_id: str) -> None:
        await self._request("DELETE", f"/tooling/sobjects/{type_name}/{record_id}")

    async def upsert_obj(self, type_name: str, payload: dict[str, Any]) -> str:
        record_id = payload.get("Id")
        if record_id:
            logger.debug("Updating %s %s", type_name, record_id)
            return await self.update(type_name, record_id, payload)
        logger.debug("Creating %s", type_name)
        return await self.create(type_name, payload)

    async def _first_record(self, soql: str) -> dict[str, Any] | None:
        records = (await self.tooling_query(soql)).get("records") or []
        return records[0] if records else None

    # -- aura ---------------------------------------------------------------

    async def find_aura_by_name_and_def_type(self, bundle_name: str, def_type: str) -> dict[str, Any] | None:
        return await self._first_record(
            "SELECT Id, AuraDefinitionBundleId, DefType, Format FROM AuraDefinition "
            f"WHERE AuraDefinitionBundle.DeveloperName = '{escape_soql(bundle_name)}' "
            f"AND DefType = '{escape_soql(def_type)}'"
        )

    async def upsert_aura_obj(self, record: dict[str, Any]) -> str:
        if record.get("Id"):
            return await self.update("AuraDefinition", record["Id"], {"Source": record["Source"]})
        return await self.create("AuraDefinition", record)

    # -- lwc ----------------------------------------------------------------

    async def find_lwc_bundle_id(self, bundle_name: str) -> str | None:
        record = await self._first_record(
            f"SELECT Id FROM LightningComponentBundle WHERE DeveloperName = '{escape_soql(bundle_name)}'"
        )
        return record["Id"] if record else None

    async def find_lwc_by_name_and_def_type(
        self, bundle_name: str, resource_format: str, file_path: str
    ) -> dict[str, Any] | None:
        return await self._first_record(
            "SELECT Id, Format, FilePath, LightningComponentBundleId FROM LightningComponentResource "
            f"WHERE LightningComponentBundle.DeveloperName = '{escape_soql(bundle_name)}' "
            f"AND Format = '{escape_soql(resource_format)}' "
            f"AND FilePath = '{escape_soql(file_path)}'"
        )

    async def upsert_lwc_obj(self, record: dict[str, Any]) -> str:
        if record.get("Id"):
            return await self.update("LightningComponentResource", record["Id"], {"Source": record["Source"]})
        return await self.create("LightningComponentResource", record)

    async def aclose(self) -> None:
        await self._client.aclose()
