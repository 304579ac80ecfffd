from typing import Any, Protocol


class RemoteConnector(Protocol):
    async def find_aura_by_name_and_def_type(self, bundle_name: str, def_type: str) -> dict[str, Any] | None: ...

    async def upsert_aura_obj(self, record: dict[str, Any]) -> str: ...

    async def find_lwc_bundle_id(self, bundle_name: str) -> str | None: ...

    async def find_lwc_by_name_and_def_type(
        self, bundle_name: str, resource_format: str, file_path: str
    ) -> dict[str, Any] | None: ...

    async def upsert_lwc_obj(self, record: dict[str, Any]) -> str: ...

    async def upsert_obj(self, type_name: str, payload: dict[str, Any]) -> str: ...

    async def query(self, soql: str) -> dict[str, Any]: ...
