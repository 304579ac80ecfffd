from typing import Protocol

from deploy_on_save.config.models import SfdyConfig, StoredConfig


class ConfigService(Protocol):
    workspace_folder: str

    async def get_config(self) -> StoredConfig: ...

    def get_sfdy_config_sync(self) -> SfdyConfig: ...
