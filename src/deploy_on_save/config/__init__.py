from deploy_on_save.config.loader import (
    ConfigError,
    FileConfigService,
    load_sfdy_config,
    load_stored_config,
)
from deploy_on_save.config.models import Credential, SfdyConfig, StoredConfig

__all__ = [
    "ConfigError",
    "Credential",
    "FileConfigService",
    "SfdyConfig",
    "StoredConfig",
    "load_sfdy_config",
    "load_stored_config",
]
