"""
Configuration loading.

The credential store lives at ``<workspace>/.vscode/fastsfdc.json`` unless
``DEPLOY_ON_SAVE_CONFIG`` points elsewhere. A missing store means the
workspace was never set up and is reported as ``stored=False``.

Environment overrides for the current credential:
    SF_INSTANCE_URL - overrides instanceUrl
    SF_ACCESS_TOKEN - overrides accessToken
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from deploy_on_save.config.models import SfdyConfig, StoredConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DEPLOY_ON_SAVE_CONFIG"
_DEFAULT_CONFIG_PATH = Path(".vscode") / "fastsfdc.json"
_SFDY_CONFIG_PATH = Path(".sfdy.json")


class ConfigError(Exception):
    """A configuration file exists but cannot be used."""


def get_config_path(workspace_folder: Path) -> Path:
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return workspace_folder / _DEFAULT_CONFIG_PATH


def load_json_file(path: Path) -> dict[str, Any] | None:
    """Return the parsed JSON object at ``path``, or None if the file is absent."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Failed to read config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} must be a JSON object")
    return data


def apply_env_overrides(config: StoredConfig) -> StoredConfig:
    current = config.current
    if current is None or config.current_credential is None:
        return config

    updates: dict[str, str] = {}
    if instance_url := os.getenv("SF_INSTANCE_URL"):
        updates["instance_url"] = instance_url
    if access_token := os.getenv("SF_ACCESS_TOKEN"):
        updates["access_token"] = access_token
    if not updates:
        return config

    credentials = dict(config.credentials)
    credentials[config.current_credential] = current.model_copy(update=updates)
    return config.model_copy(update={"credentials": credentials})


def load_stored_config(workspace_folder: Path) -> StoredConfig:
    path = get_config_path(workspace_folder)
    data = load_json_file(path)
    if data is None:
        logger.debug("No credential store at %s", path)
        return StoredConfig(stored=False)
    try:
        config = StoredConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    return apply_env_overrides(config)


def load_sfdy_config(workspace_folder: Path) -> SfdyConfig:
    data = load_json_file(workspace_folder / _SFDY_CONFIG_PATH)
    if data is None:
        return SfdyConfig()
    try:
        return SfdyConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid .sfdy.json in {workspace_folder}: {exc}") from exc


class FileConfigService:
    """Reads workspace configuration fresh on every call."""

    def __init__(self, workspace_folder: str | Path) -> None:
        self._workspace = Path(workspace_folder).resolve()
        self.workspace_folder = str(self._workspace)

    async def get_config(self) -> StoredConfig:
        return load_stored_config(self._workspace)

    def get_sfdy_config_sync(self) -> SfdyConfig:
        return load_sfdy_config(self._workspace)
