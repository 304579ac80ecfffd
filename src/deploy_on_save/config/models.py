"""
Configuration data models.

These models describe the workspace credential store (``.vscode/fastsfdc.json``)
and the deploy tool settings (``.sfdy.json``). Keys are camelCase on disk.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Credential(_CamelModel):
    """Connection settings for one org. The access token is obtained elsewhere."""

    username: str = ""
    instance_url: str = Field(default="", description="Org base URL, e.g. https://acme.my.salesforce.com")
    access_token: str = ""
    api_version: str = "60.0"
    deploy_on_save: bool = True


class StoredConfig(_CamelModel):
    stored: bool = False
    credentials: dict[str, Credential] = Field(default_factory=dict)
    current_credential: str | None = None

    @property
    def current(self) -> Credential | None:
        if self.current_credential is None:
            return None
        return self.credentials.get(self.current_credential)


class SfdyConfig(_CamelModel):
    exclude_files: list[str] | None = None
