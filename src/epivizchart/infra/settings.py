"""Runtime settings for epivizchart."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ComposerSettings(BaseSettings):
    """Settings for chart composition."""

    model_config = SettingsConfigDict(
        env_prefix="EPIVIZCHART_",
        env_file=".env",
        extra="ignore",
    )

    environment_tag: str = Field("epiviz-environment", description="Tag name of the environment container")
    chart_class: str = Field("charts", description="CSS class set on every chart tag")
    datasource_prefix: str = Field("epivizChart", description="Prefix for synthesized datasource names")
    json_ensure_ascii: bool = Field(default=False, description="Escape non-ASCII characters in JSON payloads")


@lru_cache(maxsize=1)
def get_settings() -> ComposerSettings:
    """Return the process-wide settings, read once from the environment."""
    return ComposerSettings()
