"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatrixConfig(Base):
    """Matrix session configuration."""
    homeserver: str = "https://matrix.org"
    user_id: str = ""  # Full bot id, e.g. "@spaceconvert:example.org"
    access_token: str = ""  # Preferred over password when both are set
    password: str = ""
    device_id: str = ""
    device_name: str = "spaceconvert"
    sync_timeout_ms: int = 30000
    auto_join: bool = True  # Accept room invites so users can summon the bot


class BotConfig(Base):
    """Command and conversion behaviour."""
    command_prefix: str = "!convert"
    alias_prefix: str = "spaceconvert_"
    progress_reaction: str = "In Progress"
    success_reaction: str = "✅"
    admin_level: int = 100
    demoted_level: int = 0


class LoggingConfig(Base):
    """Logging sinks."""
    level: str = "INFO"
    file: str | None = None

    @property
    def file_path(self) -> Path | None:
        return Path(self.file).expanduser() if self.file else None


class Config(BaseSettings):
    """Root configuration for spaceconvert."""

    matrix: MatrixConfig = Field(default_factory=MatrixConfig)
    bot: BotConfig = Field(default_factory=BotConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="SPACECONVERT_",
        env_nested_delimiter="__",
    )
