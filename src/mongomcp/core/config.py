"""Configuration management for MongoMCP.

This module uses Pydantic Settings to load and validate configuration from
environment variables and an optional JSON config file. Configuration is loaded
once at startup and is immutable during runtime.

The JSON config file layout:

    {
      "mongodb": {"uri": "mongodb://localhost:27017/mydb", "options": {}},
      "server": {"name": "mongodb-mcp-server", "version": "1.0.0"}
    }
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

CONFIG_PATH_ENV = "MCP_CONFIG_PATH"
HOME_CONFIG_NAME = ".mongodb-mcp-config.json"


def find_config_file() -> Path | None:
    """Locate the JSON config file.

    Search order: ``$MCP_CONFIG_PATH``, ``./config.json``, then
    ``~/.mongodb-mcp-config.json``.

    Returns:
        Path to the first existing file, or None if no file exists.
    """
    candidates: list[Path] = []

    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        candidates.append(Path(explicit).expanduser())

    candidates.append(Path.cwd() / "config.json")
    candidates.append(Path.home() / HOME_CONFIG_NAME)

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


class MongoSettings(BaseModel):
    """Document store connection parameters."""

    uri: str = "mongodb://localhost:27017"
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword options passed verbatim to the MongoDB client",
    )
    database: str = Field(
        default="test",
        description="Database used when the URI does not name one",
    )

    @field_validator("uri")
    @classmethod
    def validate_uri(cls, v: str) -> str:
        """Require a mongodb:// or mongodb+srv:// URI."""
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("MongoDB URI must start with mongodb:// or mongodb+srv://")
        return v


class ServerSettings(BaseModel):
    """Self-identification used in the protocol handshake."""

    name: str = "mongodb-mcp-server"
    version: str = "1.0.0"


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and the JSON config file.
    Environment variables take precedence over the file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONGOMCP_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "testing"] = "production"

    mongodb: MongoSettings = Field(default_factory=MongoSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    # Fixed-schema question collection
    questions_collection: str = "DsaQuestions"

    # HTTP transport
    http_host: str = "127.0.0.1"
    http_port: int = 8765

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Layer init kwargs, environment, then the discovered JSON file."""
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        config_file = find_config_file()
        if config_file is not None:
            sources.append(JsonConfigSettingsSource(settings_cls, json_file=config_file))
        return tuple(sources)

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
