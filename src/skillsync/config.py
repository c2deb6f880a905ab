from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Self

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from skillsync.exception import ConfigError
from skillsync.share import resolve_share_dir
from skillsync.similarity.name import NameAlgorithm
from skillsync.sync.strategy import Strategy

CONFIG_FILE_NAME = "config.yaml"


class _Section(BaseModel):
    """Accepts both ``camelCase`` and ``snake_case`` keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class SimilarityConfig(_Section):
    name_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    content_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    algorithm: NameAlgorithm = NameAlgorithm.COMBINED

    @field_validator("algorithm", mode="before")
    @classmethod
    def _parse_algorithm(cls, value: Any) -> Any:
        if isinstance(value, str):
            return NameAlgorithm.parse(value)
        return value


class SyncConfig(_Section):
    default_strategy: Strategy = Strategy.OVERWRITE
    auto_backup: bool = True

    @field_validator("default_strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Strategy.parse(value)
        return value


class BackupConfig(_Section):
    retention_days: int = Field(default=30, ge=0)


class PathsConfig(_Section):
    skillsync_home: Path | None = None
    admin_path: Path | None = None
    system_path: Path | None = None
    builtin_path: Path | None = None


class LoggingConfig(_Section):
    levels: dict[str, str] = Field(default_factory=dict)
    """Per-module log levels, e.g. ``{"skillsync.sync": "DEBUG"}``."""


class Config(_Section):
    """Main configuration structure."""

    similarity: SimilarityConfig = Field(default_factory=SimilarityConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_mapping(cls, data: Any) -> Self:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Invalid configuration: top level must be a mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def get_config_file(skillsync_home: Path | None = None) -> Path:
    """Get the configuration file path."""
    return resolve_share_dir(skillsync_home) / CONFIG_FILE_NAME


def get_default_config() -> Config:
    """Get the default configuration."""
    return Config()


def load_config_from_string(text: str) -> Config:
    """
    Load configuration from YAML or JSON text.

    Raises:
        ConfigError: If the text cannot be parsed or the values are invalid.
    """
    try:
        if text.lstrip().startswith("{"):
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid configuration text: {e}") from e
    return Config.from_mapping(data)


def load_config(config_file: Path | None = None) -> Config:
    """
    Load configuration from a file; a missing default file yields the defaults.

    Args:
        config_file (Path | None): Explicit config file. An explicit file must exist.

    Raises:
        ConfigError: If the file cannot be read or holds an invalid configuration.
    """
    explicit = config_file is not None
    config_file = config_file or get_config_file()
    if not config_file.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_file}")
        logger.debug("No config file at {file}, using defaults", file=config_file)
        return get_default_config()

    logger.debug("Loading config from file: {file}", file=config_file)
    try:
        text = config_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file {config_file}: {e}") from e
    return load_config_from_string(text)


def dump_config(config: Config) -> str:
    """Render a configuration as camelCase YAML."""
    data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
    return yaml.safe_dump(data, sort_keys=False)
