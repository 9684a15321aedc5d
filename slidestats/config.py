from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import StatisticsError
from .core.methods import default_statistics, parse_request, statistic_name


class RuntimeConfig(BaseModel):
    """Processing options; YAML keys may use either the snake_case field
    names or the camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)

    sliding_window_length: int = Field(
        100, ge=1, alias="slidingWindowLength", description="Samples kept per metric stream"
    )
    sliding_factor: int = Field(
        1, ge=1, alias="slidingFactor", description="Emit statistics every Nth inserted sample"
    )
    statistics: List[str] = Field(default_factory=default_statistics)
    max_streams: Optional[int] = Field(
        None, ge=1, alias="maxStreams", description="Bound on tracked streams (LRU); unbounded if unset"
    )
    namespace_prefix: List[str] = Field(default_factory=lambda: ["slidestats"], alias="namespacePrefix")

    @field_validator("statistics")
    @classmethod
    def _known_statistics(cls, v: List[str]) -> List[str]:
        try:
            keys = parse_request(v)
        except StatisticsError as exc:
            raise ValueError(str(exc)) from exc
        return [statistic_name(k) for k in keys]

    @model_validator(mode="after")
    def _factor_within_window(self) -> "RuntimeConfig":
        if self.sliding_factor > self.sliding_window_length:
            raise ValueError(
                f"slidingFactor ({self.sliding_factor}) must not exceed "
                f"slidingWindowLength ({self.sliding_window_length})"
            )
        return self


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    LOG_LEVEL: str = "INFO"
    SLIDESTATS_CONFIG: Optional[str] = None


class AppConfig(BaseModel):
    env: EnvSettings
    runtime: RuntimeConfig

    @staticmethod
    def load(config_path: Optional[Path] = None) -> "AppConfig":
        env = EnvSettings()  # loads from environment and .env

        runtime = RuntimeConfig()
        if config_path is None:
            if env.SLIDESTATS_CONFIG:
                config_path = Path(env.SLIDESTATS_CONFIG)
            else:
                default_path = Path("config.yaml")
                config_path = default_path if default_path.exists() else None

        if config_path and Path(config_path).exists():
            with open(config_path, "r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            if not isinstance(raw, dict):
                raise ValueError(f"Invalid config {config_path}: expected a mapping at top level")
            try:
                runtime = RuntimeConfig(**raw)
            except ValidationError as ve:
                raise ValueError(f"Invalid config {config_path}: {ve}")
        elif config_path:
            raise FileNotFoundError(f"Config file not found: {config_path}")

        return AppConfig(env=env, runtime=runtime)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load merged configuration from environment and optional YAML."""

    return AppConfig.load(config_path)
