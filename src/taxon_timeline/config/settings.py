"""Configuration management built on top of the policy primitives."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .policies import Policies, load_policies

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"
SETTINGS_ENV_PREFIX = "TAXON_TIMELINE_SETTINGS__"


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries."""

    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _apply_env_overrides(base: Dict[str, Any]) -> Dict[str, Any]:
    """Apply overrides from TAXON_TIMELINE_SETTINGS__* environment variables."""

    result = dict(base)
    for key, value in os.environ.items():
        if not key.startswith(SETTINGS_ENV_PREFIX):
            continue
        path = key[len(SETTINGS_ENV_PREFIX) :].lower().split("__")
        cursor = result
        for part in path[:-1]:
            cursor = cursor.setdefault(part, {})
        cursor[path[-1]] = value
    return result


class Settings(BaseSettings):
    """Primary configuration object for taxon_timeline.

    Precedence (highest first): explicit kwargs, environment
    variables prefixed with ``TAXON_TIMELINE_`` (handled by
    :class:`BaseSettings`), nested overrides via ``TAXON_TIMELINE_SETTINGS__``
    variables, environment-specific YAML (e.g. ``testing.yaml``), the default
    YAML file, and finally the class defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXON_TIMELINE_",
        validate_assignment=True,
        extra="allow",
    )

    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Active runtime environment",
    )
    config_dir: Path = Field(default=DEFAULT_CONFIG_DIR)
    log_dir: Path = Field(default=PROJECT_ROOT / "logs")
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(
        default=False,
        description="Write a rotating log file under `log_dir` in addition to stderr.",
    )
    policies: Policies

    @model_validator(mode="before")
    @classmethod
    def _bootstrap_from_files(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        """Load YAML files and merge with provided overrides."""

        config_dir = Path(values.get("config_dir") or DEFAULT_CONFIG_DIR)
        environment = values.get("environment") or os.getenv("TAXON_TIMELINE_ENV", "development")
        base_config = _load_yaml_file(config_dir / "default.yaml")
        env_config = _load_yaml_file(config_dir / f"{environment}.yaml")
        hydrated = _apply_env_overrides(_deep_merge(base_config, env_config))

        combined = _deep_merge(hydrated, {k: v for k, v in values.items() if v is not None})

        policies_data = combined.pop("policies", None)
        if isinstance(policies_data, Policies):
            combined["policies"] = policies_data
            return combined
        combined["policies"] = load_policies(policies_data or {})
        return combined

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def policy_version(self) -> str:
        return self.policies.policy_version

    @property
    def log_file(self) -> Path:
        return self.log_dir / "taxon_timeline.log"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a singleton settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
