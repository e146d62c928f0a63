"""Application configuration (Pydantic v2). Load from snapsong_config.yml with optional env override."""

import os
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, field_validator


DEFAULT_CONFIG_ENV_VAR = "SNAPSONG_CONFIG"
DEFAULT_CONFIG_FILENAME = "snapsong_config.yml"

DEFAULT_ANALYSIS_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_ANALYSIS_MODEL = "gemini-1.5-flash"
DEFAULT_CATALOG_TOKEN_URL = "https://accounts.spotify.com/api/token"
DEFAULT_CATALOG_API_URL = "https://api.spotify.com/v1"
DEFAULT_FALLBACK_AUDIO_URL = "https://www.sample-videos.com/audio/mp3/crowd-cheering.mp3"

# Environment variable -> Settings field. Applied only when loading the default config.
ENV_OVERRIDES: dict[str, str] = {
    "SNAPSONG_ANALYZER": "analyzer",
    "SNAPSONG_ANALYSIS_ENDPOINT": "analysis_endpoint",
    "SNAPSONG_ANALYSIS_MODEL": "analysis_model",
    "SNAPSONG_ANALYSIS_KEY": "analysis_key",
    "SNAPSONG_CATALOG_CLIENT_ID": "catalog_client_id",
    "SNAPSONG_CATALOG_CLIENT_SECRET": "catalog_client_secret",
    "SNAPSONG_CUSTOM_AUDIO_URL": "custom_audio_url",
    "SNAPSONG_FALLBACK_AUDIO_URL": "fallback_audio_url",
    "SNAPSONG_LOG_LEVEL": "log_level",
}

SECRET_FIELDS = frozenset({"analysis_key", "catalog_client_secret"})


class Settings(BaseModel):
    """
    Service config loaded from YAML.

    Credentials and endpoints may be overridden by SNAPSONG_* environment variables
    when loading the default config (but not when an explicit config_path is provided).
    """

    model_config = {"extra": "ignore"}

    analyzer: Literal["gemini", "mock"] = "gemini"

    analysis_endpoint: str = DEFAULT_ANALYSIS_ENDPOINT
    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    analysis_key: str | None = None

    catalog_token_url: str = DEFAULT_CATALOG_TOKEN_URL
    catalog_api_url: str = DEFAULT_CATALOG_API_URL
    catalog_client_id: str | None = None
    catalog_client_secret: str | None = None
    cache_catalog_token: bool = True

    custom_audio_url: str | None = None
    fallback_audio_url: str = DEFAULT_FALLBACK_AUDIO_URL

    request_timeout_seconds: float = 8.0
    max_upload_bytes: int = 8 * 1024 * 1024
    log_level: str = "INFO"

    @field_validator(
        "analysis_key",
        "catalog_client_id",
        "catalog_client_secret",
        "custom_audio_url",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> str | None:
        if v is not None and str(v).strip() != "":
            return str(v).strip()
        return None

    @field_validator("fallback_audio_url")
    @classmethod
    def fallback_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("fallback_audio_url must be non-empty")
        return v.strip()

    @field_validator("request_timeout_seconds")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be > 0")
        return v

    def redacted(self) -> dict[str, Any]:
        """Return settings as a dict with secret values masked."""
        data = self.model_dump()
        for key in SECRET_FIELDS:
            if data.get(key):
                data[key] = "***"
        return data


_config: Settings | None = None


class ConfigLoader:
    """
    Helper responsible for loading Settings from YAML and environment.

    - load_from_yaml(path, apply_env_override): read a YAML file and optionally apply env overrides.
    - load_default(): resolve the default config path from SNAPSONG_CONFIG / snapsong_config.yml and
      apply SNAPSONG_* overrides when present.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _env_overrides(self) -> dict[str, str]:
        return {field: self._env[var] for var, field in ENV_OVERRIDES.items() if self._env.get(var)}

    def load_from_yaml(self, path: Path, apply_env_override: bool) -> Settings:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        if not data:
            data = {}
        if apply_env_override:
            data.update(self._env_overrides())
        return Settings.model_validate(data)

    def load_default(self) -> Settings:
        """
        Load the default Settings, using SNAPSONG_CONFIG or snapsong_config.yml.

        Secrets normally come from the environment, so SNAPSONG_* variables win over
        values in the YAML file.
        """
        path_str = self._env.get(DEFAULT_CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILENAME
        path = Path(path_str)
        if path.exists():
            return self.load_from_yaml(path, apply_env_override=True)
        return Settings.model_validate(self._env_overrides())


def get_config(config_path: str | Path | None = None) -> Settings:
    """
    Return singleton config.

    - If config_path is given, load from it (without env overrides) and update the cache.
    - Otherwise, return the cached config if available, or load via ConfigLoader.load_default().
    """
    global _config
    if config_path is not None:
        _config = ConfigLoader().load_from_yaml(Path(config_path), apply_env_override=False)
        return _config
    if _config is not None:
        return _config
    _config = ConfigLoader().load_default()
    return _config


def reset_config() -> None:
    """Clear cached config (for tests)."""
    global _config
    _config = None
