from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


def _repo_root() -> Path:
    # .../backend/settings/config.py -> repo root is 2 levels up
    return Path(__file__).resolve().parents[2]


def default_data_path() -> Path:
    return _repo_root() / "data" / "fullDownload.json"


class Settings(BaseModel):
    """
    Server configuration.

    Resolution order: defaults -> YAML file named by `REDLINE_CONFIG` -> `REDLINE_*` env.
    """

    data_path: Path = Field(default_factory=default_data_path)
    cache_size: int = Field(default=20, ge=1)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = Field(default=3232, ge=1, le=65535)
    log_level: str = "INFO"


_ENV_KEYS = {
    "REDLINE_DATA_PATH": "data_path",
    "REDLINE_CACHE_SIZE": "cache_size",
    "REDLINE_CORS_ORIGINS": "cors_origins",
    "REDLINE_HOST": "host",
    "REDLINE_PORT": "port",
    "REDLINE_LOG_LEVEL": "log_level",
}


def _load_yaml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config yaml root: {path}")
    return data


def _env_overrides() -> dict[str, Any]:
    out: dict[str, Any] = {}
    for env_key, name in _ENV_KEYS.items():
        v = os.getenv(env_key)
        if v is None or not v.strip():
            continue
        if name == "cors_origins":
            out[name] = [o.strip() for o in v.split(",") if o.strip()]
        else:
            out[name] = v.strip()
    return out


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    data: dict[str, Any] = {}
    config_path = (os.getenv("REDLINE_CONFIG") or "").strip()
    if config_path:
        data.update(_load_yaml(Path(config_path)))
    data.update(_env_overrides())
    return Settings.model_validate(data)


def clear_settings_cache() -> None:
    """Forget resolved settings so env/YAML changes are picked up (used by tests)."""
    load_settings.cache_clear()
