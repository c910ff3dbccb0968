# src/wildsphere/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/wildsphere/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `WILDSPHERE_CONFIG_PATH`
- a small whitelist of environment variables (e.g., `WILDSPHERE_LOG_LEVEL`)

Design rule:
- Tuning knobs (cell size, nearest-K fallback) live in YAML, not in the index code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any
from wildsphere.core.env import load_dotenv_if_present

import yaml
from pydantic import BaseModel, Field


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `wildsphere.config`."""
    text = resources.files("wildsphere.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "WildSphere"
    log_level: str = "INFO"


class DatasetSettings(BaseModel):
    path: str = "data/animals.json"


class IndexSettings(BaseModel):
    # None means "derive from dataset size".
    cell_size_deg: float | None = Field(default=5.0, gt=0, le=360)
    target_points_per_cell: float = Field(default=4.0, gt=0)


class SelectionSettings(BaseModel):
    nearest_k: int = Field(default=5, ge=1)


class HeatmapSettings(BaseModel):
    cell_deg: float = Field(default=1.0, gt=0)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    dataset: DatasetSettings = Field(default_factory=DatasetSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    heatmap: HeatmapSettings = Field(default_factory=HeatmapSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)
    log_level = os.getenv("WILDSPHERE_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    dataset_path = os.getenv("WILDSPHERE_DATASET_PATH")
    if dataset_path:
        data.setdefault("dataset", {})["path"] = dataset_path

    cell_size = os.getenv("WILDSPHERE_INDEX_CELL_SIZE_DEG")
    if cell_size:
        value = cell_size.strip().lower()
        data.setdefault("index", {})["cell_size_deg"] = None if value in {"auto", "none"} else value

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("WILDSPHERE_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
