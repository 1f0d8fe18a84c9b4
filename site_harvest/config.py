"""
Loading and validation of SiteHarvest crawler settings.

Pydantic describes the schema; YAML and JSON files are both accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_PAGE_LIMIT = 1
MAX_PAGE_LIMIT = 50
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; AI-Scraper/1.0)"


def clamp_page_limit(value: int) -> int:
    """Force a requested page budget into ``[MIN_PAGE_LIMIT, MAX_PAGE_LIMIT]``."""
    return max(MIN_PAGE_LIMIT, min(MAX_PAGE_LIMIT, int(value)))


class HarvestConfig(BaseModel):
    """Settings shared by every crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    page_limit: int = Field(MAX_PAGE_LIMIT, description="Hard cap on pages visited per run.")
    timeout: float = Field(15.0, gt=0, description="Timeout of a single request (seconds).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header.")
    store_path: Path = Field(Path("scraped_pages.json"), description="JSON file holding scraped pages.")

    @field_validator("page_limit", mode="before")
    def _clamp_page_limit(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return clamp_page_limit(v)
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> HarvestConfig:
    """
    Read YAML or JSON and return a validated HarvestConfig.

    Without an explicit path, ``configs/default.yaml`` is used when it exists
    and built-in defaults otherwise. An explicit path that does not exist
    raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return HarvestConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return HarvestConfig(**data)
