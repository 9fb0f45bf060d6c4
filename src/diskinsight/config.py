"""Configuration for diskinsight."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from diskinsight.scanner import expand_path

logger = logging.getLogger(__name__)

CONFIG_DIR = expand_path("~/.diskinsight")
CONFIG_FILE = CONFIG_DIR / "config.json"


class Settings(BaseModel):
    """User-tunable thresholds and search locations."""

    days_until_old: int = Field(180, ge=0, description="Days since last access before a download counts as old")
    large_file_mb: int = Field(500, ge=1, description="Size in MB above which a single file is flagged")
    project_max_depth: int = Field(5, ge=0, description="Recursion depth for project artifact search")
    project_search_roots: list[str] = Field(
        default_factory=list,
        description="Workspace roots to search for project artifacts (empty = conventional defaults)",
    )
    disabled_analyzers: list[str] = Field(
        default_factory=list, description="Analyzer names to skip entirely"
    )
    docker_command: str = Field("docker", description="Container CLI executable")
    docker_probe_timeout: float = Field(5.0, gt=0, description="Seconds to wait for the CLI version probe")
    max_workers: int = Field(1, ge=1, description="Analyzers run concurrently when greater than 1")


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, falling back to defaults on any problem."""
    config_file = path or CONFIG_FILE
    if not config_file.exists():
        return Settings()

    try:
        with open(config_file) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.warning("Config at %s must be a JSON object, using defaults", config_file)
            return Settings()
        return Settings(**data)
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        logger.warning("Could not read config at %s, using defaults: %s", config_file, e)
        return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> bool:
    """Save settings to disk."""
    config_file = path or CONFIG_FILE
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w") as f:
            f.write(settings.model_dump_json(indent=2))
        return True
    except OSError as e:
        logger.warning("Could not write config to %s: %s", config_file, e)
        return False
