from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .models import ConfigModel

CONFIG_ENV_VAR = "XLSXTOCSV_CONFIG"
DEFAULT_CONFIG_PATH = Path("/srv/nextcloud/scripts/xlsxtocsv.yaml")


def resolve_config_path(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Return the config file to load, or None to run on built-in defaults.

    A path named by XLSXTOCSV_CONFIG must exist; the default location is only
    used when present.
    """
    env = os.environ if environ is None else environ
    explicit = env.get(CONFIG_ENV_VAR)
    if explicit:
        p = Path(explicit)
        if not p.is_file():
            raise ConfigError(f"Config not found: {p}")
        return p
    if DEFAULT_CONFIG_PATH.is_file():
        return DEFAULT_CONFIG_PATH
    return None


def load_config(path: Optional[str | Path] = None) -> ConfigModel:
    """Load the YAML config and return a ConfigModel.

    With no path, the environment and the default location are consulted.
    """
    p = Path(path) if path is not None else resolve_config_path()
    if p is None:
        return ConfigModel()
    if not p.exists():
        raise ConfigError(f"Config not found: {p}")

    try:
        with p.open("r", encoding="utf-8") as f:
            raw: Dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config {p} must be a mapping")

    try:
        return ConfigModel(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {p}: {e}") from e
