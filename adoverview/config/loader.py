from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DashboardConfig,
    HeaderDetectionConfig,
    RecommendationConfig,
    UploadConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default: config/dashboard.yml, or $ADOVERVIEW_CONFIG)
- Validate against dashboard_schema.json
- Apply defaults for every key that is left out
- A missing *default* config file yields the built-in defaults; a config
  path the caller named explicitly must exist
"""

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "config_from_dict",
    "load_config",
    "resolve_config_path",
]

SCHEMA_PATH = Path(__file__).with_name("dashboard_schema.json")
DEFAULT_CONFIG_PATH = Path("config/dashboard.yml")
CONFIG_ENV_VAR = "ADOVERVIEW_CONFIG"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails validation (unknown keys, wrong types, out of range).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def resolve_config_path(explicit: Path | str | None = None) -> tuple[Path, bool]:
    """Return (path, required). Explicit path > env var > default location."""
    if explicit:
        return Path(explicit), True
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env), True
    return DEFAULT_CONFIG_PATH, False


def config_from_dict(data: dict[str, Any]) -> DashboardConfig:
    _validate_config_schema(data)

    defaults = DashboardConfig()
    hd_raw = data.get("header_detection") or {}
    hd_def = defaults.header_detection
    header_detection = HeaderDetectionConfig(
        scan_rows=hd_raw.get("scan_rows", hd_def.scan_rows),
        min_date_cells=hd_raw.get("min_date_cells", hd_def.min_date_cells),
        serial_min=hd_raw.get("serial_min", hd_def.serial_min),
        serial_max=hd_raw.get("serial_max", hd_def.serial_max),
    )
    if header_detection.serial_min >= header_detection.serial_max:
        raise ConfigError("config validation failed: header_detection.serial_min must be < serial_max")

    rec_raw = data.get("recommendations") or {}
    rec_def = defaults.recommendations
    recommendations = RecommendationConfig(
        roas_target=rec_raw.get("roas_target", rec_def.roas_target),
        ctr_target=rec_raw.get("ctr_target", rec_def.ctr_target),
        cost_per_message_rise=rec_raw.get("cost_per_message_rise", rec_def.cost_per_message_rise),
        target_cac=rec_raw.get("target_cac", rec_def.target_cac),
    )

    up_raw = data.get("upload") or {}
    up_def = defaults.upload
    upload = UploadConfig(
        max_bytes=up_raw.get("max_bytes", up_def.max_bytes),
        allowed_extensions=tuple(
            e.lower() for e in up_raw.get("allowed_extensions", up_def.allowed_extensions)
        ),
    )

    return DashboardConfig(
        source_directory=data.get("source_directory", defaults.source_directory),
        output_directory=data.get("output_directory", defaults.output_directory),
        preferred_sheet=data.get("preferred_sheet", defaults.preferred_sheet),
        preview_rows=data.get("preview_rows", defaults.preview_rows),
        currency_symbol=data.get("currency_symbol", defaults.currency_symbol),
        header_detection=header_detection,
        recommendations=recommendations,
        upload=upload,
    )


def load_config(path: Path | str | None = None) -> DashboardConfig:
    cfg_path, required = resolve_config_path(path)
    if not cfg_path.exists():
        if required:
            raise ConfigError(f"config file not found: {cfg_path}")
        return DashboardConfig()
    try:
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top-level mapping expected")
    return config_from_dict(data)
