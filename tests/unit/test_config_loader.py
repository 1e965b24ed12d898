from __future__ import annotations

from pathlib import Path

import pytest

from adoverview.config.loader import CONFIG_ENV_VAR, ConfigError, load_config
from adoverview.models.config_models import DashboardConfig


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.source_directory == "./data"
    assert cfg.recommendations.target_cac == 80
    # defaults applied for omitted keys
    assert cfg.recommendations.ctr_target == 1.0
    assert cfg.header_detection.scan_rows == 60
    assert cfg.preview_rows == 50


def test_default_location_is_used(write_config: Path, temp_workdir: Path):
    cfg = load_config()
    assert cfg.recommendations.target_cac == 80


def test_missing_default_config_yields_defaults(temp_workdir: Path):
    assert load_config() == DashboardConfig()


def test_missing_explicit_config_is_error(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_env_var_path(temp_workdir: Path, monkeypatch):
    p = temp_workdir / "custom.yml"
    p.write_text("preferred_sheet: Summary\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(p))
    assert load_config().preferred_sheet == "Summary"


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "dashboard.yml"
    p.write_text("source_directory: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


@pytest.mark.parametrize("text", [
    "unknown_key: 1\n",
    "preview_rows: -1\n",
    "header_detection:\n  scan_rows: many\n",
    "recommendations:\n  cost_per_message_rise: 0.5\n",
    "upload:\n  allowed_extensions: [xlsx]\n",
    "- just\n- a list\n",
])
def test_schema_validation_errors(temp_workdir: Path, text: str):
    p = temp_workdir / "config" / "dashboard.yml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(p)


def test_serial_range_must_be_ordered(temp_workdir: Path):
    p = temp_workdir / "config" / "dashboard.yml"
    p.write_text("header_detection:\n  serial_min: 50000\n  serial_max: 40000\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="serial_min"):
        load_config(p)


def test_empty_file_yields_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "dashboard.yml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == DashboardConfig()
