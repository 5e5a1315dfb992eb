"""Unit tests for configuration loading."""

import json
from pathlib import Path

import pytest

from config.config_loader import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_SETTINGS,
    load_analysis_settings,
    load_config,
)


def _write_config(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "analysis_config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_bundled_config_is_valid(self):
        config = load_config(DEFAULT_CONFIG_FILE)
        assert {"greenspace", "regions", "reports", "stations"} <= set(config["inputs"])

    def test_relative_paths_resolved_against_config_dir(self, tmp_path):
        path = _write_config(tmp_path, {
            "inputs": {"regions": {"path": "data/boroughs.gpkg", "layer": "boroughs"}},
            "settings": {},
        })
        config = load_config(path)
        assert config["inputs"]["regions"]["path"] == str(tmp_path / "data" / "boroughs.gpkg")

    def test_absolute_paths_untouched(self, tmp_path):
        absolute = str(tmp_path / "abs.csv")
        path = _write_config(tmp_path, {"inputs": {"population": {"path": absolute}}, "settings": {}})
        assert load_config(path)["inputs"]["population"]["path"] == absolute

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    @pytest.mark.parametrize("missing", ["inputs", "settings"])
    def test_required_keys(self, tmp_path, missing):
        payload = {"inputs": {}, "settings": {}}
        del payload[missing]
        with pytest.raises(KeyError, match=missing):
            load_config(_write_config(tmp_path, payload))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_config(path)


class TestLoadAnalysisSettings:
    def test_defaults_fill_missing_keys(self):
        settings = load_analysis_settings({"inputs": {}, "settings": {"buffer_distance": 500}})
        assert settings["buffer_distance"] == 500
        assert settings["working_crs"] == 27700
        assert settings["buffer_join_style"] == "round"
        assert set(DEFAULT_SETTINGS) <= set(settings)

    def test_missing_settings_section_uses_defaults(self):
        assert load_analysis_settings({"inputs": {}}) == DEFAULT_SETTINGS
