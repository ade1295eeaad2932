"""Tests for configuration loading and generation settings."""

import json

import config
from config import merge_settings, normalize_settings_keys, validate_settings, DEFAULT_SETTINGS


class TestApiConfig:
    def test_missing_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "CONFIG_FILE", str(tmp_path / "missing.json"))
        assert config.load_api_config() == {}
        assert config.get_api_key() == ""
        assert config.get_base_url() == config.DEFAULT_BASE_URL
        assert config.get_timeout() == 120

    def test_values_from_file(self, monkeypatch, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "api_key": "sk-test",
            "base_url": "",
            "image_model": "custom/model",
            "max_retries": 5,
        }), encoding="utf-8")
        monkeypatch.setattr(config, "CONFIG_FILE", str(path))

        assert config.get_api_key() == "sk-test"
        assert config.get_base_url() == config.DEFAULT_BASE_URL
        assert config.get_image_model() == "custom/model"
        assert config.get_analysis_model() == config.DEFAULT_ANALYSIS_MODEL
        assert config.get_max_retries() == 5


class TestSettings:
    def test_normalize_keys(self):
        assert normalize_settings_keys({"aspectRatio": "4:3", "quality": "ultra", "x": 1}) == {
            "aspect_ratio": "4:3", "quality": "ultra", "x": 1,
        }
        assert normalize_settings_keys(None) == {}

    def test_merge(self):
        merged = merge_settings({"addShadow": False})
        assert merged["add_shadow"] is False
        assert merged["quantity"] == 1
        assert DEFAULT_SETTINGS["add_shadow"] is True

    def test_validate(self):
        assert validate_settings(DEFAULT_SETTINGS) == []
        errors = validate_settings({"lighting": "neon", "quantity": 12})
        assert len(errors) == 2
        assert validate_settings({"quantity": "3"})
        assert validate_settings({"quantity": 9}) == []
