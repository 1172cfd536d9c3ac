"""Tests for config loading and path resolution."""

from __future__ import annotations

from pathlib import Path

import yaml

from ark_manager import config


class TestLoadConfig:
    def test_defaults_when_missing(self):
        assert config.load_config() == config.DEFAULT_CONFIG

    def test_defaults_are_not_shared(self):
        cfg = config.load_config()
        cfg["tick_rate_ms"] = 1
        assert config.DEFAULT_CONFIG["tick_rate_ms"] == 200

    def test_file_overrides_defaults(self, ark_env):
        (ark_env / "config.yaml").write_text("tick_rate_ms: 50\nservice_manager: rc-service\n")
        cfg = config.load_config()
        assert cfg["tick_rate_ms"] == 50
        assert cfg["service_manager"] == "rc-service"
        assert cfg["service_timeout"] == 15

    def test_invalid_yaml_falls_back(self, ark_env):
        (ark_env / "config.yaml").write_text("tick_rate_ms: [unclosed\n")
        assert config.load_config() == config.DEFAULT_CONFIG

    def test_non_mapping_falls_back(self, ark_env):
        (ark_env / "config.yaml").write_text("- a\n- b\n")
        assert config.load_config() == config.DEFAULT_CONFIG

    def test_save_round_trip(self, ark_env):
        cfg = config.load_config()
        cfg["debug"] = True
        config.save_config(cfg)
        assert yaml.safe_load((ark_env / "config.yaml").read_text())["debug"] is True
        assert config.load_config()["debug"] is True


class TestDeepMerge:
    def test_nested(self):
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        result = config._deep_merge(base, {"a": {"y": 3}})
        assert result == {"a": {"x": 1, "y": 3}, "b": 1}
        assert base["a"]["y"] == 2


class TestDbPath:
    def test_default_in_config_dir(self, ark_env):
        assert config.get_db_path({"db_path": None}) == ark_env / "db.json"

    def test_from_config(self, tmp_path):
        target = tmp_path / "servers.json"
        assert config.get_db_path({"db_path": str(target)}) == target

    def test_env_beats_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv(config.DB_ENV_VAR, str(tmp_path / "env.json"))
        assert config.get_db_path({"db_path": "/nope.json"}) == tmp_path / "env.json"

    def test_override_beats_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv(config.DB_ENV_VAR, str(tmp_path / "env.json"))
        result = config.get_db_path({}, override=str(tmp_path / "flag.json"))
        assert result == tmp_path / "flag.json"

    def test_expands_user(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/tester")
        assert config.get_db_path({"db_path": "~/db.json"}) == Path("/home/tester/db.json")


class TestNumbers:
    def test_tick_rate_in_seconds(self):
        assert config.get_tick_rate({"tick_rate_ms": 250}) == 0.25

    def test_bad_values_fall_back(self):
        assert config.get_tick_rate({"tick_rate_ms": "fast"}) == 0.2
        assert config.get_tick_rate({"tick_rate_ms": 0}) == 0.2
        assert config.get_service_timeout({"service_timeout": -1}) == 15.0

    def test_service_manager(self):
        assert config.get_service_manager({}) == "systemctl"
        assert config.get_service_manager({"service_manager": "sv"}) == "sv"

    def test_log_path(self, ark_env, tmp_path):
        assert config.get_log_path({}) == ark_env / "ark-manager.log"
        assert config.get_log_path({"log_file": str(tmp_path / "x.log")}) == tmp_path / "x.log"
