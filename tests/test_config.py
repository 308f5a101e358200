"""Tests for YAML configuration loading (config.py)"""
import pytest

from pkg.placement.config import Config, ConfigError


def test_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("PLACEMENT_TRACKER_DB", raising=False)
    cfg = Config.load(str(tmp_path / "missing.yaml"))
    assert cfg.storage_backend == "sqlite"
    assert cfg.port == 3000
    assert "~" not in cfg.db_path


def test_load_yaml_ignores_unknown_keys(tmp_path, monkeypatch):
    monkeypatch.delenv("PLACEMENT_TRACKER_DB", raising=False)
    path = tmp_path / "tracker.yaml"
    path.write_text("storage_backend: memory\nport: 8080\nbogus: 1\n")
    cfg = Config.load(str(path))
    assert cfg.storage_backend == "memory"
    assert cfg.port == 8080
    assert not hasattr(cfg, "bogus")


def test_env_overrides_db_path(tmp_path, monkeypatch):
    monkeypatch.setenv("PLACEMENT_TRACKER_DB", str(tmp_path / "env.db"))
    path = tmp_path / "tracker.yaml"
    path.write_text("db_path: /somewhere/else.db\n")
    assert Config.load(str(path)).db_path == str(tmp_path / "env.db")


def test_unknown_backend(tmp_path):
    path = tmp_path / "tracker.yaml"
    path.write_text("storage_backend: postgres\n")
    with pytest.raises(ConfigError):
        Config.load(str(path))
