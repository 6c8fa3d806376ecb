"""Tests for config loading, env overrides and persistence."""

import json
import os
import pytest
from unittest.mock import patch


ENV_VARS = (
    "SIGNALDESK_DATA_DIR",
    "SIGNALDESK_MAX_INTAKE_CHARS",
    "SIGNALDESK_SESSION_CAP",
    "SIGNALDESK_EXPORT_TITLE",
    "SIGNALDESK_HOST",
    "SIGNALDESK_PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSignalDeskConfig:
    def test_defaults(self, tmp_path):
        from signaldesk.common.config import load_config

        with patch("signaldesk.common.config.CONFIG_PATH", tmp_path / "missing.json"):
            cfg = load_config()

        assert cfg.intake.max_chars == 5000
        assert cfg.intake.session_cap == 20
        assert cfg.export.title == "SignalDesk Intelligence Pack"
        assert cfg.server.host == "127.0.0.1"
        assert cfg.server.port == 8088
        assert cfg.storage.sessions_path.name == "sessions.json"
        assert cfg.storage.reviewers_path.name == "reviewers.json"

    def test_load_from_file(self, tmp_path):
        from signaldesk.common.config import load_config
        config_data = {
            "storage": {"data_dir": str(tmp_path / "data")},
            "intake": {"max_chars": 2000, "session_cap": 5},
            "export": {"title": "Weekly Pack"},
            "server": {"port": 9000},
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        with patch("signaldesk.common.config.CONFIG_PATH", config_file):
            cfg = load_config()

        assert cfg.storage.sessions_path == tmp_path / "data" / "sessions.json"
        assert cfg.intake.max_chars == 2000
        assert cfg.intake.session_cap == 5
        assert cfg.export.title == "Weekly Pack"
        assert cfg.server.port == 9000
        assert cfg.server.host == "127.0.0.1"

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        from signaldesk.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with patch("signaldesk.common.config.CONFIG_PATH", config_file):
            cfg = load_config()

        assert cfg.intake.max_chars == 5000

    def test_env_var_overrides(self, tmp_path):
        from signaldesk.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"intake": {"max_chars": 2000}}))

        env = {
            "SIGNALDESK_DATA_DIR": str(tmp_path / "env-data"),
            "SIGNALDESK_MAX_INTAKE_CHARS": "3000",
            "SIGNALDESK_SESSION_CAP": "7",
            "SIGNALDESK_EXPORT_TITLE": "Env Pack",
            "SIGNALDESK_PORT": "9100",
        }
        with patch("signaldesk.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, env, clear=False):
            cfg = load_config()

        assert cfg.storage.data_dir == str(tmp_path / "env-data")
        assert cfg.intake.max_chars == 3000
        assert cfg.intake.session_cap == 7
        assert cfg.export.title == "Env Pack"
        assert cfg.server.port == 9100

    def test_save_config_round_trip(self, tmp_path):
        from signaldesk.common.config import load_config, save_config
        config_file = tmp_path / "config.json"

        with patch("signaldesk.common.config.CONFIG_PATH", config_file), \
             patch("signaldesk.common.config.CONFIG_DIR", tmp_path):
            cfg = load_config()
            cfg.export.title = "Saved Pack"
            cfg.intake.session_cap = 3
            save_config(cfg)
            reloaded = load_config()

        saved = json.loads(config_file.read_text())
        assert saved["export"]["title"] == "Saved Pack"
        assert reloaded.export.title == "Saved Pack"
        assert reloaded.intake.session_cap == 3

    def test_ensure_directories(self, tmp_path):
        from signaldesk.common.config import SignalDeskConfig, StorageConfig, ensure_directories

        cfg = SignalDeskConfig(storage=StorageConfig(data_dir=str(tmp_path / "a" / "b")))
        with patch("signaldesk.common.config.CONFIG_DIR", tmp_path / "home"):
            ensure_directories(cfg)

        assert (tmp_path / "a" / "b").is_dir()
        assert (tmp_path / "home").is_dir()
