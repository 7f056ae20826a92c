"""Tests for config loading, saving and migration."""

import json
from pathlib import Path

import pytest

from hooksmith.config import (
    ConfigError,
    EventToggles,
    ListenerConfig,
    default_config_path,
    load_config,
    migrate_config,
    save_config,
)
from hooksmith.events import RepositoryEventKind


class TestMigrateConfig:
    def test_current_config_unchanged(self):
        raw = ListenerConfig().model_dump()
        migrated, changed = migrate_config(raw)
        assert changed is False
        assert migrated == raw

    def test_missing_events_filled_from_defaults(self):
        migrated, changed = migrate_config({"repository": "bot"})
        assert changed is True
        assert migrated["events"] == EventToggles().model_dump()

    def test_missing_commit_comment_enabled(self):
        migrated, changed = migrate_config({"events": {"push": False}})
        assert changed is True
        assert migrated["events"] == {"push": False, "commit_comment": True}

    def test_legacy_auto_update_key(self):
        migrated, changed = migrate_config({"autoUpdate": True, "events": {"commit_comment": True}})
        assert changed is True
        assert migrated["auto_update"] is True
        assert "autoUpdate" not in migrated

    def test_input_not_mutated(self):
        raw = {"events": {"push": True}}
        migrate_config(raw)
        assert raw == {"events": {"push": True}}


class TestLoadConfig:
    def test_missing_file_saves_defaults(self, tmp_path: Path):
        path = tmp_path / "config.json"

        config = load_config(path)

        assert config == ListenerConfig()
        assert json.loads(path.read_text())["port"] == 4269

    def test_empty_object_saves_defaults(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("{}")

        assert load_config(path).path == "/github/callback"

    def test_legacy_file_is_migrated_and_saved(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"repository": "bot", "branch": ["master", "v*"], "autoUpdate": True}))

        config = load_config(path)

        assert config.repository == "bot"
        assert config.branch == ["master", "v*"]
        assert config.auto_update is True
        saved = json.loads(path.read_text())
        assert saved["auto_update"] is True
        assert saved["events"]["commit_comment"] is True

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("{broken")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_values(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"port": "not a port", "events": {"commit_comment": True}}))

        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_object(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_round_trip(self, tmp_path: Path):
        path = tmp_path / "nested" / "config.json"
        config = ListenerConfig(secret="x", branch=["main"], events=EventToggles(fork=False))

        save_config(config, path)

        assert load_config(path) == config


def test_default_path_from_environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("HOOKSMITH_CONFIG", str(tmp_path / "custom.json"))
    assert default_config_path() == tmp_path / "custom.json"


def test_event_toggles():
    toggles = EventToggles(gollum=False)
    assert toggles.enabled(RepositoryEventKind.GOLLUM) is False
    assert toggles.enabled(RepositoryEventKind.PUSH) is True


def test_root_path_defaults_to_cwd(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    assert ListenerConfig().root_path == tmp_path
    assert ListenerConfig(project_root="/srv/app").root_path == Path("/srv/app")
