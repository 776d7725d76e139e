"""Tests for whole-file JSON persistence and data directory resolution."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from vidlogd.config import StoreConfig, is_verbose, load_store_config, youtube_api_key_from_env
from vidlogd.entity_store import dumps, load, load_json, save_json
from vidlogd.errors import ParseError
from vidlogd.metadata import MetadataClient
from vidlogd.paths import get_data_dir, resolve_data_dir
from vidlogd.protocol import MetadataLookupProtocol, SettingsStoreProtocol, VideoRepositoryProtocol


class TestLoad:

    def test_missing_file_is_empty(self, tmp_path):
        assert load(tmp_path / "nope.json") is None

    def test_zero_length_file_is_empty(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_bytes(b"")
        assert load(path) is None
        assert load_json(path) is None

    def test_returns_bytes(self, tmp_path):
        path = tmp_path / "x.json"
        path.write_bytes(b"[1, 2]")
        assert load(path) == b"[1, 2]"
        assert load_json(path) == [1, 2]

    def test_malformed_json_is_parse_error(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("[{not json")
        with pytest.raises(ParseError) as exc_info:
            load_json(path)
        assert exc_info.value.path == path
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_read_errors_propagate(self, tmp_path):
        path = tmp_path / "x.json"
        path.write_text("[]")
        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            with pytest.raises(PermissionError):
                load(path)


class TestSaveJson:

    def test_round_trip(self, tmp_path):
        path = tmp_path / "x.json"
        save_json(path, [{"b": 1, "a": "é"}])
        assert load_json(path) == [{"b": 1, "a": "é"}]

    def test_human_readable_stable_order(self):
        out = dumps({"id": "1", "title": "t"}).decode("utf-8")
        assert out == '{\n  "id": "1",\n  "title": "t"\n}'


class TestDataDir:

    def test_override_variable_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("VIDLOGD_DATA_DIR", str(tmp_path / "custom"))
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
        assert resolve_data_dir() == tmp_path / "custom"

    def test_xdg_data_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
        assert resolve_data_dir() == tmp_path / "xdg" / "vidlogd"

    def test_linux_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr("vidlogd.paths.platform.system", lambda: "Linux")
        monkeypatch.setattr("vidlogd.paths.Path.home", lambda: tmp_path)
        assert resolve_data_dir() == tmp_path / ".local" / "share" / "vidlogd"

    def test_windows_appdata(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setenv("APPDATA", str(tmp_path / "Roaming"))
        monkeypatch.setattr("vidlogd.paths.platform.system", lambda: "Windows")
        assert resolve_data_dir() == tmp_path / "Roaming" / "vidlogd"

    def test_windows_without_appdata(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.delenv("APPDATA", raising=False)
        monkeypatch.setattr("vidlogd.paths.platform.system", lambda: "Windows")
        monkeypatch.setattr("vidlogd.paths.Path.home", lambda: tmp_path)
        assert resolve_data_dir() == tmp_path / "AppData" / "Roaming" / "vidlogd"

    def test_get_data_dir_creates_tree(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "deep" / "xdg"))
        path = get_data_dir()
        assert path.is_dir()

    def test_store_config_paths(self, tmp_path):
        cfg = load_store_config(tmp_path / "store")
        assert isinstance(cfg, StoreConfig)
        assert cfg.path.is_dir()
        assert cfg.videos_path == tmp_path / "store" / "videos.json"
        assert cfg.settings_path == tmp_path / "store" / "settings.json"
        assert not cfg.exists()


class TestEnvironment:

    def test_verbose_flag(self, monkeypatch):
        monkeypatch.delenv("VIDLOGD_VERBOSE", raising=False)
        assert not is_verbose()
        monkeypatch.setenv("VIDLOGD_VERBOSE", "1")
        assert is_verbose()
        monkeypatch.setenv("VIDLOGD_VERBOSE", "yes")
        assert not is_verbose()

    def test_api_key(self, monkeypatch):
        assert youtube_api_key_from_env() == ""
        monkeypatch.setenv("YOUTUBE_API_KEY", "abc")
        assert youtube_api_key_from_env() == "abc"


def test_concrete_classes_satisfy_protocols(repo, settings_store):
    assert isinstance(repo, VideoRepositoryProtocol)
    assert isinstance(settings_store, SettingsStoreProtocol)
    with patch("vidlogd.metadata.httpx.Client"):
        assert isinstance(MetadataClient("k"), MetadataLookupProtocol)
