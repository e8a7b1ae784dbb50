# Settings file + environment overrides

import json

from core.config import build_store, load_settings
from core.storage.json_store import JsonStore
from core.storage.remote_store import RemoteStore


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path):
        s = load_settings(tmp_path)
        assert s.store == "remote"
        assert s.currency == "DH"
        assert s.data_dir == tmp_path
        assert s.admin.username == "admin"

    def test_file_then_env(self, tmp_path, monkeypatch):
        (tmp_path / "settings.json").write_text(json.dumps({
            "apps_script_url": "https://script.google.com/fichier",
            "currency": "MAD",
            "company": {"name": "Récup SARL"},
        }), encoding="utf-8")
        monkeypatch.setenv("WEBPENSE_APPS_SCRIPT_URL", "https://script.google.com/env")
        monkeypatch.setenv("WEBPENSE_TIMEOUT", "5")
        s = load_settings(tmp_path)
        assert s.apps_script_url == "https://script.google.com/env"
        assert s.timeout == 5.0
        assert s.currency == "MAD"
        assert s.company.name == "Récup SARL"

    def test_corrupt_or_invalid_file_falls_back(self, tmp_path):
        (tmp_path / "settings.json").write_text("{oops", encoding="utf-8")
        assert load_settings(tmp_path).store == "remote"
        (tmp_path / "settings.json").write_text(json.dumps({"store": "ftp"}), encoding="utf-8")
        assert load_settings(tmp_path).store == "remote"


class TestBuildStore:
    def test_backends(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WEBPENSE_STORE", "json")
        assert isinstance(build_store(load_settings(tmp_path)), JsonStore)
        monkeypatch.setenv("WEBPENSE_STORE", "remote")
        remote = build_store(load_settings(tmp_path))
        assert isinstance(remote, RemoteStore)
        remote.close()
