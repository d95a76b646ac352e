import json
import logging

from config import ConfigManager


def test_defaults_without_file(tmp_path):
    cm = ConfigManager(tmp_path / "config.json")
    assert cm.get("cors") == ["*"]
    assert cm.get("log_rich") is True
    assert cm.log_level() == logging.INFO
    assert not (tmp_path / "config.json").exists()


def test_missing_keys_are_filled(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"log_level": "debug"}), encoding="utf-8")
    cm = ConfigManager(path)
    assert cm.log_level() == logging.DEBUG
    assert cm.get("port") == 3000


def test_type_mismatch_resets_and_saves(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"cors": "everyone"}), encoding="utf-8")
    cm = ConfigManager(path)
    assert cm.get("cors") == ["*"]
    assert json.loads(path.read_text(encoding="utf-8"))["cors"] == ["*"]


def test_unknown_log_level_falls_back(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"log_level": "chatty"}), encoding="utf-8")
    assert ConfigManager(path).log_level() == logging.INFO


def test_set_persists(tmp_path):
    path = tmp_path / "nested" / "config.json"
    cm = ConfigManager(path)
    cm.set("port", 8080)
    assert json.loads(path.read_text(encoding="utf-8"))["port"] == 8080
    assert ConfigManager(path).get("port") == 8080
