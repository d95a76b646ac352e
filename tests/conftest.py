import importlib
import json
import os
import sys

import pytest

# make the project root importable
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from logging_config import get_colorful_logger  # noqa: E402


@pytest.fixture(scope="session")
def logger():
    """Colourful test-level logger"""
    return get_colorful_logger("tests")


class FixedClock:
    """Settable clock for expiry tests"""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def auth_cfg(tmp_path, monkeypatch):
    """
    Factory: write auth.json, point AUTH_CONFIG_PATH at it and reload auth.config.
    Reloading keeps the same module object, so routers holding a reference see the new config.
        auth_cfg({"jwt_secret": "s", "users": [...]})
    """
    def _apply(cfg: dict):
        cfg_path = tmp_path / "auth.json"
        cfg_path.write_text(json.dumps(cfg), encoding="utf-8")
        monkeypatch.delenv("JWT_SECRET", raising=False)
        monkeypatch.setenv("AUTH_CONFIG_PATH", str(cfg_path))
        import auth.config as auth_config
        importlib.reload(auth_config)
        return auth_config
    yield _apply

    # leave the module in its default state for the next test
    monkeypatch.undo()
    import auth.config as auth_config
    importlib.reload(auth_config)
