"""
App settings
"""

import json
import logging
import os
import pathlib

logger = logging.getLogger(__name__)

DATA_BASE_PATH = pathlib.Path(os.environ.get("DATA_BASE_PATH", "./data"))
CONFIG_FILE = DATA_BASE_PATH / "config.json"


def check_config(example, current):
    for key, value in example.items():
        if key not in current:
            current[key] = value
        elif isinstance(value, dict):
            if not isinstance(current[key], dict):
                current[key] = value
            else:
                check_config(value, current[key])


def check_config_type(example, current) -> bool:
    for key, value in example.items():
        if key not in current:
            return False
        elif isinstance(value, dict):
            if not isinstance(current[key], dict):
                return False
            else:
                if not check_config_type(value, current[key]):
                    return False
        else:
            if not isinstance(current[key], type(value)):
                return False
    return True


class ConfigManager:
    """JSON-file backed settings with defaults merged in"""

    config_example = {
        "cors": ["*"],
        "log_level": "INFO",
        "log_rich": True,
        "host": "0.0.0.0",
        "port": 3000,
    }

    def __init__(self, config_path: pathlib.Path = CONFIG_FILE):
        self.config_path = pathlib.Path(config_path)
        self.config = {}
        self.load_config()

    def load_config(self):
        """Load settings; a missing file means defaults, nothing is written."""
        if not self.config_path.exists():
            self.config = json.loads(json.dumps(self.config_example))
            return
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                self.config = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read %s: %s; using defaults", self.config_path, e)
            self.config = json.loads(json.dumps(self.config_example))
            return
        if not isinstance(self.config, dict):
            self.config = {}
        check_config(self.config_example, self.config)
        if not check_config_type(self.config_example, self.config):
            logger.warning("Config file %s has mismatched types; reset to defaults", self.config_path)
            self.config = json.loads(json.dumps(self.config_example))
            self.save_config()

    def save_config(self):
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self.config, f, indent=4)

    def get(self, key: str, default=None):
        return self.config.get(key, default)

    def set(self, key: str, value):
        self.config[key] = value
        self.save_config()

    def log_level(self) -> int:
        level = logging.getLevelName(str(self.get("log_level", "INFO")).upper())
        return level if isinstance(level, int) else logging.INFO


config_manager = ConfigManager()
