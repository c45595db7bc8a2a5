import json
import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

API_KEY_ENV = "DECIPHER_ORACLE_API_KEY"


class Config:
    """Configuration manager for Decipher Engine."""

    DEFAULT_CONFIG = {
        "log_level": "INFO",
        "enable_logging": True,
        "enable_redaction": True,  # Scrub API keys and e-mails from logs
        "default_mode": "manual",
        "max_input_size": 512 * 1024,  # characters
        "plugin_dirs": [],
        "transformers": {
            "format": True,
            "minify": True,
            "es6-to-es5": True,
            "jsx-to-js": True,
            "rename-variables": True,
            "flatten-control-flow": True,
            "remove-dead-code": True,
            "auto-deobfuscate": True,
        },
        # Per-transformer option overrides, e.g. {"flatten-control-flow": {"max_depth": 1}}
        "transformer_options": {},
        "oracle": {
            "endpoint": "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
            "model": "gemini-1.5-flash",
            "api_key": None,
            "timeout_seconds": 30,
        },
    }

    def __init__(self, config_file: Path = None):
        self.config_file = Path(config_file) if config_file else Path.home() / ".decipher_engine" / "config.json"
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.load()

    @staticmethod
    def _deep_update(dst: dict, src: dict) -> dict:
        """Recursively merge src into dst (dicts only)."""
        for key, value in (src or {}).items():
            if isinstance(value, dict) and isinstance(dst.get(key), dict):
                Config._deep_update(dst[key], value)
            else:
                dst[key] = value
        return dst

    def load(self):
        """Load configuration from file. Unreadable files leave the defaults in place."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    loaded = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable config file {self.config_file}: {e}")
                return
            if isinstance(loaded, dict):
                self._deep_update(self._config, loaded)
            else:
                logger.warning(f"Ignoring config file {self.config_file}: top level is not an object")

    def save(self):
        """Save configuration to file."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self._config, f, indent=2)

    def get(self, key: str, default=None):
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        self._config[key] = value

    def transformer_options(self, transformer_id: str) -> Dict[str, Any]:
        """Configured option overrides for one transformer."""
        return dict((self._config.get("transformer_options") or {}).get(transformer_id) or {})

    def oracle_api_key(self) -> Optional[str]:
        """Key from the environment, falling back to the config file."""
        return os.environ.get(API_KEY_ENV) or (self._config.get("oracle") or {}).get("api_key")

    def __getitem__(self, key: str):
        return self._config[key]

    def __setitem__(self, key: str, value: Any):
        self._config[key] = value
