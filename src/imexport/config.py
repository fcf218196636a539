"""
Configuration loader for the im-/export framework.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv


logger = logging.getLogger(__name__)


ENV_MAPPING_DIR = "IMEXPORT_MAPPING_DIR"
ENV_MAX_WORKERS = "IMEXPORT_MAX_WORKERS"
ENV_LOG_LEVEL = "IMEXPORT_LOG_LEVEL"
ENV_LOG_STRUCTURED = "IMEXPORT_LOG_STRUCTURED"

_dotenv_loaded = False
_dotenv_lock = threading.Lock()


def load_environment_file() -> bool:
    """
    Load the nearest .env file (searched from the working directory) once per process.

    Returns:
        True if this call loaded a file
    """
    global _dotenv_loaded
    with _dotenv_lock:
        if _dotenv_loaded:
            return False
        _dotenv_loaded = True
        loaded = load_dotenv(find_dotenv(usecwd=True))
    if loaded:
        logger.debug("Loaded .env file")
    return loaded


class ImExportConfig:
    """
    Configuration for the im-/export framework.

    Loads an optional YAML config file, then applies environment overrides
    (a ``.env`` file is read on the first load that uses the environment).
    With ``use_env=False`` only the defaults and the YAML file count.

    Example config:
        mapping:
          directory: ./mappings
          indent: 2
        runner:
          max_workers: 4
        logging:
          level: INFO
          structured: false
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        use_dotenv: bool = True,
        use_env: bool = True,
    ):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (optional)
            use_dotenv: Whether to load a .env file before reading the environment
            use_env: Whether environment variables override the file and defaults
        """
        self.config_path = Path(config_path) if config_path else None
        self.config = self._default_config()
        if self.config_path:
            self._merge(self.config, self._load_config())
        if use_env:
            if use_dotenv:
                load_environment_file()
            self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        logger.info(f"Loading config from: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError(f"Config file must contain a mapping: {self.config_path}")
        return config

    @staticmethod
    def _default_config() -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "mapping": {
                "directory": None,
                "indent": 2,
            },
            "runner": {
                "max_workers": 1,
            },
            "logging": {
                "level": "INFO",
                "structured": False,
            },
        }

    @classmethod
    def _merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                cls._merge(base[key], value)
            else:
                base[key] = value

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        mapping_dir = os.environ.get(ENV_MAPPING_DIR)
        if mapping_dir:
            self.config.setdefault("mapping", {})["directory"] = mapping_dir

        max_workers = os.environ.get(ENV_MAX_WORKERS)
        if max_workers:
            try:
                self.config.setdefault("runner", {})["max_workers"] = int(max_workers)
            except ValueError:
                logger.warning(f"Ignoring non-integer {ENV_MAX_WORKERS}={max_workers!r}")

        log_level = os.environ.get(ENV_LOG_LEVEL)
        if log_level:
            self.config.setdefault("logging", {})["level"] = log_level.upper()

        structured = os.environ.get(ENV_LOG_STRUCTURED)
        if structured:
            self.config.setdefault("logging", {})["structured"] = (
                structured.strip().lower() in ("1", "true", "yes", "on")
            )

    def get_mapping_config(self) -> Dict[str, Any]:
        """Get mapping configuration."""
        return self.config.get("mapping", {})

    def get_runner_config(self) -> Dict[str, Any]:
        """Get runner configuration."""
        return self.config.get("runner", {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.config.get("logging", {})

    @property
    def mapping_dir(self) -> Optional[Path]:
        directory = self.get_mapping_config().get("directory")
        return Path(directory) if directory else None

    @property
    def max_workers(self) -> int:
        return max(int(self.get_runner_config().get("max_workers", 1)), 1)

    @property
    def log_level(self) -> int:
        level = self.get_logging_config().get("level", "INFO")
        if isinstance(level, int):
            return level
        resolved = logging.getLevelName(str(level).upper())
        return resolved if isinstance(resolved, int) else logging.INFO

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default
