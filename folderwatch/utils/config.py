# folderwatch/utils/config.py

"""
Configuration management for the folder watcher
"""
import os
import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field, asdict
import logging

from ..core.schedule import Schedule
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CRON_EXPRESSION = "* * * * *"

# Keys used by appsettings.json files
KEY_ALIASES = {
    'FolderPath': 'folder_path',
    'CronExpression': 'cron_expression',
}


@dataclass
class WatchdogConfig:
    """File watchdog configuration"""
    debounce_time: float = 1.0  # seconds
    debounce_max_wait: float = 30.0  # longest a busy burst is held back
    use_polling: bool = False
    poll_interval: float = 1.0  # seconds
    retry_interval: float = 60.0  # seconds before re-subscribing after a failure
    health_check_interval: float = 5.0  # seconds between watcher liveness checks
    ignore_patterns: list = field(default_factory=list)
    ignore_directories: list = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "text"  # text, json or color


@dataclass
class Config:
    """Main configuration class"""
    folder_path: Path = field(default_factory=Path.cwd)
    cron_expression: str = DEFAULT_CRON_EXPRESSION

    watchdog: WatchdogConfig = field(default_factory=WatchdogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        # Convert strings to Path objects if needed
        if isinstance(self.folder_path, str):
            self.folder_path = Path(self.folder_path)
        if isinstance(self.watchdog, dict):
            self.watchdog = WatchdogConfig(**self.watchdog)
        if isinstance(self.logging, dict):
            self.logging = LoggingConfig(**self.logging)

    def validate(self):
        """
        Check the settings the monitor cannot run without

        Raises:
            ConfigurationError: On a malformed cron expression or an
                unreadable folder
        """
        Schedule(self.cron_expression)

        folder = self.folder_path.expanduser()
        if not folder.is_dir():
            raise ConfigurationError(f"Folder does not exist: {folder}")
        if not os.access(folder, os.R_OK | os.X_OK):
            raise ConfigurationError(f"Folder is not readable: {folder}")
        self.folder_path = folder

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        data = asdict(self)
        data['folder_path'] = str(self.folder_path)
        return data

    def to_yaml(self) -> str:
        """Convert config to YAML string"""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False)

    def update_from_dict(self, data: Dict[str, Any]):
        """
        Update config from dictionary

        Accepts nested sections (``watchdog:``, ``logging:``), flat keys
        and the ``FolderPath``/``CronExpression`` names.
        """
        for key, value in data.items():
            key = KEY_ALIASES.get(key, key)

            if key == 'folder_path':
                if value:
                    self.folder_path = Path(value)
            elif key == 'cron_expression':
                if value:
                    self.cron_expression = str(value)
            elif key in ('watchdog', 'logging') and isinstance(value, dict):
                section = getattr(self, key)
                for name, item in value.items():
                    self._set_field(section, name, item)
            elif key.startswith('log_') and hasattr(self.logging, key[4:]):
                setattr(self.logging, key[4:], value)
            elif hasattr(self.watchdog, key):
                setattr(self.watchdog, key, value)
            else:
                logger.warning(f"Unknown configuration key: {key}")

    @staticmethod
    def _set_field(section, name: str, value: Any):
        if hasattr(section, name):
            setattr(section, name, value)
        else:
            logger.warning(f"Unknown configuration key: {name}")


def get_default_config_paths() -> list:
    """Locations searched when no config file is given"""
    return [
        Path("appsettings.json"),
        Path("config.yaml"),
        Path("config.json"),
        Path.home() / ".config" / "folderwatch" / "config.yaml",
    ]


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a YAML or JSON config file

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            else:  # JSON
                data = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot load configuration from {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {path} must be a mapping")
    return data


def load_config(path: Union[str, Path] = None) -> Config:
    """
    Load configuration from file or create default

    An explicit path must exist. Without one, the default locations are
    searched and the first existing file wins.
    """
    config = Config()

    if path:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        config_paths = [config_path]
    else:
        config_paths = get_default_config_paths()

    for config_path in config_paths:
        if config_path.exists():
            logger.info(f"Loading configuration from {config_path}")
            config.update_from_dict(read_config_file(config_path))
            return config

    logger.info("No configuration file found, using defaults")
    return config
