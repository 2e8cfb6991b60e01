# folderwatch/utils/__init__.py

"""
Folder watcher utilities: configuration and logging
"""
from .config import Config, WatchdogConfig, LoggingConfig, load_config
from .logger import setup_logging, JsonFormatter, ColorFormatter

__all__ = [
    'Config', 'WatchdogConfig', 'LoggingConfig', 'load_config',
    'setup_logging', 'JsonFormatter', 'ColorFormatter',
]
