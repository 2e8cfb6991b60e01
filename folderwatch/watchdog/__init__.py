#folderwatch/watchdog/__init__.py

"""
Folder watcher live notification and scheduling
"""
from .monitor import DirectoryMonitor, MonitorState
from .events import WatchdogEvent, EventType
from .debounce import Debouncer
from .patterns import PatternFilter, PatternRule
from .handlers import EventHandler
from .watcher import DirectoryWatcher

__all__ = [
    'DirectoryMonitor',
    'MonitorState',
    'WatchdogEvent',
    'EventType',
    'Debouncer',
    'PatternFilter',
    'PatternRule',
    'EventHandler',
    'DirectoryWatcher',
]
