# folderwatch/watchdog/handlers.py

"""
Bridge from the watchdog observer thread to the asyncio loop
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from datetime import datetime

from watchdog.events import FileSystemEvent, FileSystemEventHandler

from ..core.snapshot import relative_key
from .events import WatchdogEvent
from .patterns import PatternFilter

logger = logging.getLogger(__name__)


class EventHandler(FileSystemEventHandler):
    """
    Forwards watchdog events to a callable running on an asyncio loop

    on_any_event runs on the observer thread; ``callback`` always runs on
    the loop thread, in the order the observer delivered the events.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop,
                 callback: Callable[[WatchdogEvent], None],
                 root: Path,
                 pattern_filter: Optional[PatternFilter] = None):
        """
        Args:
            loop: Loop the callback runs on
            callback: Receives converted events on the loop thread
            root: Watched root directory
            pattern_filter: Files and directories not worth a diff
        """
        self.loop = loop
        self.callback = callback
        self.root = Path(root)
        self.pattern_filter = pattern_filter or PatternFilter()

        self.stats = {
            'events_received': 0,
            'events_forwarded': 0,
            'events_ignored': 0,
            'last_event': None,
        }

    def on_any_event(self, event: FileSystemEvent):
        self.stats['events_received'] += 1
        self.stats['last_event'] = datetime.now()

        converted = WatchdogEvent.from_watchdog(event)
        if converted is None:
            return

        if self._is_ignored(converted):
            self.stats['events_ignored'] += 1
            logger.debug(f"Ignoring event {converted}")
            return

        try:
            self.loop.call_soon_threadsafe(self.callback, converted)
        except RuntimeError as e:
            # Loop already closed during shutdown
            logger.debug(f"Dropping {converted}: {e}")
            return

        self.stats['events_forwarded'] += 1

    def _is_ignored(self, event: WatchdogEvent) -> bool:
        """True when every path of the event is filtered out"""
        if self.pattern_filter.is_empty() or event.touches(self.root):
            return False

        for path in event.paths:
            key = relative_key(path, self.root)
            if event.is_directory:
                ignored = self.pattern_filter.should_ignore_directory(key)
            else:
                ignored = self.pattern_filter.should_ignore(key)
            if not ignored:
                return False
        return True

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.copy()
