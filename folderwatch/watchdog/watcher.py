# folderwatch/watchdog/watcher.py

"""
The live notification subscription for one directory tree
"""
import logging
from pathlib import Path
from typing import Any, Dict
from datetime import datetime

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from ..errors import NotificationError
from .handlers import EventHandler

logger = logging.getLogger(__name__)


class DirectoryWatcher:
    """
    Subscription handle wrapping a watchdog observer

    One instance covers one active window. stop() releases the observer
    at most once, however many times it is called.
    """

    def __init__(self, directory: Path,
                 handler: EventHandler,
                 recursive: bool = True,
                 use_polling: bool = False,
                 poll_interval: float = 1.0):
        """
        Args:
            directory: Root of the watched tree
            handler: Receives raw watchdog events on the observer thread
            recursive: Include subdirectories
            use_polling: Poll instead of OS notifications (network shares)
            poll_interval: Seconds between polls when polling
        """
        self.directory = Path(directory)
        self.handler = handler
        self.recursive = recursive
        self.use_polling = use_polling
        self.poll_interval = poll_interval

        self.observer: BaseObserver = None
        self.is_watching = False
        self.stats = {
            'subscribed_at': None,
            'releases': 0,
        }

    def _create_observer(self) -> BaseObserver:
        if self.use_polling:
            return PollingObserver(timeout=self.poll_interval)
        return Observer()

    def start(self):
        """
        Subscribe to notifications for the whole tree

        Raises:
            NotificationError: If the directory is gone or the platform
                refuses the subscription (e.g. inotify watch limit)
        """
        if self.is_watching:
            return

        if not self.directory.is_dir():
            raise NotificationError(f"Directory does not exist: {self.directory}")

        observer = self._create_observer()
        try:
            observer.schedule(self.handler, str(self.directory), recursive=self.recursive)
            observer.start()
        except Exception as e:
            raise NotificationError(f"Cannot watch {self.directory}: {e}") from e

        self.observer = observer
        self.is_watching = True
        self.stats['subscribed_at'] = datetime.now()
        logger.debug(f"Subscribed to {self.directory} "
                     f"({'polling' if self.use_polling else 'native'} observer)")

    def stop(self):
        """Release the subscription"""
        if not self.is_watching:
            return

        observer, self.observer = self.observer, None
        self.is_watching = False
        self.stats['releases'] += 1

        try:
            observer.stop()
            observer.join(timeout=10)
        except Exception as e:
            logger.error(f"Error releasing watcher for {self.directory}: {e}")
        else:
            logger.debug(f"Released watcher for {self.directory}")

    def is_alive(self) -> bool:
        """
        True while the observer and every emitter thread are running

        An emitter dies on its own when the platform stops delivering
        notifications (e.g. inotify watch limit hit on a new subdirectory),
        leaving the observer thread running but deaf.
        """
        observer = self.observer
        if not self.is_watching or observer is None:
            return False
        if not observer.is_alive():
            return False
        return all(emitter.is_alive() for emitter in observer.emitters)

    def get_status(self) -> Dict[str, Any]:
        return {
            'directory': str(self.directory),
            'is_watching': self.is_watching,
            'is_alive': self.is_alive(),
            'observer': 'polling' if self.use_polling else 'native',
            'subscribed_at': self.stats['subscribed_at'],
            'releases': self.stats['releases'],
            'handler': self.handler.get_stats(),
        }
