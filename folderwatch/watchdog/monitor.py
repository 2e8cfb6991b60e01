# folderwatch/watchdog/monitor.py

"""
Main directory monitor: schedule-driven watch and flush loop
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime
from enum import Enum

from ..core.accumulator import ChangeAccumulator
from ..core.differ import Changeset, diff
from ..core.schedule import Schedule, ScheduleWindow
from ..core.snapshot import Snapshot, capture_snapshot
from ..errors import NotificationError
from ..utils.config import Config
from .debounce import Debouncer
from .events import WatchdogEvent
from .handlers import EventHandler
from .patterns import PatternFilter
from .watcher import DirectoryWatcher

logger = logging.getLogger(__name__)


class MonitorState(Enum):
    """Scheduler states"""
    STOPPED = "stopped"
    IDLE = "idle"          # outside the active window, changes flushed
    WATCHING = "watching"  # live notifications subscribed


def log_file_pattern(root: Path, log_file: Optional[str]) -> Optional[str]:
    """Ignore pattern for a log file (and its rotations) inside root"""
    if not log_file:
        return None
    try:
        relative = Path(log_file).expanduser().resolve().relative_to(root.resolve())
    except ValueError:
        return None
    return f"{relative.as_posix()}*"


class DirectoryMonitor:
    """
    Watches a directory tree on a cron schedule

    While today still has a scheduled occurrence ahead, live filesystem
    notifications are subscribed and every debounced burst is diffed
    against the previous snapshot. Once the day's last occurrence has
    passed, buffered changes are flushed to the log and the monitor
    sleeps until the next occurrence.

    The baseline snapshot and the accumulator are only touched while
    holding ``_lock``.
    """

    def __init__(self, config: Config,
                 sink: Optional[logging.Logger] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize directory monitor

        Args:
            config: Configuration
            sink: Logger receiving flushed changes
            clock: Wall-clock source, datetime.now by default

        Raises:
            ConfigurationError: On a malformed cron expression or an
                unreadable folder
        """
        config.validate()

        self.config = config
        self.root = Path(config.folder_path)
        self.schedule = Schedule(config.cron_expression)

        watchdog_config = config.watchdog
        ignore_patterns = list(watchdog_config.ignore_patterns)
        own_log = log_file_pattern(self.root, config.logging.file)
        if own_log:
            # Our own log lines would otherwise trigger endless bursts
            ignore_patterns.append(own_log)
        self.pattern_filter = PatternFilter(
            ignore_patterns=ignore_patterns,
            ignore_directories=watchdog_config.ignore_directories,
        )
        self.accumulator = ChangeAccumulator(sink)
        self.clock = clock or datetime.now

        # Live watch components, present only while WATCHING
        self.baseline: Optional[Snapshot] = None
        self.watcher: Optional[DirectoryWatcher] = None
        self.debouncer: Optional[Debouncer] = None

        # State
        self.state = MonitorState.STOPPED
        self.window: Optional[ScheduleWindow] = None
        self.is_running = False
        self._shutdown_done = False
        # Set when a subscription is lost; the next arm diffs against the old baseline
        self._resubscribe = False

        self._lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._wake_event = asyncio.Event()
        self._finished = asyncio.Event()

        self.stats = {
            'bursts': 0,
            'changes_recorded': 0,
            'flushes': 0,
            'notification_errors': 0,
        }

        logger.info(f"DirectoryMonitor initialized for {self.root} "
                    f"(cron: {self.schedule.expression})")

    async def start(self):
        """
        Run the monitor loop

        Returns only after stop() or a fatal error. The final flush and
        the release of the watch subscription happen before returning.
        """
        if self.is_running:
            logger.warning("DirectoryMonitor is already running")
            return

        self.is_running = True
        self._shutdown_done = False
        self._stop_event.clear()
        self._wake_event.clear()
        self._finished.clear()

        try:
            while not self._stop_event.is_set():
                delay = await self.step()
                if self.watcher is not None:
                    await self._watch(delay)
                else:
                    await self._sleep(delay)
                await self._disarm(keep_baseline=self._resubscribe)
        finally:
            await self._shutdown()
            self.is_running = False
            self._finished.set()

    async def stop(self):
        """Request the loop to stop and wait for the final flush"""
        if not self.is_running:
            await self._shutdown()
            return

        self._stop_event.set()
        await self._finished.wait()

    async def step(self) -> float:
        """
        Evaluate the schedule once and enter the matching state

        Returns:
            Seconds to sleep before the next evaluation
        """
        window = self.schedule.window(self.clock())
        self.window = window

        if not window.is_active:
            self.state = MonitorState.IDLE
            self._resubscribe = False
            async with self._lock:
                self.baseline = None
            await self.flush()
            logger.info(f"Next launch at {window.next_occurrence}")
            return window.delay.total_seconds()

        self.state = MonitorState.WATCHING
        try:
            await self._arm()
        except NotificationError as e:
            self.stats['notification_errors'] += 1
            logger.error(f"Live watching unavailable, retrying later: {e}")
            self._resubscribe = True
            await self._disarm(keep_baseline=True)
            return min(window.delay.total_seconds(),
                       self.config.watchdog.retry_interval)

        logger.info("Starting directory watcher")
        return window.delay.total_seconds()

    async def flush(self) -> Changeset:
        """Log and clear every buffered change"""
        async with self._lock:
            self.stats['flushes'] += 1
            return self.accumulator.drain_and_log()

    async def _arm(self):
        """
        Capture the baseline and subscribe to notifications

        After a lost subscription the previous baseline is still held;
        whatever changed while nobody was listening is recorded first.
        """
        loop = asyncio.get_running_loop()

        async with self._lock:
            snapshot = await asyncio.to_thread(
                capture_snapshot, self.root, self.pattern_filter
            )
            if self.baseline is not None:
                self._record(diff(self.baseline, snapshot))
            self.baseline = snapshot
            self._resubscribe = False
        logger.debug(f"Baseline captured: {len(snapshot)} files")

        watchdog_config = self.config.watchdog
        self.debouncer = Debouncer(
            self._on_burst,
            debounce_time=watchdog_config.debounce_time,
            max_wait=watchdog_config.debounce_max_wait,
            loop=loop,
        )
        handler = EventHandler(loop, self._on_event, self.root, self.pattern_filter)
        self.watcher = DirectoryWatcher(
            self.root,
            handler,
            recursive=True,
            use_polling=watchdog_config.use_polling,
            poll_interval=watchdog_config.poll_interval,
        )
        self.watcher.start()

    async def _disarm(self, keep_baseline: bool = False):
        """Release the subscription, then finish a burst still waiting"""
        watcher, self.watcher = self.watcher, None
        if watcher is not None:
            watcher.stop()
            # Let events already handed over by the observer reach the debouncer
            await asyncio.sleep(0)

        debouncer, self.debouncer = self.debouncer, None
        if debouncer is not None:
            await debouncer.flush()

        if not keep_baseline:
            async with self._lock:
                self.baseline = None

    def _subscription_lost(self, reason: str):
        """Report a dead subscription and wake the loop to re-subscribe"""
        self.stats['notification_errors'] += 1
        logger.error(str(NotificationError(f"{reason}: {self.root}")))
        self._resubscribe = True
        self._wake_event.set()

    def _on_event(self, event: WatchdogEvent):
        """Receive a notification on the loop thread"""
        if self.debouncer is None:
            return

        self.debouncer.add_event(event)

        if event.removes(self.root):
            # The pending burst still records the deletions
            self._subscription_lost("Watched folder removed")

    async def _on_burst(self, events: List[WatchdogEvent]):
        """Diff the tree once for a debounced burst of notifications"""
        async with self._lock:
            if self.baseline is None:
                return

            snapshot = await asyncio.to_thread(
                capture_snapshot, self.root, self.pattern_filter
            )
            changes = diff(self.baseline, snapshot)
            self.baseline = snapshot
            self.stats['bursts'] += 1

            if changes.is_empty():
                logger.debug(f"No changes after {len(events)} events")
                return

            self._record(changes)

    def _record(self, changes: Changeset):
        """Log one diff and buffer it; caller holds _lock"""
        if changes.is_empty():
            return
        if changes.created:
            logger.info(f"Created: {', '.join(changes.created)}")
        if changes.changed:
            logger.info(f"Changed: {', '.join(changes.changed)}")
        if changes.deleted:
            logger.info(f"Deleted: {', '.join(changes.deleted)}")
        self.accumulator.record(changes)
        self.stats['changes_recorded'] += changes.total

    async def _sleep(self, delay: float) -> bool:
        """
        Sleep until delay elapses, stop() is called or a re-arm is requested

        Returns:
            True if woken early
        """
        waiters = [
            asyncio.ensure_future(self._stop_event.wait()),
            asyncio.ensure_future(self._wake_event.wait()),
        ]
        try:
            await asyncio.wait(waiters, timeout=max(delay, 0),
                               return_when=asyncio.FIRST_COMPLETED)
            return self._stop_event.is_set() or self._wake_event.is_set()
        finally:
            for waiter in waiters:
                waiter.cancel()
            self._wake_event.clear()

    async def _watch(self, delay: float):
        """Sleep through the active window, checking the subscription stays alive"""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max(delay, 0)
        interval = self.config.watchdog.health_check_interval

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            if await self._sleep(min(remaining, interval)):
                return
            if self.watcher is not None and not self.watcher.is_alive():
                self._subscription_lost("Notification thread stopped")
                self._wake_event.clear()
                return

    async def _shutdown(self):
        if self._shutdown_done:
            return
        self._shutdown_done = True

        await self._disarm()
        await self.flush()
        self.state = MonitorState.STOPPED
        logger.info("Stopping directory watcher")

    def get_status(self) -> Dict[str, Any]:
        """Get monitor status"""
        window = self.window
        return {
            'state': self.state.value,
            'folder_path': str(self.root),
            'cron_expression': self.schedule.expression,
            'is_running': self.is_running,
            'is_watching': bool(self.watcher and self.watcher.is_alive()),
            'next_occurrence': window.next_occurrence if window else None,
            'last_occurrence_today': window.last_occurrence_today if window else None,
            'pending_changes': self.accumulator.pending,
            'stats': self.stats.copy(),
        }
