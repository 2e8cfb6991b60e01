# folderwatch/watchdog/debounce.py

"""
Quiet-period debouncing for file system events
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from .events import WatchdogEvent

logger = logging.getLogger(__name__)

BurstCallback = Callable[[List[WatchdogEvent]], Awaitable[None]]


class Debouncer:
    """
    Collapses a burst of events into a single callback

    Every event re-arms a timer; the callback runs once the events have
    been quiet for ``debounce_time`` seconds, or once the burst has been
    held back for ``max_wait`` seconds under constant activity. All methods
    except the coroutines must be called from the event loop thread.
    """

    def __init__(self, callback: BurstCallback,
                 debounce_time: float = 1.0,
                 max_wait: Optional[float] = None,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize debouncer

        Args:
            callback: Coroutine function receiving the events of one burst
            debounce_time: Quiet period in seconds before the callback runs
            max_wait: Longest a burst waits after its first event (no cap when None)
            loop: Event loop to schedule the timer on (running loop by default)
        """
        self.callback = callback
        self.debounce_time = debounce_time
        self.max_wait = max_wait
        self.loop = loop

        self.pending: List[WatchdogEvent] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._burst_started: Optional[float] = None
        self._capped = False
        self._tasks: Set[asyncio.Task] = set()

        # Statistics
        self.stats = {
            'total_events': 0,
            'bursts': 0,
            'forced_bursts': 0,
            'cancelled_bursts': 0,
        }

    @property
    def is_armed(self) -> bool:
        """True while a burst is waiting for its quiet period"""
        return self._timer is not None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self.loop is None:
            self.loop = asyncio.get_running_loop()
        return self.loop

    def add_event(self, event: WatchdogEvent):
        """Add an event to the current burst and restart the quiet period"""
        self.stats['total_events'] += 1
        self.pending.append(event)

        loop = self._get_loop()
        if self._burst_started is None:
            self._burst_started = loop.time()

        delay = self.debounce_time
        if self.max_wait is not None:
            held = loop.time() - self._burst_started
            if self.max_wait - held < delay:
                delay = max(self.max_wait - held, 0)
                self._capped = True

        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(delay, self._fire)

    def _fire(self):
        self._timer = None
        self._burst_started = None
        capped, self._capped = self._capped, False
        events, self.pending = self.pending, []
        if not events:
            return

        loop = self._get_loop()
        self.stats['bursts'] += 1
        if capped:
            self.stats['forced_bursts'] += 1
        logger.debug(f"Debounced {len(events)} events into one burst")

        task = loop.create_task(self._run(events))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, events: List[WatchdogEvent]):
        try:
            await self.callback(events)
        except Exception as e:
            logger.error(f"Error handling debounced burst: {e}", exc_info=True)

    async def flush(self):
        """Run an armed burst immediately and wait for in-flight callbacks"""
        if self._timer is not None:
            self._timer.cancel()
            self._fire()
        await self.wait_idle()

    async def wait_idle(self):
        """Wait for running burst callbacks to finish"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel(self):
        """Drop an armed burst without running it"""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self.stats['cancelled_bursts'] += 1
        self._burst_started = None
        self._capped = False
        self.pending.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get debouncer statistics"""
        return {
            **self.stats,
            'pending_events': len(self.pending),
            'in_flight': len(self._tasks),
            'debounce_time': self.debounce_time,
            'max_wait': self.max_wait,
        }
