# folderwatch/core/schedule.py

"""
Cron schedule evaluation
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from croniter import croniter

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ScheduleWindow:
    """Schedule boundaries derived from one wall-clock instant"""
    now: datetime
    next_occurrence: datetime
    last_occurrence_today: Optional[datetime]

    @property
    def is_active(self) -> bool:
        """True while today still has a scheduled occurrence ahead"""
        return (self.last_occurrence_today is not None
                and self.last_occurrence_today > self.now)

    @property
    def delay(self) -> timedelta:
        """Time until the boundary that ends the current state"""
        if self.is_active:
            return self.last_occurrence_today - self.now
        return max(self.next_occurrence - self.now, timedelta(0))


class Schedule:
    """
    Five-field, minute-resolution cron schedule
    """

    FIELD_COUNT = 5

    def __init__(self, expression: str):
        """
        Initialize schedule

        Args:
            expression: Standard 5-field cron expression

        Raises:
            ConfigurationError: If the expression is malformed
        """
        expression = (expression or '').strip()
        if len(expression.split()) != self.FIELD_COUNT:
            raise ConfigurationError(
                f"Invalid cron expression '{expression}': "
                f"expected {self.FIELD_COUNT} fields"
            )
        if not croniter.is_valid(expression):
            raise ConfigurationError(f"Invalid cron expression '{expression}'")

        self.expression = expression

    def next_occurrence(self, now: datetime) -> datetime:
        """Next scheduled occurrence strictly after now"""
        return croniter(self.expression, now).get_next(datetime)

    def last_occurrence_today(self, now: datetime) -> Optional[datetime]:
        """
        Final scheduled occurrence within the calendar day of now

        The day spans [midnight, next midnight). Returns None when the
        schedule has no occurrence on that day.
        """
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        next_midnight = midnight + timedelta(days=1)

        last = croniter(self.expression, next_midnight).get_prev(datetime)
        if last < midnight:
            return None
        return last

    def window(self, now: Optional[datetime] = None) -> ScheduleWindow:
        """Evaluate the schedule at now (wall clock by default)"""
        now = now or datetime.now()
        return ScheduleWindow(
            now=now,
            next_occurrence=self.next_occurrence(now),
            last_occurrence_today=self.last_occurrence_today(now),
        )

    def __repr__(self):
        return f"Schedule('{self.expression}')"
