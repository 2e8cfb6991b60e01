# folderwatch/core/__init__.py

"""
Snapshot capture, diffing, change buffering and schedule evaluation
"""
from .snapshot import Snapshot, capture_snapshot, relative_key
from .differ import Changeset, diff
from .accumulator import ChangeAccumulator
from .schedule import Schedule, ScheduleWindow

__all__ = [
    'Snapshot',
    'capture_snapshot',
    'relative_key',
    'Changeset',
    'diff',
    'ChangeAccumulator',
    'Schedule',
    'ScheduleWindow',
]
