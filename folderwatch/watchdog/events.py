import os
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
)


class EventType(Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


# File and directory events share the same event_type strings
_EVENT_TYPES = {
    FileCreatedEvent.event_type: EventType.CREATED,
    FileModifiedEvent.event_type: EventType.MODIFIED,
    FileDeletedEvent.event_type: EventType.DELETED,
    FileMovedEvent.event_type: EventType.MOVED,
}


@dataclass
class WatchdogEvent:
    """A change notification, detached from the observer thread"""
    event_type: EventType
    src_path: Path
    dest_path: Optional[Path] = None
    is_directory: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_watchdog(cls, event: FileSystemEvent) -> Optional['WatchdogEvent']:
        """
        Convert a watchdog event

        Returns None for events that cannot change the tree (opened,
        closed) and for directory modifications, which duplicate the
        events of the files inside.
        """
        if isinstance(event, DirModifiedEvent):
            return None

        event_type = _EVENT_TYPES.get(event.event_type)
        if event_type is None:
            return None

        dest = getattr(event, 'dest_path', None)
        return cls(
            event_type=event_type,
            src_path=Path(os.fsdecode(event.src_path)),
            dest_path=Path(os.fsdecode(dest)) if dest else None,
            is_directory=event.is_directory,
        )

    @property
    def paths(self) -> List[Path]:
        if self.dest_path:
            return [self.src_path, self.dest_path]
        return [self.src_path]

    def touches(self, path: Path) -> bool:
        """True if the event's source or destination is path"""
        return path in self.paths

    def removes(self, path: Path) -> bool:
        """True if the event deletes or moves path itself away"""
        return (self.event_type in (EventType.DELETED, EventType.MOVED)
                and self.src_path == path)

    def __str__(self):
        if self.dest_path:
            return f"{self.event_type.value}: {self.src_path} -> {self.dest_path}"
        return f"{self.event_type.value}: {self.src_path}"
