# folderwatch/core/differ.py

"""
Snapshot comparison
"""
from dataclasses import dataclass, field
from typing import List

from .snapshot import Snapshot


@dataclass
class Changeset:
    """Created, changed and deleted paths between two snapshots"""
    created: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.created) + len(self.changed) + len(self.deleted)

    def is_empty(self) -> bool:
        return self.total == 0

    def __str__(self):
        return (f"+{len(self.created)} ~{len(self.changed)} "
                f"-{len(self.deleted)}")


def diff(old: Snapshot, new: Snapshot) -> Changeset:
    """
    Compare two snapshots

    Timestamps are compared exactly. On filesystems whose modification
    time resolution is coarser than the interval between two edits, the
    second edit keeps the same timestamp and is not reported as changed.

    Args:
        old: Earlier snapshot
        new: Later snapshot

    Returns:
        Changeset; list order follows snapshot iteration order
    """
    changes = Changeset()

    for path, modified in old.items():
        if path not in new:
            changes.deleted.append(path)
        elif new[path] != modified:
            changes.changed.append(path)

    for path in new:
        if path not in old:
            changes.created.append(path)

    return changes
