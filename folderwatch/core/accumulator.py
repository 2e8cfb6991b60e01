# folderwatch/core/accumulator.py

"""
Buffering of changes between flushes
"""
import logging
from typing import List, Optional, Tuple

from ..errors import LogSinkError
from .differ import Changeset

logger = logging.getLogger(__name__)

# (buffer attribute, header label, structured change type)
CATEGORIES: Tuple[Tuple[str, str, str], ...] = (
    ('created', 'Created files', 'created'),
    ('changed', 'Updated files', 'updated'),
    ('deleted', 'Deleted files', 'deleted'),
)


class ChangeAccumulator:
    """
    Collects changesets until the next flush

    The same path may be recorded several times within one flush period;
    duplicates are kept and reported as-is.
    """

    def __init__(self, sink: Optional[logging.Logger] = None):
        """
        Initialize accumulator

        Args:
            sink: Logger receiving flushed changes (module logger by default)
        """
        self.sink = sink or logger
        self.created: List[str] = []
        self.changed: List[str] = []
        self.deleted: List[str] = []

    @property
    def pending(self) -> int:
        """Number of buffered entries"""
        return len(self.created) + len(self.changed) + len(self.deleted)

    def is_empty(self) -> bool:
        return self.pending == 0

    def record(self, changeset: Changeset):
        """Append a changeset onto the running buffers"""
        self.created.extend(changeset.created)
        self.changed.extend(changeset.changed)
        self.deleted.extend(changeset.deleted)

    def snapshot(self) -> Changeset:
        """Copy of the current buffers"""
        return Changeset(
            created=list(self.created),
            changed=list(self.changed),
            deleted=list(self.deleted),
        )

    def drain_and_log(self) -> Changeset:
        """
        Report every non-empty buffer to the sink, then clear all buffers

        Buffers are cleared even when the sink fails. Sink failures are
        reported to the module logger and never raised.

        Returns:
            The changes that were drained
        """
        drained = self.snapshot()

        try:
            for attr, label, change_type in CATEGORIES:
                paths = getattr(drained, attr)
                if not paths:
                    continue

                try:
                    self._emit(label, change_type, paths)
                except Exception as e:
                    error = LogSinkError(f"Failed to log {change_type} files: {e}")
                    logger.error(str(error))
        finally:
            self.created.clear()
            self.changed.clear()
            self.deleted.clear()

        return drained

    def _emit(self, label: str, change_type: str, paths: List[str]):
        lines = [f"{label} ({len(paths)}):"]
        lines.extend(f" - {path}" for path in paths)
        self.sink.info(
            "\n".join(lines),
            extra={'change_type': change_type, 'paths': list(paths)},
        )
