# folderwatch/core/snapshot.py

"""
Directory tree snapshots

A snapshot is a flat, read-only map of relative file path to last
modification time, captured in one pass over the tree.
"""
import os
import logging
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path, PurePath
from typing import Dict, Iterator, List, Optional, Union

from ..errors import TraversalError

logger = logging.getLogger(__name__)


class Snapshot(Mapping):
    """
    Immutable mapping of relative path -> modification time

    Keys use forward slashes regardless of platform. Only regular files
    are present; directories are walked but never recorded.
    """

    __slots__ = ('_files', 'root', 'captured_at')

    def __init__(self, files: Optional[Dict[str, datetime]] = None,
                 root: Optional[Path] = None,
                 captured_at: Optional[datetime] = None):
        self._files = dict(files or {})
        self.root = root
        self.captured_at = captured_at or datetime.now()

    def __getitem__(self, key: str) -> datetime:
        return self._files[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self):
        return f"Snapshot(root={self.root}, files={len(self._files)})"


def relative_key(path: Union[str, Path], root: Union[str, Path]) -> str:
    """Relative path of ``path`` under ``root`` with forward slashes"""
    return PurePath(os.path.relpath(path, root)).as_posix()


def _scan_directory(directory: str) -> List[os.DirEntry]:
    """List one directory, turning OS failures into TraversalError"""
    try:
        with os.scandir(directory) as it:
            return list(it)
    except OSError as e:
        raise TraversalError(directory, e) from e


def capture_snapshot(root: Union[str, Path], pattern_filter=None) -> Snapshot:
    """
    Capture the current state of a directory tree

    Args:
        root: Directory to walk
        pattern_filter: Optional PatternFilter; ignored files are not
            recorded and ignored directories are not descended

    Returns:
        Snapshot of every regular file under root
    """
    root_path = Path(root)
    root_str = str(root_path)
    files: Dict[str, datetime] = {}
    pending = [root_str]

    while pending:
        directory = pending.pop()

        try:
            entries = _scan_directory(directory)
        except TraversalError as e:
            logger.warning(f"Skipping unreadable directory: {e}")
            continue

        for entry in entries:
            try:
                # Directory symlinks are never followed, so cycles cannot occur
                if entry.is_dir(follow_symlinks=False):
                    if pattern_filter and pattern_filter.should_ignore_directory(entry.path):
                        continue
                    pending.append(entry.path)
                    continue

                if not entry.is_file():
                    continue

                key = relative_key(entry.path, root_str)
                if pattern_filter and pattern_filter.should_ignore(key):
                    continue

                files[key] = datetime.fromtimestamp(entry.stat().st_mtime)

            except FileNotFoundError:
                logger.debug(f"File vanished during capture: {entry.path}")
            except OSError as e:
                logger.warning(f"Cannot stat {entry.path}: {e}")

    return Snapshot(files, root=root_path)
