"""
Shared fixtures for folderwatch tests
"""
import os
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict

import pytest

from folderwatch.utils.config import Config


class ListSink:
    """Log sink collecting what the accumulator emits"""

    def __init__(self):
        self.messages = []
        self.extras = []

    def info(self, msg, *args, extra=None, **kwargs):
        self.messages.append(msg)
        self.extras.append(extra or {})

    @property
    def text(self) -> str:
        return "\n".join(self.messages)


def write_file(root: Path, relative: str, mtime: float = None, content: str = "x") -> Path:
    """Create a file under root, optionally with a fixed modification time"""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def ts(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds)


@pytest.fixture
def sink() -> ListSink:
    return ListSink()


@pytest.fixture
def make_tree(tmp_path):
    """Build a directory tree from {relative path: mtime}"""
    def _make(files: Dict[str, float]) -> Path:
        for relative, mtime in files.items():
            write_file(tmp_path, relative, mtime)
        return tmp_path
    return _make


@pytest.fixture
def config(tmp_path) -> Config:
    config = Config(folder_path=tmp_path, cron_expression="* * * * *")
    config.watchdog.use_polling = True
    config.watchdog.poll_interval = 0.1
    config.watchdog.debounce_time = 5.0
    config.watchdog.retry_interval = 5.0
    return config


@pytest.fixture
def restore_logging():
    """Undo setup_logging() changes to the root logger"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
