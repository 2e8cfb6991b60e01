# folderwatch/errors.py

"""
Error types for the folder watcher

Only ConfigurationError is fatal. The others are caught close to where
they happen and surface as log lines.
"""


class FolderWatchError(Exception):
    """Base class for folder watcher errors"""


class ConfigurationError(FolderWatchError):
    """Malformed cron expression, unreadable root folder or broken config file"""


class TraversalError(FolderWatchError):
    """A directory could not be read while capturing a snapshot"""

    def __init__(self, path, cause: Exception = None):
        self.path = path
        self.cause = cause
        message = f"Cannot read directory {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class NotificationError(FolderWatchError):
    """The filesystem notification subscription failed or lost its root"""


class LogSinkError(FolderWatchError):
    """The log sink raised while changes were being drained"""
