# folderwatch/watchdog/patterns.py

"""
Pattern matching for files and directories excluded from watching
"""
import fnmatch
import re
import logging
from pathlib import PurePosixPath
from typing import Dict, List
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class PatternRule:
    """Pattern matching rule"""
    pattern: str
    is_regex: bool = False
    case_sensitive: bool = False

    def __post_init__(self):
        self.compiled_pattern = None
        if self.is_regex:
            flags = 0 if self.case_sensitive else re.IGNORECASE
            try:
                self.compiled_pattern = re.compile(self.pattern, flags)
            except re.error as e:
                logger.error(f"Invalid regex pattern '{self.pattern}': {e}")
                # Fallback to glob match
                self.is_regex = False

    def matches(self, path: str) -> bool:
        """
        Check if a relative path or any of its names matches the pattern

        Args:
            path: Forward-slash path relative to the watched root
        """
        if self.is_regex:
            return bool(self.compiled_pattern.search(path))

        if not self.case_sensitive:
            path = path.lower()
            pattern = self.pattern.lower()
        else:
            pattern = self.pattern

        if fnmatch.fnmatchcase(path, pattern):
            return True
        return fnmatch.fnmatchcase(PurePosixPath(path).name, pattern)


class PatternFilter:
    """
    Filter files and directories based on patterns

    Unlike a general-purpose filter nothing is ignored by default: every
    file under the root is reported unless a pattern says otherwise.
    """

    def __init__(self, ignore_patterns: List[str] = None,
                 ignore_directories: List[str] = None):
        """
        Initialize pattern filter

        Args:
            ignore_patterns: Glob patterns (or 're:'-prefixed regexes) for files
            ignore_directories: Directory names or globs not to descend into
        """
        self.ignore_patterns = list(ignore_patterns or [])
        self.ignore_directories = list(ignore_directories or [])

        self.file_rules = [self._make_rule(p) for p in self.ignore_patterns]
        self.directory_rules = [self._make_rule(p) for p in self.ignore_directories]

        # Cache for performance
        self.cache: Dict[str, bool] = {}
        self.cache_max_size = 10000

        if self.file_rules or self.directory_rules:
            logger.info(f"PatternFilter initialized with "
                        f"{len(self.file_rules) + len(self.directory_rules)} rules")

    @staticmethod
    def _make_rule(pattern: str) -> PatternRule:
        if pattern.startswith('re:'):
            return PatternRule(pattern[3:], is_regex=True)
        return PatternRule(pattern)

    def is_empty(self) -> bool:
        return not (self.file_rules or self.directory_rules)

    def should_ignore(self, path: str) -> bool:
        """
        Check if a file should be ignored

        Args:
            path: Forward-slash path relative to the watched root
        """
        if self.is_empty():
            return False

        if path in self.cache:
            return self.cache[path]

        parts = PurePosixPath(path).parts
        ignored = any(rule.matches(path) for rule in self.file_rules)
        if not ignored and len(parts) > 1:
            # A file inside an ignored directory is ignored too
            ignored = any(
                rule.matches(part)
                for part in parts[:-1]
                for rule in self.directory_rules
            )

        if len(self.cache) >= self.cache_max_size:
            self.cache.clear()
        self.cache[path] = ignored
        return ignored

    def should_ignore_directory(self, path: str) -> bool:
        """Check if a directory (absolute or relative) should not be descended"""
        if not self.directory_rules:
            return False
        name = PurePosixPath(str(path).replace('\\', '/')).name
        return any(rule.matches(name) for rule in self.directory_rules)
