"""
Filtering of staged changes before review.
"""
import fnmatch
import logging
import posixpath
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple

from prereview.services.git_service import FileChange

logger = logging.getLogger(__name__)


class InvalidPatternError(ValueError):
    """Raised for glob patterns that cannot be compiled."""


def _translate_segment(segment: str, pattern: str) -> str:
    out = []
    i = 0
    n = len(segment)
    while i < n:
        c = segment[i]
        i += 1
        if c == "\\":
            if i >= n:
                raise InvalidPatternError(f"trailing backslash in {pattern!r}")
            c = segment[i]
            i += 1
            out.append(f"[{c}]" if c in "*?[" else c)
        elif c == "[":
            j = i
            if j < n and segment[j] in "!^":
                j += 1
            if j < n and segment[j] == "]":
                j += 1
            j = segment.find("]", j)
            if j < 0:
                raise InvalidPatternError(f"unterminated character class in {pattern!r}")
            body = segment[i:j]
            if body.startswith("^"):
                body = "!" + body[1:]
            out.append(f"[{body}]")
            i = j + 1
        else:
            out.append(c)
    return "".join(out)


@lru_cache(maxsize=256)
def split_glob(pattern: str) -> Tuple[str, ...]:
    """
    Split a glob into one fnmatch pattern per path segment.

    A backslash escapes the next character and `^` negates a character
    class the same way `!` does.

    Raises:
        InvalidPatternError: For unterminated classes or a trailing backslash.
    """
    return tuple(_translate_segment(segment, pattern) for segment in pattern.split("/"))


def glob_match(pattern: str, name: str) -> bool:
    """Match a whole name against a glob, case sensitively. `*` and `?` never match `/`."""
    segments = split_glob(pattern)
    parts = name.split("/")
    return len(segments) == len(parts) and all(
        fnmatch.fnmatchcase(part, segment) for part, segment in zip(parts, segments)
    )


def _dir_prefix_match(directory: str, path: str) -> bool:
    # "build" matches "build/x.js" and "src/build/x.js"
    return path.startswith(directory + "/") or ("/" + directory + "/") in path


class ChangeFilter:
    """Selects the staged changes that are eligible for review."""

    def __init__(self, ignore_patterns: Optional[Iterable[str]] = None, max_file_size: int = 100000):
        self.ignore_patterns = [p for p in (ignore_patterns or []) if p]
        self.max_file_size = max_file_size
        self._reported = set()

    def filter(self, changes: List[FileChange]) -> List[FileChange]:
        """
        Drop ignored and oversized files.

        Args:
            changes: Candidate changes.

        Returns:
            The eligible changes, in their original order.
        """
        eligible = []
        for change in changes:
            if self.is_ignored(change.path):
                logger.debug("Skipping ignored file: %s", change.path)
                continue
            if len(change.content) > self.max_file_size:
                logger.debug("Skipping large file: %s (%d bytes)", change.path, len(change.content))
                continue
            eligible.append(change)
        return eligible

    def is_ignored(self, path: str) -> bool:
        """
        Check a repository relative path against the ignore patterns.

        Args:
            path: File path.

        Returns:
            True when any pattern matches the path, its basename, or one of
            its parent directories.
        """
        normalized = path.replace("\\", "/")
        basename = posixpath.basename(normalized)

        for pattern in self.ignore_patterns:
            try:
                if self._matches(pattern, normalized, basename):
                    return True
            except InvalidPatternError as e:
                if pattern not in self._reported:
                    self._reported.add(pattern)
                    logger.warning("Invalid ignore pattern %r: %s", pattern, e)
        return False

    def _matches(self, pattern: str, path: str, basename: str) -> bool:
        if glob_match(pattern, path) or glob_match(pattern, basename):
            return True

        if pattern.endswith("/*") and _dir_prefix_match(pattern[:-2], path):
            return True

        if pattern.startswith("**/"):
            rest = pattern[3:]
            if rest.endswith("/*"):
                return _dir_prefix_match(rest[:-2], path)
            return glob_match(rest, basename)

        return False
