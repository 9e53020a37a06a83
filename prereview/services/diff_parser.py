"""
Diff helpers built on unidiff.
"""
import logging
from dataclasses import dataclass
from typing import List, Tuple

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

logger = logging.getLogger(__name__)

MAX_VIEW_LINES = 50


@dataclass
class DiffStats:
    """Line counts of a unified diff."""
    additions: int = 0
    deletions: int = 0
    hunks: int = 0


class DiffParser:
    """Parser for git diff content."""

    def parse(self, diff_content: str) -> DiffStats:
        """
        Count added and removed lines in a diff.

        Args:
            diff_content: Raw diff content.

        Returns:
            DiffStats for all files in the diff. Unparsable input yields zeros.
        """
        if not diff_content.strip():
            return DiffStats()

        try:
            patch_set = PatchSet(diff_content)
        except UnidiffParseError as e:
            logger.debug("Could not parse diff: %s", e)
            return DiffStats()

        stats = DiffStats()
        for patched_file in patch_set:
            stats.additions += patched_file.added
            stats.deletions += patched_file.removed
            stats.hunks += len(patched_file)
        return stats

    def truncate(self, diff_content: str, max_lines: int = MAX_VIEW_LINES) -> Tuple[List[str], int]:
        """
        Cut a diff down to a fixed number of lines for display.

        Args:
            diff_content: Raw diff content.
            max_lines: Number of lines to keep.

        Returns:
            Tuple of (kept lines, number of omitted lines).
        """
        lines = diff_content.rstrip("\n").split("\n")
        if len(lines) <= max_lines:
            return lines, 0
        return lines[:max_lines], len(lines) - max_lines
