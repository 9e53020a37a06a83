"""
Applies suggested fixes to files in the working tree.
"""
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from typing import Optional

from prereview.exceptions import GitError
from prereview.models import Suggestion
from prereview.protocol import NOT_APPLICABLE
from prereview.services.git_service import GitService

logger = logging.getLogger(__name__)

DEFAULT_MODE = 0o644


@dataclass
class PatchResult:
    """Outcome of applying one fix."""
    applied: bool
    message: str = ""
    warning: Optional[str] = None


def _usable(snippet: Optional[str]) -> bool:
    return bool(snippet) and snippet.strip() != NOT_APPLICABLE


def _replace_file(path: str, data: bytes, mode: int) -> None:
    """Write data next to path and rename it over the original."""
    fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path) or ".", prefix=".prereview-")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except OSError:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class PatchService:
    """
    Replaces a suggestion's original snippet with its fix.

    Only an exact match is ever replaced, and only its first occurrence. If
    the snippet cannot be found the file is left untouched. Paths are relative
    to the repository root and may not point outside it.
    """

    def __init__(self, git: Optional[GitService] = None, repo_root: Optional[str] = None):
        self.git = git or GitService(cwd=repo_root)
        self.repo_root = repo_root

    def _resolve(self, file_path: str) -> Optional[str]:
        """Absolute path of a repository file, None when it escapes the repository."""
        if not file_path or os.path.isabs(file_path):
            return None
        root = os.path.realpath(self.repo_root or os.getcwd())
        resolved = os.path.realpath(os.path.join(root, file_path))
        if os.path.commonpath([root, resolved]) != root or resolved == root:
            return None
        return resolved

    def apply(self, suggestion: Suggestion) -> PatchResult:
        """
        Apply a suggestion's fix and stage the file.

        The new content is written to a temporary file and renamed over the
        target, so a failed write never leaves a partial file behind.

        Args:
            suggestion: Suggestion with original and fix snippets.

        Returns:
            PatchResult. A staging failure leaves applied=True with a warning.
        """
        if not _usable(suggestion.original_code) or not _usable(suggestion.suggested_fix):
            return PatchResult(applied=False, message="No code fix available")

        path = self._resolve(suggestion.file_path)
        if path is None:
            logger.warning("Refusing to patch path outside the repository: %s", suggestion.file_path)
            return PatchResult(applied=False, message=f"Path is outside the repository: {suggestion.file_path}")

        try:
            # newline="" keeps CRLF files intact
            with open(path, encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Could not read %s: %s", path, e)
            return PatchResult(applied=False, message=f"Could not read {suggestion.file_path}")

        if suggestion.original_code not in content:
            return PatchResult(applied=False, message="Original code not found in file")

        new_content = content.replace(suggestion.original_code, suggestion.suggested_fix, 1)
        if new_content == content:
            return PatchResult(applied=False, message="Fix does not change the file")

        try:
            data = new_content.encode("utf-8")
        except UnicodeEncodeError as e:
            logger.warning("Fix for %s cannot be encoded: %s", suggestion.file_path, e)
            return PatchResult(applied=False, message="Fix contains characters that cannot be written")

        try:
            mode = stat.S_IMODE(os.stat(path).st_mode)
        except OSError:
            mode = DEFAULT_MODE

        try:
            _replace_file(path, data, mode)
        except OSError as e:
            logger.warning("Could not write %s: %s", path, e)
            return PatchResult(applied=False, message=f"Could not write {suggestion.file_path}")

        try:
            self.git.stage_file(suggestion.file_path)
        except GitError as e:
            logger.warning("Could not stage %s: %s", suggestion.file_path, e)
            return PatchResult(
                applied=True,
                message="Applied fix",
                warning=f"File modified but could not stage: {e}",
            )

        return PatchResult(applied=True, message="Applied fix")
