"""
Git integration service for reading staged changes.
"""
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from prereview.exceptions import GitError

logger = logging.getLogger(__name__)

BINARY_EXTENSIONS = {
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".webp",
    ".pdf", ".zip", ".tar", ".gz", ".exe", ".dll",
    ".so", ".dylib", ".woff", ".woff2", ".ttf", ".eot",
}


@dataclass(frozen=True)
class FileChange:
    """Represents a single staged file."""
    path: str
    status: str  # A=added, M=modified, R=renamed
    old_path: Optional[str] = None
    diff: str = ""
    content: str = ""
    is_binary: bool = False


class GitService:
    """Service for talking to the git command line."""

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        command = ["git", *args]
        try:
            result = subprocess.run(command, cwd=self.cwd, capture_output=True)
        except OSError as e:
            raise GitError(f"Could not run git: {e}", command=command) from e
        if check and result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise GitError(f"{' '.join(command)} failed: {stderr}", command=command, stderr=stderr)
        return result

    def _output(self, *args: str) -> str:
        return self._run(*args).stdout.decode("utf-8", errors="replace")

    def is_repository(self) -> bool:
        """Check whether the working directory is inside a git repository."""
        try:
            return self._run("rev-parse", "--git-dir", check=False).returncode == 0
        except GitError:
            return False

    def repo_root(self) -> str:
        """
        Get the top level directory of the repository.

        Returns:
            Absolute path of the repository root.
        """
        return self._output("rev-parse", "--show-toplevel").strip()

    def git_dir(self) -> str:
        """Absolute path of the repository's .git directory."""
        return self._output("rev-parse", "--absolute-git-dir").strip()

    def version(self) -> str:
        return self._output("--version").strip()

    def get_staged_changes(self) -> List[FileChange]:
        """
        List staged file changes with their diff and staged content.

        Deleted files are left out.

        Returns:
            List of FileChange objects in git's order.
        """
        output = self._output("diff", "--cached", "--name-status", "-z")
        fields = output.split("\0")
        changes = []

        i = 0
        while i < len(fields):
            status = fields[i].strip()
            i += 1
            if not status:
                continue

            old_path = None
            if status[0] in ("R", "C"):
                if i + 1 >= len(fields):
                    break
                old_path, path = fields[i], fields[i + 1]
                i += 2
            else:
                if i >= len(fields):
                    break
                path = fields[i]
                i += 1

            kind = status[0]
            if kind == "D":
                continue

            changes.append(self._load_change(path, kind, old_path))

        return changes

    def _load_change(self, path: str, status: str, old_path: Optional[str]) -> FileChange:
        is_binary = self.is_binary(path)
        diff = ""
        content = ""
        if not is_binary:
            try:
                diff = self.staged_diff(path)
            except GitError as e:
                logger.warning("Could not read staged diff of %s: %s", path, e)
            try:
                content = self.staged_content(path)
            except GitError as e:
                logger.warning("Could not read staged content of %s: %s", path, e)

        return FileChange(
            path=path,
            status=status,
            old_path=old_path,
            diff=diff,
            content=content,
            is_binary=is_binary,
        )

    def staged_diff(self, path: str, color: bool = False) -> str:
        """
        Get the staged diff of one file.

        Args:
            path: Repository relative path.
            color: Ask git for ANSI colored output.

        Returns:
            Unified diff text, empty if nothing is staged.
        """
        args = ["diff", "--cached"]
        if color:
            args.append("--color=always")
        return self._output(*args, "--", path)

    def staged_content(self, path: str) -> str:
        """Get the content of a file as recorded in the index."""
        return self._output("show", f":{path}")

    def is_binary(self, path: str) -> bool:
        """
        Check whether a staged file is binary.

        Known binary extensions are checked first, then git's numstat output,
        which reports binary files as "-\t-\t".
        """
        ext = os.path.splitext(path)[1].lower()
        if ext in BINARY_EXTENSIONS:
            return True
        try:
            output = self._output("diff", "--cached", "--numstat", "--", path)
        except GitError:
            return False
        return output.startswith("-\t-\t")

    def stage_file(self, path: str) -> None:
        """
        Add a file to the index.

        Args:
            path: Path to stage.
        """
        if not path:
            raise GitError("path cannot be empty")
        self._run("add", "--", path)
