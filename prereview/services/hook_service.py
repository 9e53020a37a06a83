"""
Installs and removes the git pre-commit hook that runs PreReview.
"""
import logging
import os

from prereview.exceptions import HookError

logger = logging.getLogger(__name__)

HOOK_MARKER = "# This hook was installed by prereview"

HOOK_SCRIPT = f"""#!/bin/sh
# PreReview - AI-powered code review before commits
{HOOK_MARKER}

prereview --hook
exit_code=$?

if [ $exit_code -ne 0 ]; then
    echo ""
    echo "Commit aborted by prereview."
    echo "Run 'prereview' manually to review and fix issues."
    exit 1
fi

exit 0
"""


class HookService:
    """Manages the pre-commit hook of one repository."""

    def __init__(self, git_dir: str):
        self.hooks_dir = os.path.join(git_dir, "hooks")
        self.hook_path = os.path.join(self.hooks_dir, "pre-commit")

    def _read_hook(self) -> str:
        try:
            with open(self.hook_path, encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError as e:
            raise HookError(f"Failed to read existing hook: {e}") from e

    def is_installed(self) -> bool:
        return os.path.isfile(self.hook_path) and HOOK_MARKER in self._read_hook()

    def install(self) -> bool:
        """
        Write the pre-commit hook.

        A hook that PreReview did not write is never replaced.

        Returns:
            True if an earlier PreReview hook was updated, False for a fresh install.

        Raises:
            HookError: If a foreign hook exists or the file cannot be written.
        """
        updated = False
        if os.path.exists(self.hook_path):
            if HOOK_MARKER not in self._read_hook():
                raise HookError("A pre-commit hook already exists. Add 'prereview --hook' to it manually.")
            updated = True

        try:
            os.makedirs(self.hooks_dir, exist_ok=True)
            with open(self.hook_path, "w", encoding="utf-8", newline="\n") as f:
                f.write(HOOK_SCRIPT)
            os.chmod(self.hook_path, 0o755)
        except OSError as e:
            raise HookError(f"Failed to write hook: {e}") from e

        logger.debug("Wrote pre-commit hook to %s", self.hook_path)
        return updated

    def uninstall(self) -> bool:
        """
        Remove the pre-commit hook if PreReview installed it.

        Returns:
            False when there is no hook to remove.

        Raises:
            HookError: If the hook was not written by PreReview or cannot be removed.
        """
        if not os.path.exists(self.hook_path):
            return False
        if HOOK_MARKER not in self._read_hook():
            raise HookError("The pre-commit hook was not installed by prereview, not removing it")

        try:
            os.remove(self.hook_path)
        except OSError as e:
            raise HookError(f"Failed to remove hook: {e}") from e
        return True
