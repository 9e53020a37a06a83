"""
Exceptions raised by PreReview collaborators.
"""


class PreReviewError(RuntimeError):
    """Base class for all PreReview errors."""


class GitError(PreReviewError):
    """Raised when a git command fails."""

    def __init__(self, message: str, command=None, stderr: str = ""):
        """
        Args:
            message: Human readable error message.
            command: The git command that failed.
            stderr: Captured standard error of the command.
        """
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class AssistantError(PreReviewError):
    """Raised when the review assistant cannot produce a reply."""


class ConfigError(PreReviewError):
    """Raised when the configuration file cannot be read."""


class HookError(PreReviewError):
    """Raised when the pre-commit hook cannot be installed or removed."""
