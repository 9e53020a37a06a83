"""
Code review orchestration over staged changes.
"""
import logging
from typing import Callable, List, Optional

from prereview.config import ReviewConfig
from prereview.models import ReviewResult, Suggestion
from prereview.services.assistant_service import AssistantService
from prereview.services.diff_parser import DiffParser
from prereview.services.git_service import FileChange
from prereview.services.prompt_builder import build_review_prompt
from prereview.services.response_parser import ResponseParser

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]


def _silent(kind: str, message: str) -> None:
    pass


class ReviewService:
    """Service for reviewing staged files one at a time."""

    def __init__(
        self,
        config: ReviewConfig,
        assistant: Optional[AssistantService] = None,
        standards_context: str = "",
        progress: Optional[ProgressCallback] = None,
    ):
        """
        Args:
            config: Settings for this run.
            assistant: Reply source. Defaults to the configured Ollama model.
            standards_context: Detected coding standards block for the prompt.
            progress: Receives (kind, message) pairs where kind is one of
                "progress", "success" or "error".
        """
        self.config = config
        self.assistant = assistant or AssistantService(
            base_url=config.ollama_base_url,
            temperature=config.temperature,
        )
        self.standards_context = standards_context
        self.progress = progress or _silent
        self.parser = ResponseParser()
        self.diff_parser = DiffParser()

    def review(self, changes: List[FileChange]) -> ReviewResult:
        """
        Review each change in order and collect the suggestions.

        A failure for one file is reported and the remaining files are still
        reviewed.

        Args:
            changes: Filtered staged changes.

        Returns:
            ReviewResult covering every change.
        """
        result = ReviewResult()
        total = len(changes)
        reviewed = 0

        for index, change in enumerate(changes, start=1):
            result.files.append(change.path)

            if change.is_binary:
                logger.debug("Skipping binary file %s", change.path)
                continue

            stats = self.diff_parser.parse(change.diff)
            self.progress(
                "progress",
                f"[{index}/{total}] Reviewing {change.path} (+{stats.additions} -{stats.deletions})...",
            )

            try:
                suggestions = self._review_file(change)
            except Exception as e:
                logger.warning("Review of %s failed: %s", change.path, e)
                result.errors.append(f"{change.path}: {e}")
                self.progress("error", f"Error: {e}")
                continue

            reviewed += 1
            if suggestions:
                self.progress("success", f"Found {len(suggestions)} suggestion(s)")
            result.suggestions.extend(suggestions)

        result.summary = self._summarize(reviewed, result)
        return result

    def _review_file(self, change: FileChange) -> List[Suggestion]:
        prompt = build_review_prompt(
            change,
            tolerance=self.config.tolerance,
            project_hints=self.config.project_hints,
            standards_context=self.standards_context,
        )
        response = self.assistant.chat(self.config.model, prompt)
        return self.parser.parse(response, change.path)

    @staticmethod
    def _summarize(reviewed: int, result: ReviewResult) -> str:
        summary = f"Reviewed {reviewed} file(s), found {len(result.suggestions)} suggestion(s)"
        if result.errors:
            summary += f", {len(result.errors)} file(s) failed"
        return summary
