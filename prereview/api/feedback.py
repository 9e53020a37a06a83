"""
API endpoints for acting on suggestions.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from prereview.api.dependencies import get_git
from prereview.exceptions import GitError
from prereview.models import Suggestion
from prereview.services.git_service import GitService
from prereview.services.patch_service import PatchService

feedback_router = APIRouter()

ACTIONS = ("fix", "skip")


class FeedbackRequest(BaseModel):
    suggestion: Suggestion
    action: str  # "fix" or "skip"


class FeedbackResponse(BaseModel):
    success: bool
    message: str
    warning: Optional[str] = None


@feedback_router.post("/feedback", response_model=FeedbackResponse)
def submit_feedback(request: FeedbackRequest, git: GitService = Depends(get_git)):
    """
    Apply or skip a suggestion.

    Args:
        request: The suggestion and the chosen action.

    Returns:
        Whether the action succeeded.
    """
    if request.action not in ACTIONS:
        raise HTTPException(status_code=400, detail="Invalid action. Must be 'fix' or 'skip'")

    if request.action == "skip":
        return FeedbackResponse(success=True, message="Suggestion skipped")

    try:
        repo_root = git.repo_root()
        staged = {change.path for change in git.get_staged_changes()}
    except GitError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if request.suggestion.file_path not in staged:
        raise HTTPException(status_code=400, detail="File is not part of the staged changes")

    result = PatchService(git=git, repo_root=repo_root).apply(request.suggestion)
    if not result.applied:
        return FeedbackResponse(
            success=False,
            message=f"Could not apply fix automatically: {result.message}",
        )
    return FeedbackResponse(success=True, message=result.message, warning=result.warning)
