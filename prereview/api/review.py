"""
API endpoints for reviewing staged changes.
"""
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from prereview.api.dependencies import get_assistant, get_config, get_git
from prereview.config import ReviewConfig
from prereview.exceptions import GitError
from prereview.models import Suggestion
from prereview.services.assistant_service import AssistantService
from prereview.services.change_filter import ChangeFilter
from prereview.services.git_service import GitService
from prereview.services.review_service import ReviewService
from prereview.services.standards_service import StandardsService

review_router = APIRouter()


class ReviewRequest(BaseModel):
    paths: Optional[List[str]] = None  # restrict the review to these staged paths
    tolerance: Optional[str] = None


class ReviewResponse(BaseModel):
    review_id: str
    files: List[str]
    suggestions: List[Suggestion]
    summary: Optional[str] = None
    errors: List[str]
    created_at: str


@review_router.post("/review", response_model=ReviewResponse)
def create_review(
    request: ReviewRequest,
    config: ReviewConfig = Depends(get_config),
    git: GitService = Depends(get_git),
    assistant: AssistantService = Depends(get_assistant),
):
    """
    Review the repository's staged changes.

    Args:
        request: Optional path restriction and tolerance override.

    Returns:
        Review response with suggestions.
    """
    if not git.is_repository():
        raise HTTPException(status_code=400, detail="Not a git repository")

    if request.tolerance:
        config = ReviewConfig(**{**config.model_dump(), "tolerance": request.tolerance})

    try:
        repo_root = git.repo_root()
        changes = git.get_staged_changes()
    except GitError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if request.paths:
        wanted = set(request.paths)
        changes = [change for change in changes if change.path in wanted]
    changes = ChangeFilter(config.ignore_patterns, config.max_file_size).filter(changes)

    reviewer = ReviewService(
        config,
        assistant=assistant,
        standards_context=StandardsService(repo_root, config.coding_standards).get_context(),
    )
    result = reviewer.review(changes)

    return ReviewResponse(
        review_id=str(uuid.uuid4()),
        files=result.files,
        suggestions=result.suggestions,
        summary=result.summary,
        errors=result.errors,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
