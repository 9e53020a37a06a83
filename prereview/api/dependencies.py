"""
Shared FastAPI dependencies.
"""
from functools import lru_cache

from prereview.config import ReviewConfig, load_config
from prereview.exceptions import GitError
from prereview.services.assistant_service import AssistantService
from prereview.services.git_service import GitService


@lru_cache()
def get_config() -> ReviewConfig:
    return load_config()


def get_git() -> GitService:
    """Git service rooted at the top level of the server's repository."""
    git = GitService()
    try:
        return GitService(cwd=git.repo_root())
    except GitError:
        return git


def get_assistant() -> AssistantService:
    config = get_config()
    return AssistantService(base_url=config.ollama_base_url, temperature=config.temperature)
