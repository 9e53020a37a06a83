"""
Environment checks behind `prereview doctor`.
"""
import logging
import shutil
from dataclasses import dataclass
from typing import Callable, List, Optional

import httpx

from prereview.config import CONFIG_FILENAME, ReviewConfig
from prereview.exceptions import GitError
from prereview.services.git_service import GitService

logger = logging.getLogger(__name__)

GIT_INSTALL_HELP = """Git is required. Install it with your package manager:
  macOS:          brew install git
  Debian/Ubuntu:  sudo apt install git
  Fedora:         sudo dnf install git
  Windows:        https://git-scm.com/download/win"""

OLLAMA_SERVER_HELP = """PreReview talks to a local Ollama server.
  Install Ollama from https://ollama.com/download
  Start it with:  ollama serve
  Or point PreReview at another server with OLLAMA_BASE_URL or ollama_base_url in {config}"""

OLLAMA_MODEL_HELP = """The configured model is not available on the Ollama server.
  Pull it with:   ollama pull {model}
  Or choose another model with --model, OLLAMA_MODEL, or the model setting in {config}"""


@dataclass
class CheckResult:
    name: str
    ok: bool
    message: str = ""
    help: str = ""


class DoctorService:
    """Checks that git and the Ollama model are ready for a review."""

    def __init__(
        self,
        config: ReviewConfig,
        git: Optional[GitService] = None,
        client: Optional[httpx.Client] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        timeout: float = 5.0,
    ):
        self.config = config
        self.git = git or GitService()
        self.client = client or httpx.Client(timeout=timeout)
        self.which = which

    def run(self) -> List[CheckResult]:
        """
        Run every check in display order.

        The model check is skipped when the server cannot be reached.
        """
        results = [self.check_git(), self.check_repository()]

        server, models = self.check_ollama_server()
        results.append(server)
        if server.ok:
            results.append(self.check_model(models))
        return results

    def check_git(self) -> CheckResult:
        path = self.which("git")
        if not path:
            return CheckResult("Git", False, "git command not found", GIT_INSTALL_HELP)
        try:
            version = self.git.version()
        except GitError as e:
            logger.debug("git --version failed: %s", e)
            return CheckResult("Git", False, "failed to get git version", GIT_INSTALL_HELP)
        return CheckResult("Git", True, f"{version} ({path})")

    def check_repository(self) -> CheckResult:
        # informational only, doctor may run anywhere
        if self.git.is_repository():
            return CheckResult("Git repository", True, "current directory is a git repository")
        return CheckResult("Git repository", True, "not in a git repository (needed for reviews and hooks)")

    def check_ollama_server(self):
        """
        Ask the Ollama server for its installed models.

        Returns:
            The check result and the model names the server reported.
        """
        base_url = self.config.ollama_base_url.rstrip("/")
        help_text = OLLAMA_SERVER_HELP.format(config=CONFIG_FILENAME)
        try:
            response = self.client.get(f"{base_url}/api/tags")
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.debug("Ollama server check failed: %s", e)
            return CheckResult("Ollama server", False, f"cannot reach {base_url}: {e}", help_text), []
        except ValueError:
            return CheckResult("Ollama server", False, f"{base_url} did not answer like an Ollama server", help_text), []

        if not isinstance(payload, dict):
            return CheckResult("Ollama server", False, f"{base_url} did not answer like an Ollama server", help_text), []

        models = [
            entry.get("name") or entry.get("model") or ""
            for entry in payload.get("models") or []
            if isinstance(entry, dict)
        ]
        return CheckResult("Ollama server", True, f"reachable at {base_url}"), models

    def check_model(self, models: List[str]) -> CheckResult:
        model = self.config.model
        wanted = {model} if ":" in model else {model, f"{model}:latest"}
        if wanted.intersection(models):
            return CheckResult(f"Model {model}", True, "model is available")
        return CheckResult(
            f"Model {model}",
            False,
            "model has not been pulled",
            OLLAMA_MODEL_HELP.format(model=model, config=CONFIG_FILENAME),
        )
