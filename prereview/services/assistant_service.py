"""
Review assistant backed by an Ollama model through LangChain.
"""
import logging
from typing import Dict, Optional

from langchain_community.llms import Ollama

from prereview.exceptions import AssistantError

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = (
    "You are a helpful code review assistant. Provide clear, actionable feedback on code changes. "
    "Focus on security vulnerabilities, performance issues, bug risks, code style, and best practices."
)


class AssistantService:
    """Sends one prompt and returns the complete reply text."""

    def __init__(self, base_url: str = "http://localhost:11434", temperature: float = 0.2):
        self.base_url = base_url
        self.temperature = temperature
        self._llms: Dict[str, Ollama] = {}

    def _get_llm(self, model: str) -> Ollama:
        llm = self._llms.get(model)
        if llm is None:
            llm = Ollama(
                base_url=self.base_url,
                model=model,
                temperature=self.temperature,
                system=SYSTEM_MESSAGE,
            )
            self._llms[model] = llm
        return llm

    def chat(self, model: str, prompt: str) -> str:
        """
        Request a review and wait for the full reply.

        Args:
            model: Ollama model name.
            prompt: Review prompt.

        Returns:
            Reply text.

        Raises:
            AssistantError: If the model could not be reached or failed.
        """
        if not model:
            raise AssistantError("No model configured")

        logger.debug("Sending %d character prompt to %s", len(prompt), model)
        try:
            response = self._get_llm(model).invoke(prompt)
        except Exception as e:
            raise AssistantError(f"{model} request failed: {e}") from e

        return _reply_text(response)


def _reply_text(response: Optional[object]) -> str:
    if response is None:
        return ""
    if isinstance(response, str):
        return response
    # chat models return a message object
    content = getattr(response, "content", None)
    return content if isinstance(content, str) else str(response)
