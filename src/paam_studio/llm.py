"""LLM client wrapper around litellm.

Provides a unified interface for calling any LLM model supported by litellm.
"""

from litellm import completion
from loguru import logger

from paam_studio.config import get_settings


class LlmClient:
    """Wrapper for LLM API calls via litellm."""

    def __init__(self, model: str | None = None):
        self.model = model or get_settings().llm_model

    def call(self, system: str, user: str) -> str:
        """Send a system+user message to the LLM and return the response text."""
        logger.debug(f"LLM call to {self.model} ({len(user)} chars)")
        response = completion(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        return response.choices[0].message.content
