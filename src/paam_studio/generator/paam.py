"""PAAM generator: turns a natural-language app description into a PAAM document."""

import json
import re
from pathlib import Path

from loguru import logger

from paam_studio.errors import GenerationError, PaamParseError
from paam_studio.llm import LlmClient
from paam_studio.model.paam import Paam
from paam_studio.model.utils import build_paam, create_empty

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

MAX_RETRIES = 2

DEFAULT_NAME = "Generated App"


def _merge(base: dict, override: dict) -> dict:
    """Recursively overlay ``override`` on ``base``; lists and scalars replace."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class PaamGenerator:
    """Asks the LLM for a PAAM document and re-asks until it validates."""

    def __init__(self, model: str | None = None):
        self.client = LlmClient(model=model)

    def generate(self, description: str, name: str | None = None) -> Paam:
        """Generate a PAAM model from a description.

        Raises GenerationError when no valid document comes back within
        ``MAX_RETRIES`` retries.
        """
        prompt_template = (PROMPTS_DIR / "paam.md").read_text(encoding="utf-8")
        user = f"Describe the following application as a PAAM document.\n\n{description}"
        errors: list[str] = []

        for attempt in range(MAX_RETRIES + 1):
            response = self.client.call(system=prompt_template, user=user)
            try:
                document = self._extract_json(response)
                return self._build(document, name, description)
            except PaamParseError as e:
                errors = e.errors or [str(e)]

            if attempt < MAX_RETRIES:
                logger.warning(f"Generated PAAM invalid (attempt {attempt + 1}), retrying: {errors}")
                user = (
                    f"Describe the following application as a PAAM document.\n\n{description}\n\n"
                    "Your previous answer was rejected with these errors:\n"
                    + "\n".join(f"- {error}" for error in errors)
                    + "\n\nReturn the corrected document."
                )

        raise GenerationError(f"No valid PAAM after {MAX_RETRIES} retries", errors)

    def _build(self, document: dict, name: str | None, description: str) -> Paam:
        generated = document.get("metadata") if isinstance(document.get("metadata"), dict) else {}
        base = create_empty(
            name or generated.get("name") or DEFAULT_NAME,
            generated.get("description") or description,
        ).to_document()
        if name:
            document = _merge(document, {"metadata": {"name": name}})
        return build_paam(_merge(base, document))

    def _extract_json(self, response: str) -> dict:
        """Extract the JSON object from a Markdown code block or bare text."""
        match = re.search(r"```(?:json)?\s*\n(.*?)```", response, re.DOTALL)
        text = match.group(1) if match else response
        try:
            document = json.loads(text.strip())
        except json.JSONDecodeError as e:
            raise PaamParseError(f"Response is not JSON: {e}") from e
        if not isinstance(document, dict):
            raise PaamParseError("Response JSON is not an object")
        return document
