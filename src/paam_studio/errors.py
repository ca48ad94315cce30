"""Exceptions raised by PAAM Studio.

Validation problems and compiler failures are reported through result
objects; these exceptions cover the places where there is no result to
return: unreadable input, unusable LLM output, and unknown conductor ids.
"""


class PaamError(Exception):
    """Base class for all PAAM Studio errors."""


class PaamParseError(PaamError):
    """A PAAM document could not be read or failed structural validation."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class GenerationError(PaamError):
    """The LLM did not produce a usable PAAM document."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class ConversationNotFoundError(PaamError):
    """A conductor operation referenced an unknown conversation id."""


class AgentNotFoundError(PaamError):
    """A conductor operation referenced an unregistered agent id."""
