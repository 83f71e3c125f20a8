"""
Explanation flow: validate, build prompt, call LLM (or demo response), return the pair.

Stateless per call; concurrent requests share nothing.
"""
from __future__ import annotations

import logging

from doubt_solver.config import ConfigError, ServerSettings
from doubt_solver.explanation.llm import UpstreamError, call_llm
from doubt_solver.explanation.prompt import build_prompt
from doubt_solver.models import Explanation

logger = logging.getLogger(__name__)


class MissingFieldError(ValueError):
    """A required request field is absent or empty."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


DEMO_EXAMPLE = (
    "Example: Once the API key is configured, I'll provide relevant, practical "
    "examples based on your question."
)


def demo_response(question: str) -> Explanation:
    """Canned answer used when OPENAI_API_KEY is not set. Echoes the question verbatim."""
    return Explanation(
        explanation=(
            "I understand you're asking about: " + question + ". Let me break this down in simple terms.\n\n"
            "This is a demo response. To get real AI-powered explanations, please configure "
            "OPENAI_API_KEY in the environment where the API server runs."
        ),
        example=DEMO_EXAMPLE,
    )


def solve_doubt(
    question: str | None,
    subject: str | None = None,
    settings: ServerSettings | None = None,
) -> Explanation:
    """
    Full explanation flow. Raises MissingFieldError for a blank question and
    UpstreamError when the server configuration is invalid or the completion
    call fails; no retry.
    """
    if question is None or not question.strip():
        raise MissingFieldError("question", "Question is required")
    try:
        settings = settings or ServerSettings.from_env()
    except ConfigError as e:
        raise UpstreamError(f"Invalid server configuration: {e!s}") from e
    messages = build_prompt(question, subject)
    data = call_llm(messages, settings)
    if data is None:
        logger.info("OPENAI_API_KEY not set; serving demo response")
        return demo_response(question)
    return Explanation(explanation=data["explanation"], example=data["example"])
