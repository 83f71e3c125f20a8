"""
LLM invocation for the explanation service.

Configurable via OPENAI_API_KEY. If no key is set, the caller serves the canned
demo response instead (degraded mode). One non-streaming chat completion per
request, JSON object output, no retry and no timeout beyond the SDK's own.

This module is the only place that calls an external LLM.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from openai import OpenAI, OpenAIError

from doubt_solver.config import ServerSettings

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """The completion call failed or returned content that is not the expected JSON object."""


def _get_client(settings: ServerSettings) -> Any | None:
    """
    Return OpenAI client if an API key is configured.
    Returns None if no key; caller should use the demo response.
    """
    if not settings.openai_api_key:
        return None
    return OpenAI(api_key=settings.openai_api_key)


def parse_completion(content: str | None) -> dict[str, Any]:
    """Decode the model's reply. Must be a JSON object with a non-empty string "explanation"."""
    if not content:
        raise UpstreamError("Upstream returned an empty completion")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise UpstreamError(f"Upstream returned invalid JSON: {e!s}") from e
    if not isinstance(data, dict):
        raise UpstreamError("Upstream JSON is not an object")
    explanation = data.get("explanation")
    if not isinstance(explanation, str) or not explanation.strip():
        raise UpstreamError("Upstream JSON has no 'explanation' field")
    example = data.get("example")
    if example is None:
        data["example"] = ""
    elif not isinstance(example, str):
        data["example"] = json.dumps(example) if isinstance(example, (dict, list)) else str(example)
    return data


def call_llm(messages: list[dict[str, str]], settings: ServerSettings | None = None) -> dict[str, Any] | None:
    """
    Call the LLM with the given messages. Returns the parsed {explanation, example} object,
    or None when no upstream credential is configured.

    Raises UpstreamError when the API call fails or the reply cannot be parsed.
    """
    settings = settings or ServerSettings.from_env()
    client = _get_client(settings)
    if client is None:
        return None

    try:
        response = client.chat.completions.create(
            model=settings.model,
            messages=messages,
            temperature=settings.temperature,
            response_format={"type": "json_object"},
        )
    except OpenAIError as e:
        logger.error("OpenAI API error: %s", e)
        raise UpstreamError(f"OpenAI API error: {e!s}") from e

    if not response.choices:
        raise UpstreamError("Upstream returned no choices")
    content = response.choices[0].message.content
    try:
        return parse_completion(content)
    except UpstreamError as e:
        logger.error("Unusable completion: %s", e)
        raise
