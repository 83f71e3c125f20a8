"""
Prompt template for the explanation service.

One fixed template: subject and question are embedded verbatim and the model is
told to reply with a JSON object holding exactly "explanation" and "example".
"""
from __future__ import annotations

from doubt_solver.models import normalize_subject


SYSTEM_INSTRUCTION = (
    "You are a helpful tutor. Always respond with valid JSON containing "
    "'explanation' and 'example' fields."
)

USER_TEMPLATE = """You are a helpful tutor who explains concepts in the simplest way possible.

Subject: {subject}
Question: {question}

Provide:
1. A simple, clear explanation (2-3 paragraphs max) that anyone can understand
2. A practical example that illustrates the concept

Format your response as JSON with two fields: "explanation" and "example"."""


def build_user_prompt(question: str, subject: str | None = None) -> str:
    return USER_TEMPLATE.format(subject=normalize_subject(subject), question=question)


def build_prompt(question: str, subject: str | None = None) -> list[dict[str, str]]:
    """
    Build the message list for the LLM: system + user.
    Returns a list of message dicts with "role" and "content".
    """
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": build_user_prompt(question, subject)},
    ]
