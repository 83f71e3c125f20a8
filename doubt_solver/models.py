"""
Data models for the doubt solver.
Domain objects only, no persistence or API logic.

A Doubt is one question/explanation/example tuple. The store assigns id and
created_at on insert; records are never updated or deleted afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


DEFAULT_SUBJECT = "General"
# History shows at most this many of the newest records
HISTORY_LIMIT = 10
# Largest page the record store serves in one listing
MAX_LIST_LIMIT = 100


# ---------- Input method ----------
class InputMethod(str, Enum):
    """How the question was captured."""
    TEXT = "text"
    VOICE = "voice"


def normalize_subject(subject: str | None) -> str:
    """Blank or missing subject falls back to DEFAULT_SUBJECT."""
    s = (subject or "").strip()
    return s or DEFAULT_SUBJECT


def _parse_datetime(s: str | None) -> datetime | None:
    if not s:
        return None
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


# ---------- Explanation ----------
@dataclass
class Explanation:
    """The {explanation, example} pair returned by the explanation service."""
    explanation: str
    example: str = ""


# ---------- Doubt ----------
@dataclass
class Doubt:
    """
    One stored question and its answer.
    id and created_at are None only for an answer the store never accepted
    (shown locally, absent from history).
    """
    id: str | None
    subject: str
    question: str
    explanation: str
    example: str
    input_method: InputMethod
    created_at: datetime | None
    user_id: str | None = None

    @property
    def is_saved(self) -> bool:
        return self.id is not None and self.created_at is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "subject": self.subject,
            "question": self.question,
            "explanation": self.explanation,
            "example": self.example,
            "input_method": self.input_method.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Doubt":
        return cls(
            id=d.get("id"),
            user_id=d.get("user_id"),
            subject=normalize_subject(d.get("subject")),
            question=d["question"],
            explanation=d["explanation"],
            example=d.get("example") or "",
            input_method=InputMethod(d.get("input_method") or InputMethod.TEXT.value),
            created_at=_parse_datetime(d.get("created_at")),
        )
