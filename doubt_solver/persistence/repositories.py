"""
Repository interface for stored doubts.
No business logic; only insert and read operations.
"""
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone

from doubt_solver.models import Doubt, InputMethod, normalize_subject

_COLUMNS = "id, user_id, subject, question, explanation, example, input_method, created_at"


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _row_to_doubt(row: sqlite3.Row) -> Doubt:
    r = dict(row)
    return Doubt(
        id=r["id"],
        user_id=r["user_id"],
        subject=r["subject"],
        question=r["question"],
        explanation=r["explanation"],
        example=r["example"] or "",
        input_method=InputMethod(r["input_method"]),
        created_at=_parse_datetime(r["created_at"]),
    )


# ---------- DoubtRepository ----------


class DoubtRepository:
    """Insert and list doubts. id and created_at are assigned here, never by callers."""

    def create(
        self,
        conn: sqlite3.Connection,
        question: str,
        explanation: str,
        example: str | None = None,
        subject: str | None = None,
        input_method: InputMethod | str = InputMethod.TEXT,
        user_id: str | None = None,
    ) -> Doubt:
        if not question or not question.strip():
            raise ValueError("question must not be empty")
        if not explanation or not explanation.strip():
            raise ValueError("explanation must not be empty")
        method = InputMethod(input_method)
        did = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        conn.execute(
            f"INSERT INTO doubts ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                did,
                user_id,
                normalize_subject(subject),
                question,
                explanation,
                example or "",
                method.value,
                now,
            ),
        )
        conn.commit()
        return self.get(conn, did) or Doubt(
            id=did,
            user_id=user_id,
            subject=normalize_subject(subject),
            question=question,
            explanation=explanation,
            example=example or "",
            input_method=method,
            created_at=_parse_datetime(now),
        )

    def get(self, conn: sqlite3.Connection, doubt_id: str) -> Doubt | None:
        row = conn.execute(f"SELECT {_COLUMNS} FROM doubts WHERE id = ?", (doubt_id,)).fetchone()
        if row is None:
            return None
        return _row_to_doubt(row)

    def list_recent(self, conn: sqlite3.Connection, limit: int) -> list[Doubt]:
        """Newest first; rows with equal timestamps keep reverse insertion order."""
        if limit <= 0:
            return []
        rows = conn.execute(
            f"SELECT {_COLUMNS} FROM doubts ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [_row_to_doubt(r) for r in rows]

    def count(self, conn: sqlite3.Connection) -> int:
        return conn.execute("SELECT COUNT(*) FROM doubts").fetchone()[0]
