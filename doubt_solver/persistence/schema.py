"""
SQLite schema for stored doubts.
Migration-friendly: created with IF NOT EXISTS.
"""
from __future__ import annotations


def doubts_schema() -> str:
    """One row per answered question. No update or delete path exists."""
    return """
    CREATE TABLE IF NOT EXISTS doubts (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        subject TEXT NOT NULL DEFAULT 'General',
        question TEXT NOT NULL CHECK (length(trim(question)) > 0),
        explanation TEXT NOT NULL CHECK (length(trim(explanation)) > 0),
        example TEXT NOT NULL DEFAULT '',
        input_method TEXT NOT NULL CHECK (input_method IN ('text', 'voice')),
        created_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS ix_doubts_created_at ON doubts(created_at);
    CREATE INDEX IF NOT EXISTS ix_doubts_user ON doubts(user_id);
    """


def all_schema_sql() -> str:
    return "\n".join([
        doubts_schema(),
    ])
