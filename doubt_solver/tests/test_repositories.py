"""
Tests for the doubt repository: store-assigned fields, defaults, ordering, limits.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from doubt_solver.models import InputMethod
from doubt_solver.persistence.db import get_connection, init_db, set_db_path
from doubt_solver.persistence.repositories import DoubtRepository


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "repo_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def repo():
    return DoubtRepository()


def test_create_assigns_id_and_created_at(db_conn, repo):
    a = repo.create(db_conn, question="Q1", explanation="E1")
    b = repo.create(db_conn, question="Q2", explanation="E2")
    assert a.id and b.id and a.id != b.id
    assert a.created_at is not None and a.created_at.tzinfo is not None
    assert b.created_at >= a.created_at


def test_create_defaults(db_conn, repo):
    d = repo.create(db_conn, question="Q", explanation="E", subject="  ")
    assert d.subject == "General"
    assert d.example == ""
    assert d.input_method is InputMethod.TEXT
    assert d.user_id is None


def test_create_keeps_fields(db_conn, repo):
    d = repo.create(
        db_conn, question="Q", explanation="E", example="X", subject="History",
        input_method="voice", user_id="u1",
    )
    again = repo.get(db_conn, d.id)
    assert again == d
    assert again.input_method is InputMethod.VOICE
    assert again.example == "X"


@pytest.mark.parametrize("question,explanation", [("", "E"), ("  ", "E"), ("Q", ""), ("Q", " \n")])
def test_create_rejects_empty_text(db_conn, repo, question, explanation):
    with pytest.raises(ValueError):
        repo.create(db_conn, question=question, explanation=explanation)
    assert repo.count(db_conn) == 0


def test_create_rejects_unknown_input_method(db_conn, repo):
    with pytest.raises(ValueError):
        repo.create(db_conn, question="Q", explanation="E", input_method="smoke-signal")


def test_schema_enforces_non_empty_question(db_conn):
    with pytest.raises(sqlite3.IntegrityError):
        db_conn.execute(
            "INSERT INTO doubts (id, question, explanation, input_method, created_at) VALUES (?, ?, ?, ?, ?)",
            ("x", "", "E", "text", "2025-01-01T00:00:00+00:00"),
        )


def test_list_recent_newest_first_and_limited(db_conn, repo):
    created = [repo.create(db_conn, question=f"Q{i}", explanation="E") for i in range(15)]
    recent = repo.list_recent(db_conn, 10)
    assert len(recent) == 10
    assert [d.id for d in recent] == [d.id for d in reversed(created)][:10]
    stamps = [d.created_at for d in recent]
    assert stamps == sorted(stamps, reverse=True)


def test_list_recent_empty_and_non_positive(db_conn, repo):
    assert repo.list_recent(db_conn, 10) == []
    repo.create(db_conn, question="Q", explanation="E")
    assert repo.list_recent(db_conn, 0) == []


def test_get_missing(db_conn, repo):
    assert repo.get(db_conn, "nope") is None
