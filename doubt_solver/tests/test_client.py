"""
Tests for the explanation client and the record store gateway.
The API runs in-process: FastAPI's TestClient is an httpx.Client.
"""
from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient
from openai import OpenAIError

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from doubt_solver.api import app
from doubt_solver.client import ExplanationClient, RecordStoreGateway, RequestFailed, StoreError
from doubt_solver.config import ClientSettings
from doubt_solver.models import InputMethod
from doubt_solver.persistence.db import init_db, set_db_path

SETTINGS = ClientSettings(base_url="http://testserver", anon_key="anon-key")


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    db_path = tmp_path / "client.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    yield db_path


@pytest.fixture
def http():
    return TestClient(app)


def fake_openai(exc: Exception):
    create = MagicMock(side_effect=exc)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create))), create


def _recording_transport(status_code: int = 200, body=None):
    """MockTransport that records requests and answers with a fixed response."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json=body if body is not None else {})

    return httpx.Client(transport=httpx.MockTransport(handler)), seen


# ---------- ExplanationClient ----------


def test_solve_then_store_round_trip(http):
    """Demo mode answer, persisted, comes back first from list_recent(1)."""
    client = ExplanationClient(SETTINGS, http=http)
    store = RecordStoreGateway(SETTINGS, http=http)
    result = client.solve("What is gravity?", "Physics")
    assert "What is gravity?" in result.explanation
    assert result.example

    saved = store.insert(
        question="What is gravity?",
        explanation=result.explanation,
        example=result.example,
        subject="Physics",
    )
    assert saved.id and saved.created_at is not None
    recent = store.list_recent(1)
    assert len(recent) == 1
    assert recent[0] == saved


def test_solve_sends_expected_request():
    http, seen = _recording_transport(body={"explanation": "E", "example": "X"})
    client = ExplanationClient(SETTINGS, http=http)
    result = client.solve("Why is the sky blue?", "  ")
    assert result.explanation == "E" and result.example == "X"
    req = seen[0]
    assert req.method == "POST"
    assert str(req.url) == "http://testserver/functions/v1/solve-doubt"
    assert req.headers["authorization"] == "Bearer anon-key"
    assert req.headers["content-type"] == "application/json"
    assert json.loads(req.content) == {"question": "Why is the sky blue?", "subject": "General"}


def test_solve_empty_question_makes_no_request():
    http, seen = _recording_transport()
    client = ExplanationClient(SETTINGS, http=http)
    with pytest.raises(ValueError):
        client.solve("   ")
    assert seen == []


def test_solve_raises_request_failed_on_upstream_error(http):
    client = ExplanationClient(SETTINGS, http=http)
    fake, _ = fake_openai(exc=OpenAIError("boom"))
    with patch("doubt_solver.explanation.llm._get_client", return_value=fake):
        with pytest.raises(RequestFailed) as exc_info:
            client.solve("What is gravity?")
    assert exc_info.value.status_code == 500


def test_solve_raises_request_failed_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = ExplanationClient(SETTINGS, http=httpx.Client(transport=httpx.MockTransport(handler)))
    with pytest.raises(RequestFailed) as exc_info:
        client.solve("Q")
    assert exc_info.value.status_code is None


def test_solve_raises_request_failed_on_malformed_payload():
    http, _ = _recording_transport(body={"answer": "no explanation key"})
    client = ExplanationClient(SETTINGS, http=http)
    with pytest.raises(RequestFailed):
        client.solve("Q")


# ---------- RecordStoreGateway ----------


def test_insert_without_example_reads_back_empty(http):
    store = RecordStoreGateway(SETTINGS, http=http)
    saved = store.insert(question="Q", explanation="E", input_method=InputMethod.VOICE)
    assert saved.subject == "General"
    assert saved.example == ""
    assert saved.input_method is InputMethod.VOICE
    assert store.list_recent(10)[0].example == ""


def test_list_recent_never_exceeds_limit(http):
    store = RecordStoreGateway(SETTINGS, http=http)
    for i in range(5):
        store.insert(question=f"Q{i}", explanation="E")
    recent = store.list_recent(3)
    assert [d.question for d in recent] == ["Q4", "Q3", "Q2"]
    assert store.list_recent() and len(store.list_recent()) == 5


def test_list_recent_empty(http):
    assert RecordStoreGateway(SETTINGS, http=http).list_recent() == []


def test_list_recent_non_positive_limit_makes_no_request():
    http, seen = _recording_transport(body=[])
    store = RecordStoreGateway(SETTINGS, http=http)
    assert store.list_recent(0) == []
    assert store.list_recent(-5) == []
    assert seen == []


def test_list_recent_clamps_large_limit():
    http, seen = _recording_transport(body=[])
    assert RecordStoreGateway(SETTINGS, http=http).list_recent(200) == []
    assert seen[0].url.params["limit"] == "100"


def test_list_recent_large_limit_accepted_by_store(http):
    store = RecordStoreGateway(SETTINGS, http=http)
    store.insert("Q", "E")
    assert len(store.list_recent(200)) == 1


def test_store_error_on_rejected_insert(http):
    store = RecordStoreGateway(SETTINGS, http=http)
    with pytest.raises(StoreError):
        store.insert(question="   ", explanation="E")


def test_store_error_on_server_failure():
    http, _ = _recording_transport(status_code=500, body={"detail": "Failed to store doubt"})
    store = RecordStoreGateway(SETTINGS, http=http)
    with pytest.raises(StoreError):
        store.insert(question="Q", explanation="E")
    with pytest.raises(StoreError):
        store.list_recent()


def test_store_error_when_id_missing():
    http, _ = _recording_transport(
        status_code=201,
        body={"question": "Q", "explanation": "E", "input_method": "text"},
    )
    with pytest.raises(StoreError):
        RecordStoreGateway(SETTINGS, http=http).insert(question="Q", explanation="E")
