"""
Record store gateway: insert one doubt, list the most recent ones.
Talks to the /rest/v1/doubts surface with the same anon credential as the
explanation client.
"""
from __future__ import annotations

import logging

import httpx

from doubt_solver.client.explanation_client import auth_headers
from doubt_solver.config import ClientSettings, load_client_settings
from doubt_solver.models import HISTORY_LIMIT, MAX_LIST_LIMIT, Doubt, InputMethod, normalize_subject

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The record store rejected or could not complete an operation."""


class RecordStoreGateway:
    def __init__(self, settings: ClientSettings | None = None, http: httpx.Client | None = None) -> None:
        self._settings = settings or load_client_settings()
        self._http = http or httpx.Client(timeout=None)
        self._owns_http = http is None

    @property
    def url(self) -> str:
        return f"{self._settings.rest_url}/doubts"

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            resp = self._http.request(method, url, headers=auth_headers(self._settings), **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"Record store unreachable: {e!s}") from e
        if not resp.is_success:
            raise StoreError(f"Record store returned {resp.status_code}: {resp.text[:200]}")
        return resp

    def insert(
        self,
        question: str,
        explanation: str,
        example: str | None = None,
        subject: str | None = None,
        input_method: InputMethod = InputMethod.TEXT,
    ) -> Doubt:
        """Persist one record and return it with the store-assigned id and created_at."""
        body = {
            "question": question,
            "subject": normalize_subject(subject),
            "explanation": explanation,
            "example": example,
            "input_method": InputMethod(input_method).value,
        }
        resp = self._request("POST", self.url, json=body)
        try:
            doubt = Doubt.from_dict(resp.json())
        except (ValueError, KeyError, TypeError) as e:
            raise StoreError(f"Malformed record from store: {e!s}") from e
        if not doubt.is_saved:
            raise StoreError("Record store did not assign id/created_at")
        return doubt

    def list_recent(self, limit: int = HISTORY_LIMIT) -> list[Doubt]:
        """Up to `limit` records, newest first. The store serves at most MAX_LIST_LIMIT per call."""
        if limit <= 0:
            return []
        limit = min(limit, MAX_LIST_LIMIT)
        resp = self._request("GET", self.url, params={"limit": limit})
        try:
            return [Doubt.from_dict(row) for row in resp.json()][:limit]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreError(f"Malformed records from store: {e!s}") from e

    def close(self) -> None:
        if self._owns_http:
            self._http.close()
