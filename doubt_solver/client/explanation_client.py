"""
Client for the explanation service (POST /functions/v1/solve-doubt).

Blocks until the round trip completes. No timeout, no retry and no abort path:
a failed call is terminal for that user action.
"""
from __future__ import annotations

import logging

import httpx

from doubt_solver.config import ClientSettings, load_client_settings
from doubt_solver.models import Explanation, normalize_subject

logger = logging.getLogger(__name__)


class RequestFailed(Exception):
    """The explanation request did not come back with a usable 2xx response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def auth_headers(settings: ClientSettings) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {settings.anon_key}",
        "Content-Type": "application/json",
    }


class ExplanationClient:
    """
    Sends {question, subject} to the explanation service and returns the
    {explanation, example} pair. An httpx.Client can be injected (tests pass a
    FastAPI TestClient); otherwise one is created without a timeout.
    """

    def __init__(self, settings: ClientSettings | None = None, http: httpx.Client | None = None) -> None:
        self._settings = settings or load_client_settings()
        self._http = http or httpx.Client(timeout=None)
        self._owns_http = http is None

    @property
    def url(self) -> str:
        return f"{self._settings.functions_url}/solve-doubt"

    def solve(self, question: str, subject: str | None = None) -> Explanation:
        if not question or not question.strip():
            raise ValueError("question must not be empty")
        payload = {"question": question, "subject": normalize_subject(subject)}
        try:
            resp = self._http.post(self.url, json=payload, headers=auth_headers(self._settings))
        except httpx.HTTPError as e:
            logger.error("Explanation request failed: %s", e)
            raise RequestFailed(f"Failed to get solution: {e!s}") from e
        if not resp.is_success:
            logger.error("Explanation service returned %s: %s", resp.status_code, resp.text[:500])
            raise RequestFailed("Failed to get solution", status_code=resp.status_code)
        try:
            data = resp.json()
            return Explanation(explanation=data["explanation"], example=data.get("example") or "")
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Unexpected explanation payload: %s", resp.text[:500])
            raise RequestFailed(f"Malformed solution payload: {e!s}", status_code=resp.status_code) from e

    def close(self) -> None:
        if self._owns_http:
            self._http.close()
