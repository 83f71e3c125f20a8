"""
Page state for the doubt solver UI.

Owns the input fields, the in-flight flag, the latest answer and the history
list. Only solve() and refresh_history() mutate history. Explanation and
persistence are separate, non-transactional steps: if the store rejects a
record, the answer stays visible as `current` but never enters history.
"""
from __future__ import annotations

import logging

from doubt_solver.client import ExplanationClient, RecordStoreGateway, RequestFailed, StoreError
from doubt_solver.models import HISTORY_LIMIT, Doubt, InputMethod, normalize_subject

logger = logging.getLogger(__name__)

FAILURE_NOTICE = "Failed to solve doubt. Please try again."


class DoubtSolverApp:
    def __init__(self, client: ExplanationClient, store: RecordStoreGateway) -> None:
        self._client = client
        self._store = store
        self.question = ""
        self.subject = ""
        self.loading = False
        self.show_history = False
        self.doubts: list[Doubt] = []
        self.current: Doubt | None = None
        self.notice: str | None = None
        self._input_method = InputMethod.TEXT

    @property
    def input_method(self) -> InputMethod:
        return self._input_method

    @property
    def can_submit(self) -> bool:
        return not self.loading and bool(self.question.strip())

    def set_question(self, text: str) -> None:
        self.question = text
        self._input_method = InputMethod.TEXT

    def set_subject(self, text: str) -> None:
        self.subject = text

    def on_transcript(self, text: str) -> None:
        """Speech callback: the transcript replaces the question."""
        self.question = text
        self._input_method = InputMethod.VOICE

    def toggle_history(self) -> None:
        self.show_history = not self.show_history

    def refresh_history(self) -> None:
        try:
            self.doubts = self._store.list_recent(HISTORY_LIMIT)
        except StoreError as e:
            logger.error("Error fetching doubts: %s", e)

    def solve(self) -> Doubt | None:
        """
        Submit the current question. Returns the answered doubt (saved or not),
        or None when nothing was sent or the explanation request failed.
        """
        if not self.can_submit:
            return None

        self.loading = True
        self.current = None
        self.notice = None
        question = self.question
        subject = normalize_subject(self.subject)
        method = self._input_method
        try:
            try:
                result = self._client.solve(question, subject)
            except RequestFailed as e:
                logger.error("Error solving doubt: %s", e)
                self.notice = FAILURE_NOTICE
                return None

            try:
                doubt = self._store.insert(
                    question=question,
                    explanation=result.explanation,
                    example=result.example,
                    subject=subject,
                    input_method=method,
                )
            except StoreError as e:
                logger.error("Error saving doubt: %s", e)
                doubt = Doubt(
                    id=None,
                    subject=subject,
                    question=question,
                    explanation=result.explanation,
                    example=result.example or "",
                    input_method=method,
                    created_at=None,
                )
            else:
                self.doubts = [doubt, *self.doubts][:HISTORY_LIMIT]

            self.current = doubt
            self.question = ""
            self.subject = ""
            self._input_method = InputMethod.TEXT
            return doubt
        finally:
            self.loading = False
