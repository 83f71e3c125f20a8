"""
Speech capture: one utterance in, one transcript out.

SpeechCapture wraps any Recognizer (the platform's speech-to-text capability).
Without a recognizer it reports unsupported and start() does nothing. Each
session runs on a background thread; at most one session is active. Failures
reset to idle and are only logged, the caller never sees them.

Env Vars (optional, WhisperRecognizer)
- WHISPER_MODEL_ID=openai/whisper-small   (default: openai/whisper-small)
- STT_LANGUAGE=en|...                     (default: en)
"""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

DEFAULT_WHISPER_MODEL = "openai/whisper-small"


class RecognitionError(Exception):
    """Recognition ended without a transcript. reason: no-match | not-allowed | network | aborted | ..."""

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(message or reason)
        self.reason = reason


class Recognizer(Protocol):
    def transcribe(self) -> str:
        """Listen for one utterance and return its text."""
        ...


# ---------- SpeechCapture ----------


class SpeechCapture:
    def __init__(
        self,
        recognizer: Recognizer | None,
        on_transcript: Callable[[str], None],
    ) -> None:
        self._recognizer = recognizer
        self._on_transcript = on_transcript
        self._lock = threading.Lock()
        self._session = 0
        self._listening = False
        self._thread: threading.Thread | None = None

    @property
    def supported(self) -> bool:
        return self._recognizer is not None

    @property
    def listening(self) -> bool:
        return self._listening

    def start(self) -> None:
        """Begin listening. While already listening this stops the session instead."""
        if not self.supported:
            return
        with self._lock:
            if self._listening:
                already = True
            else:
                already = False
                self._session += 1
                session = self._session
                self._listening = True
                self._thread = threading.Thread(
                    target=self._run, args=(session,), name=f"speech-{session}", daemon=True
                )
        if already:
            self.stop()
            return
        self._thread.start()

    def stop(self) -> None:
        """Cancel the active session; a late transcript from it is dropped."""
        with self._lock:
            if not self._listening:
                return
            self._session += 1
            self._listening = False
        cancel = getattr(self._recognizer, "cancel", None)
        if callable(cancel):
            cancel()

    def toggle(self) -> None:
        if self._listening:
            self.stop()
        else:
            self.start()

    def wait(self, timeout: float | None = None) -> None:
        """Block until the current session thread finishes."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def _run(self, session: int) -> None:
        try:
            text = (self._recognizer.transcribe() or "").strip()
            if not text:
                raise RecognitionError("no-match")
        except RecognitionError as e:
            logger.warning("Speech recognition error: %s", e.reason)
            self._finish(session)
            return
        except Exception as e:
            logger.error("Speech recognition failed: %s", e)
            self._finish(session)
            return
        if self._finish(session):
            self._on_transcript(text)

    def _finish(self, session: int) -> bool:
        """Return to idle. True if the session was still current (not stopped)."""
        with self._lock:
            current = session == self._session and self._listening
            if current:
                self._listening = False
            return current


# ---------- Whisper (transformers) ----------


class WhisperRecognizer:
    """
    Transcribes an audio file with a Hugging Face ASR pipeline.
    source_provider returns the path of the recorded utterance, or None when
    the user declined (reported as not-allowed).
    """

    def __init__(
        self,
        source_provider: Callable[[], str | Path | None],
        model_id: str | None = None,
        language: str | None = None,
    ) -> None:
        self._source_provider = source_provider
        self.model_id = model_id or os.getenv("WHISPER_MODEL_ID", DEFAULT_WHISPER_MODEL)
        self.language = language or os.getenv("STT_LANGUAGE", "en")
        self._pipeline: Any | None = None

    def _get_pipeline(self) -> Any:
        if self._pipeline is None:
            from transformers import pipeline  # heavy; load on first use

            self._pipeline = pipeline("automatic-speech-recognition", model=self.model_id)
        return self._pipeline

    def transcribe(self) -> str:
        source = self._source_provider()
        if source is None:
            raise RecognitionError("not-allowed", "No audio provided")
        path = Path(source).expanduser()
        if not path.is_file():
            raise RecognitionError("audio-capture", f"Audio file not found: {path}")
        result = self._get_pipeline()(
            str(path),
            generate_kwargs={"language": self.language, "task": "transcribe"},
        )
        text = result.get("text", "") if isinstance(result, dict) else ""
        return " ".join(text.split())
