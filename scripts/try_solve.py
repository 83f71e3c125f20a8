#!/usr/bin/env python3
"""
Call the API to solve a doubt, store it, and read back the history.
Run with the API already up: doubt-solver serve   (or uvicorn doubt_solver.api:app --reload)

  export DOUBT_SOLVER_URL=http://127.0.0.1:8000
  export DOUBT_SOLVER_ANON_KEY=$(doubt-solver issue-key)
  export OPENAI_API_KEY=your-openai-api-key-here   # optional; demo answers without it
  python3 scripts/try_solve.py "What is gravity?" Physics
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from doubt_solver.client import ExplanationClient, RecordStoreGateway, RequestFailed, StoreError
from doubt_solver.config import ConfigError, load_client_settings


def main() -> None:
    question = sys.argv[1] if len(sys.argv) > 1 else "What is gravity?"
    subject = sys.argv[2] if len(sys.argv) > 2 else None
    try:
        settings = load_client_settings()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(2)

    client = ExplanationClient(settings)
    store = RecordStoreGateway(settings)
    try:
        try:
            result = client.solve(question, subject)
        except RequestFailed as e:
            print(f"Server error ({e.status_code}): {e}", file=sys.stderr)
            sys.exit(1)
        print("--- Solution (POST /functions/v1/solve-doubt) ---")
        print("explanation:", result.explanation)
        print("example:", result.example)
        if "demo response" in result.explanation:
            print("  (Demo: set OPENAI_API_KEY in the server terminal to enable real explanations.)")

        try:
            saved = store.insert(
                question=question,
                explanation=result.explanation,
                example=result.example,
                subject=subject,
            )
            print(f"\nStored as {saved.id} at {saved.created_at.isoformat()}")
        except StoreError as e:
            print(f"Could not store the answer: {e}", file=sys.stderr)

        print("\n--- History (GET /rest/v1/doubts?limit=10) ---")
        print(json.dumps([d.to_dict() for d in store.list_recent()], indent=2)[:1500])
    finally:
        client.close()
        store.close()


if __name__ == "__main__":
    main()
