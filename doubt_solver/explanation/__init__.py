"""
Explanation service: turns a question into a simple explanation and an example.
Calls the upstream model when configured, otherwise serves a demo response.
"""
from __future__ import annotations

from doubt_solver.explanation.llm import UpstreamError
from doubt_solver.explanation.orchestration import MissingFieldError, demo_response, solve_doubt

__all__ = ["solve_doubt", "demo_response", "MissingFieldError", "UpstreamError"]
