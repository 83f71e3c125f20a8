"""
Doubt solver: ask a question by text or voice, get a simple explanation with an
example, and keep a history of answers.
"""
from __future__ import annotations

from doubt_solver.models import DEFAULT_SUBJECT, HISTORY_LIMIT, Doubt, Explanation, InputMethod

__all__ = ["DEFAULT_SUBJECT", "HISTORY_LIMIT", "Doubt", "Explanation", "InputMethod"]

__version__ = "0.1.0"
