"""
Terminal rendering for doubts: result card, history list, page.
Pure functions of their inputs; no state.
"""
from __future__ import annotations

import textwrap
from datetime import datetime

from doubt_solver.models import Doubt

CARD_WIDTH = 78
EMPTY_HISTORY = "No doubts solved yet. Ask your first question!"
VOICE_UNSUPPORTED = "Voice input not supported in this terminal"


def format_timestamp(ts: datetime | None) -> str:
    """e.g. 'Mar 4, 2025, 02:07 PM' in local time; 'not saved' when absent."""
    if ts is None:
        return "not saved"
    local = ts.astimezone() if ts.tzinfo else ts
    return f"{local.strftime('%b')} {local.day}, {local.year}, {local.strftime('%I:%M %p')}"


def _wrap(text: str, indent: str = "  ") -> str:
    paragraphs = text.splitlines() or [""]
    out: list[str] = []
    for p in paragraphs:
        if not p.strip():
            out.append("")
            continue
        out.append(textwrap.fill(p, width=CARD_WIDTH, initial_indent=indent, subsequent_indent=indent))
    return "\n".join(out)


def render_doubt_card(doubt: Doubt) -> str:
    """Subject and input-method tags, question, explanation, optional example, timestamp."""
    tags = f"[{doubt.subject}] [{doubt.input_method.value}]"
    lines = [
        "-" * CARD_WIDTH,
        f"{tags:<{CARD_WIDTH - 24}}{format_timestamp(doubt.created_at):>24}",
        "",
        "Question:",
        _wrap(doubt.question),
        "",
        "Explanation:",
        _wrap(doubt.explanation),
    ]
    if doubt.example:
        lines += ["", "Example:", _wrap(doubt.example)]
    lines.append("-" * CARD_WIDTH)
    return "\n".join(lines)


def render_history(doubts: list[Doubt]) -> str:
    if not doubts:
        return EMPTY_HISTORY
    return "Recent Doubts\n\n" + "\n\n".join(render_doubt_card(d) for d in doubts)


def render_page(current: Doubt | None, doubts: list[Doubt], show_history: bool) -> str:
    """Latest answer, or the history list when toggled."""
    if show_history:
        return render_history(doubts)
    if current is None:
        return ""
    return "Solution\n\n" + render_doubt_card(current)
