from __future__ import annotations

from html import escape
from typing import Iterable, Sequence

_CLEANUP_LABELS = {
    "trimmed": "edge whitespace",
    "line_breaks": "line breaks",
    "space_runs": "space runs",
}


def join_sentences(sentences: Sequence[str]) -> str:
    return "\n".join(sentences)


def format_stats(stats: Iterable[tuple[str, int]]) -> str:
    counts = dict(stats)
    parts = [f"{label}: {counts[key]}" for key, label in _CLEANUP_LABELS.items() if counts.get(key)]
    if not parts:
        return "Nothing to clean up, the text went out as typed."
    return "Cleaned " + ", ".join(parts) + "."


def render_summary_html(summary: str, sentences: Sequence[str]) -> str:
    lines = [f"<b>Summary</b>\n{escape(summary) if summary else '—'}"]
    if sentences:
        lines.append("")
        lines.append("<b>Key sentences</b>")
        lines.extend(f"{index}. {escape(sentence)}" for index, sentence in enumerate(sentences, start=1))
    return "\n".join(lines)
