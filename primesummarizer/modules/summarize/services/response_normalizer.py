from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from ..domain.models import SummaryResult

SUMMARY_FIELDS: Sequence[str] = ("summary", "result")
SENTENCE_FIELDS: Sequence[str] = ("important_sentences", "sentences", "highlights")

RE_LINE_SPLIT = re.compile(r"\n+")


def _is_present(value: Any) -> bool:
    # Empty strings, zero and booleans fall through to the next field; an empty
    # list is still an answer.
    if value is None or value is False:
        return False
    if isinstance(value, (str, int, float)):
        return bool(value)
    return True


def _first_present(payload: Mapping[str, Any], fields: Sequence[str]) -> Any:
    for name in fields:
        value = payload.get(name)
        if _is_present(value):
            return value
    return None


def _coerce_sentences(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple("" if item is None else str(item) for item in value)
    if isinstance(value, str):
        return tuple(RE_LINE_SPLIT.split(value))
    return ()


def normalize_response(payload: Any) -> SummaryResult:
    """Map whatever the summarize endpoint returned onto a ``SummaryResult``.

    The summary comes from ``summary`` or ``result``; highlights from
    ``important_sentences``, ``sentences`` or ``highlights``. A string of
    highlights is split on newline runs, anything that is neither a list nor
    a string yields no highlights.
    """
    if not isinstance(payload, Mapping):
        return SummaryResult()

    summary = _first_present(payload, SUMMARY_FIELDS)
    sentences = _first_present(payload, SENTENCE_FIELDS)
    return SummaryResult(
        summary_text="" if summary is None else str(summary),
        highlight_sentences=_coerce_sentences(sentences),
    )
