from __future__ import annotations

import pytest

from primesummarizer.modules.summarize.domain.models import SummaryResult
from primesummarizer.modules.summarize.services.response_normalizer import normalize_response


def test_string_sentences_split_on_newlines() -> None:
    result = normalize_response({"summary": "S", "sentences": "x\ny"})
    assert result == SummaryResult(summary_text="S", highlight_sentences=("x", "y"))


def test_result_field_without_sentences() -> None:
    result = normalize_response({"result": "S"})
    assert result == SummaryResult(summary_text="S", highlight_sentences=())


def test_summary_wins_over_result() -> None:
    assert normalize_response({"summary": "first", "result": "second"}).summary_text == "first"


def test_empty_summary_falls_back_to_result() -> None:
    assert normalize_response({"summary": "", "result": "fallback"}).summary_text == "fallback"


def test_sentence_field_priority() -> None:
    payload = {
        "important_sentences": ["a"],
        "sentences": ["b"],
        "highlights": ["c"],
    }
    assert normalize_response(payload).highlight_sentences == ("a",)
    del payload["important_sentences"]
    assert normalize_response(payload).highlight_sentences == ("b",)
    del payload["sentences"]
    assert normalize_response(payload).highlight_sentences == ("c",)


def test_empty_list_is_kept_as_answer() -> None:
    result = normalize_response({"summary": "S", "important_sentences": [], "highlights": ["ignored"]})
    assert result.highlight_sentences == ()


def test_list_elements_coerced_to_string() -> None:
    result = normalize_response({"summary": "S", "highlights": [1, "two", 3.5]})
    assert result.highlight_sentences == ("1", "two", "3.5")


def test_multiple_newlines_collapse_into_one_split() -> None:
    result = normalize_response({"summary": "S", "highlights": "one\n\n\ntwo"})
    assert result.highlight_sentences == ("one", "two")


@pytest.mark.parametrize("value", [42, {"nested": "object"}, None])
def test_unsupported_sentence_types_become_empty(value: object) -> None:
    assert normalize_response({"summary": "S", "sentences": value}).highlight_sentences == ()


@pytest.mark.parametrize("payload", [None, [], "text", 3])
def test_non_mapping_payload_gives_empty_result(payload: object) -> None:
    assert normalize_response(payload) == SummaryResult()


def test_missing_everything() -> None:
    assert normalize_response({}) == SummaryResult(summary_text="", highlight_sentences=())
