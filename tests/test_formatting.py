from __future__ import annotations

import pytest

from primesummarizer.modules.summarize.domain.models import FormatOptions
from primesummarizer.modules.summarize.pipeline.formatting import (
    FormattingContext,
    FormattingStage,
    StageRegistry,
    format_text,
    normalize_text,
)
from primesummarizer.modules.summarize.pipeline.formatting.stages.whitespace import (
    CollapseNewlinesStage,
    CollapseSpacesStage,
    TrimStage,
)

ALL_ON = FormatOptions(trim=True, collapse_newlines=True, collapse_spaces=True)


def test_all_transforms_produce_single_line() -> None:
    assert normalize_text("  a\n\n  b  ", ALL_ON) == "a b"


def test_no_options_leave_text_untouched() -> None:
    raw = "  keep\n\n  me  "
    assert normalize_text(raw, FormatOptions()) == raw


def test_trim_only() -> None:
    assert normalize_text("\t hello  \n", FormatOptions(trim=True)) == "hello"


def test_newlines_swallow_surrounding_whitespace() -> None:
    text = normalize_text("first line  \n\n\t second line", FormatOptions(collapse_newlines=True))
    assert text == "first line second line"


def test_collapse_spaces_ignores_tabs() -> None:
    assert normalize_text("a    b\t\tc", FormatOptions(collapse_spaces=True)) == "a b\t\tc"


def test_newlines_without_trim_keep_edges() -> None:
    assert normalize_text("\nabc\n", FormatOptions(collapse_newlines=True)) == " abc "


@pytest.mark.parametrize(
    "raw",
    [
        "  a\n\n  b  ",
        "\n\nleading newlines",
        "spaces    inside   text",
        "mixed \t\n  \n whitespace  end \n",
        "",
        "   ",
    ],
)
@pytest.mark.parametrize(
    "options",
    [
        ALL_ON,
        FormatOptions(trim=True),
        FormatOptions(collapse_newlines=True),
        FormatOptions(collapse_spaces=True),
        FormatOptions(collapse_newlines=True, collapse_spaces=True),
    ],
)
def test_normalization_is_idempotent(raw: str, options: FormatOptions) -> None:
    once = normalize_text(raw, options)
    assert normalize_text(once, options) == once


def test_format_text_reports_stats() -> None:
    text, stats = format_text("  a\n\nb    c  ", ALL_ON)
    assert text == "a b c"
    assert stats["trimmed"] == 4
    assert stats["line_breaks"] == 1
    assert stats["space_runs"] == 1


def test_disabled_stages_do_not_report() -> None:
    _, stats = format_text("a  b", FormatOptions(trim=True))
    assert "space_runs" not in stats


def test_registry_keeps_insertion_order_and_rejects_duplicates() -> None:
    registry = StageRegistry()
    registry.register(TrimStage, name="trim")
    registry.register(CollapseSpacesStage, name="collapse_spaces")
    registry.register(CollapseNewlinesStage, name="collapse_newlines", before="collapse_spaces")
    assert list(registry.list_stage_names()) == ["trim", "collapse_newlines", "collapse_spaces"]
    with pytest.raises(ValueError):
        registry.register(TrimStage, name="trim")
    assert registry.version == 3


def test_custom_stage_runs_when_flag_enabled() -> None:
    class UpperStage(FormattingStage):
        name = "upper"
        option = "trim"

        def apply(self, context: FormattingContext) -> None:
            context.set_text(context.text.upper())

    registry = StageRegistry()
    registry.register(UpperStage, name="upper")
    pipeline = registry.create_pipeline()
    assert pipeline.run("abc", FormatOptions(trim=True)).text == "ABC"
    assert pipeline.run("abc", FormatOptions()).text == "abc"
