from __future__ import annotations

import re

from ..context import FormattingContext
from ..pipeline import FormattingStage


class TrimStage(FormattingStage):
    name = "trim"
    option = "trim"

    def apply(self, context: FormattingContext) -> None:
        text = context.text
        trimmed = text.strip()
        context.add_stat("trimmed", len(text) - len(trimmed))
        context.set_text(trimmed)


class CollapseNewlinesStage(FormattingStage):
    """Join lines: any whitespace run holding a newline becomes one space."""

    name = "collapse_newlines"
    option = "collapse_newlines"

    RE_LINE_BREAKS = re.compile(r"\s*\n+\s*")

    def apply(self, context: FormattingContext) -> None:
        text, count = self.RE_LINE_BREAKS.subn(" ", context.text)
        context.add_stat("line_breaks", count)
        context.set_text(text)


class CollapseSpacesStage(FormattingStage):
    name = "collapse_spaces"
    option = "collapse_spaces"

    # Plain spaces only; tabs and other whitespace are left alone.
    RE_SPACE_RUNS = re.compile(r" {2,}")

    def apply(self, context: FormattingContext) -> None:
        text, count = self.RE_SPACE_RUNS.subn(" ", context.text)
        context.add_stat("space_runs", count)
        context.set_text(text)
