from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from ...domain.models import FormatOptions
from .context import FormattingContext


@dataclass
class PipelineResult:
    text: str
    stats: dict[str, int]


class FormattingStage:
    name: str
    # Name of the FormatOptions flag that switches the stage on.
    option: str

    def enabled(self, options: FormatOptions) -> bool:
        return bool(getattr(options, self.option, False))

    def apply(self, context: FormattingContext) -> None:
        raise NotImplementedError


class FormattingPipeline:
    def __init__(self, stages: Sequence[FormattingStage]):
        self._stages: List[FormattingStage] = list(stages)

    def run(self, text: str, options: FormatOptions) -> PipelineResult:
        ctx = FormattingContext(text=text, options=options)
        for stage in self._stages:
            if stage.enabled(options):
                stage.apply(ctx)
        return PipelineResult(text=ctx.text, stats=dict(ctx.stats))
