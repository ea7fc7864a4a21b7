from __future__ import annotations

from typing import Dict

from ...domain.models import FormatOptions
from .context import FormattingContext
from .pipeline import FormattingPipeline, FormattingStage, PipelineResult
from .registry import StageRegistry, default_registry, register_stage
from .stages.whitespace import CollapseNewlinesStage, CollapseSpacesStage, TrimStage


def _register_builtin_stages() -> None:
    # Order matters: every stage consumes the output of the previous one.
    names = set(default_registry.list_stage_names())
    for stage in (TrimStage, CollapseNewlinesStage, CollapseSpacesStage):
        if stage.name not in names:
            register_stage(stage, name=stage.name)


_register_builtin_stages()


_PIPELINE_CACHE: tuple[int, FormattingPipeline] | None = None


def _get_default_pipeline() -> FormattingPipeline:
    global _PIPELINE_CACHE
    version = default_registry.version
    if _PIPELINE_CACHE is None or _PIPELINE_CACHE[0] != version:
        _PIPELINE_CACHE = (version, default_registry.create_pipeline())
    return _PIPELINE_CACHE[1]


def format_text(raw: str, options: FormatOptions) -> tuple[str, Dict[str, int]]:
    result = _get_default_pipeline().run(raw, options)
    return result.text, result.stats


def normalize_text(raw: str, options: FormatOptions) -> str:
    text, _ = format_text(raw, options)
    return text


__all__ = [
    "FormattingContext",
    "FormattingPipeline",
    "FormattingStage",
    "PipelineResult",
    "StageRegistry",
    "default_registry",
    "register_stage",
    "format_text",
    "normalize_text",
]
