from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from .pipeline import FormattingPipeline, FormattingStage

StageFactory = Callable[[], FormattingStage]


class StageRegistry:
    def __init__(self) -> None:
        self._entries: List[tuple[str, StageFactory]] = []
        self._version: int = 0

    def register(
        self,
        factory: StageFactory,
        *,
        name: Optional[str] = None,
        before: Optional[str] = None,
    ) -> None:
        key = name or factory.__name__
        if key in {k for (k, _) in self._entries}:
            raise ValueError(f"Stage '{key}' is already registered")

        entry = (key, factory)
        if before:
            self._insert_before(entry, before)
        else:
            self._entries.append(entry)
        self._version += 1

    def _insert_before(self, entry: tuple[str, StageFactory], target: str) -> None:
        for idx, (key, _) in enumerate(self._entries):
            if key == target:
                self._entries.insert(idx, entry)
                return
        self._entries.append(entry)

    def create_pipeline(self) -> FormattingPipeline:
        return FormattingPipeline([factory() for _, factory in self._entries])

    def list_stage_names(self) -> Sequence[str]:
        return [name for name, _ in self._entries]

    @property
    def version(self) -> int:
        return self._version


default_registry = StageRegistry()


def register_stage(factory: StageFactory, *, name: Optional[str] = None, before: Optional[str] = None) -> None:
    default_registry.register(factory, name=name, before=before)
