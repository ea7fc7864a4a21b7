from __future__ import annotations

from dataclasses import dataclass, field
from typing import MutableMapping

from ...domain.models import FormatOptions


@dataclass
class FormattingContext:
    text: str
    options: FormatOptions = field(default_factory=FormatOptions)
    stats: MutableMapping[str, int] = field(default_factory=dict)

    def set_text(self, value: str) -> None:
        self.text = value

    def add_stat(self, key: str, value: int) -> None:
        self.stats[key] = self.stats.get(key, 0) + value
