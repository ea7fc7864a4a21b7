from __future__ import annotations

from .modules.summarize.pipeline import formatting as formatting

__all__ = ["formatting"]
