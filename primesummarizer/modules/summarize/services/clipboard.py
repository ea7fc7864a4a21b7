from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional

from ..domain.interfaces import ClipboardWriter

logger = logging.getLogger(__name__)

Fallback = Callable[[str], Any]


async def copy_text(writer: ClipboardWriter, content: str, *, fallback: Optional[Fallback] = None) -> bool:
    """Copy ``content`` through ``writer``, falling back when it is unavailable.

    Returns ``True`` when either path succeeded. Failures are only logged.
    """
    try:
        await writer.write_text(content)
        return True
    except Exception:
        logger.debug("Clipboard write failed, trying fallback", exc_info=True)

    if fallback is None:
        return False
    try:
        result = fallback(content)
        if inspect.isawaitable(result):
            await result
        return True
    except Exception:
        logger.debug("Clipboard fallback failed", exc_info=True)
        return False
