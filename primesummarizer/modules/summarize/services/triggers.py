from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

from ..domain.models import Credentials, FormatOptions, SubmitOutcome, TriggerMode
from .controller import SummarizeController

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.8

Sleep = Callable[[float], Awaitable[None]]


class ExplicitTrigger:
    """Submits right away; used when the user asks for a summary explicitly."""

    mode = TriggerMode.EXPLICIT

    def __init__(self, controller: SummarizeController) -> None:
        self._controller = controller

    def fire(
        self,
        raw: str,
        options: FormatOptions,
        credentials: Optional[Credentials] = None,
    ) -> Optional[SubmitOutcome]:
        return self._controller.submit(raw, options, credentials)

    @property
    def pending(self) -> bool:
        return False

    async def stop(self) -> None:
        return None


class DebouncedTrigger:
    """Coalesces rapid input so only the last change in a quiet window submits.

    A pending submission is dropped, not merged, when new input arrives
    before the window elapses.
    """

    mode = TriggerMode.DEBOUNCED

    def __init__(
        self,
        controller: SummarizeController,
        *,
        delay: float = DEBOUNCE_SECONDS,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._controller = controller
        self.delay = delay
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def fire(
        self,
        raw: str,
        options: FormatOptions,
        credentials: Optional[Credentials] = None,
    ) -> Optional[SubmitOutcome]:
        if self._task is not None:
            self._task.cancel()
        self._task = asyncio.create_task(self._delayed_submit(raw, options, credentials))
        return None

    async def flush(self) -> None:
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _delayed_submit(
        self,
        raw: str,
        options: FormatOptions,
        credentials: Optional[Credentials],
    ) -> None:
        await self._sleep(self.delay)
        outcome = self._controller.submit(raw, options, credentials)
        logger.debug("Debounced submission finished with %s", outcome.value)


Trigger = ExplicitTrigger | DebouncedTrigger


def create_trigger(
    mode: TriggerMode,
    controller: SummarizeController,
    *,
    delay: float = DEBOUNCE_SECONDS,
) -> Trigger:
    if mode is TriggerMode.DEBOUNCED:
        return DebouncedTrigger(controller, delay=delay)
    return ExplicitTrigger(controller)
