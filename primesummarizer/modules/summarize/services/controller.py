from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Callable, Optional, Union

from ..domain.errors import UNEXPECTED_MESSAGE, SummarizeError, ValidationError
from ..domain.interfaces import SummarizeTransport
from ..domain.models import (
    ControllerSnapshot,
    ControllerState,
    Credentials,
    ErrorInfo,
    ErrorKind,
    FormatOptions,
    Idle,
    InFlightCall,
    Pending,
    SubmitOutcome,
    SummaryResult,
)
from .response_normalizer import normalize_response
from .transitions import (
    MIN_CHARS,
    AbortCall,
    AcceptText,
    Cancel,
    Effect,
    Event,
    Settle,
    StartCall,
    Submit,
    prepare_submission,
    transition,
)

logger = logging.getLogger(__name__)

Listener = Callable[[ControllerSnapshot], None]


class SummarizeController:
    """Owns the request lifecycle of one session.

    At most one call is live at any time: submitting again supersedes the
    previous call, and only the live call may commit its outcome.
    """

    def __init__(
        self,
        transport: SummarizeTransport,
        *,
        min_chars: int = MIN_CHARS,
        require_credentials: bool = False,
    ) -> None:
        self._transport = transport
        self._min_chars = min_chars
        self._require_credentials = require_credentials
        self._state: ControllerState = Idle()
        self._notice: Optional[ErrorInfo] = None
        self._last_accepted_text: Optional[str] = None
        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task] = set()
        self._ids = itertools.count(1)

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(state=self._state, notice=self._notice)

    @property
    def last_accepted_text(self) -> Optional[str]:
        return self._last_accepted_text

    @property
    def in_flight(self) -> Optional[InFlightCall]:
        return self._state.call if isinstance(self._state, Pending) else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def submit(
        self,
        raw: str,
        options: FormatOptions,
        credentials: Optional[Credentials] = None,
    ) -> SubmitOutcome:
        try:
            request = prepare_submission(
                raw,
                options,
                credentials,
                last_accepted_text=self._last_accepted_text,
                min_chars=self._min_chars,
                require_credentials=self._require_credentials,
            )
        except ValidationError as exc:
            self._notice = exc.info
            self._notify()
            return SubmitOutcome.REJECTED

        if request is None:
            logger.debug("Skipping resubmission of the last accepted text")
            return SubmitOutcome.DUPLICATE

        self._notice = None
        call = InFlightCall(request=request, call_id=next(self._ids))
        self._dispatch(Submit(call))
        return SubmitOutcome.ISSUED

    def cancel(self) -> None:
        self._dispatch(Cancel())

    async def wait_settled(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        self.cancel()
        await self.wait_settled()
        self._listeners.clear()

    def _dispatch(self, event: Event) -> None:
        result = transition(self._state, event)
        changed = result.state is not self._state
        self._state = result.state
        if changed:
            self._notice = None
        for effect in result.effects:
            self._run_effect(effect)
        if changed:
            self._notify()

    def _run_effect(self, effect: Effect) -> None:
        if isinstance(effect, AbortCall):
            logger.debug("Cancelling call #%s", effect.call.call_id)
            effect.call.token.cancel()
        elif isinstance(effect, StartCall):
            task = asyncio.create_task(self._exchange(effect.call))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        elif isinstance(effect, AcceptText):
            self._last_accepted_text = effect.text

    async def _exchange(self, call: InFlightCall) -> None:
        outcome: Union[SummaryResult, ErrorInfo]
        try:
            payload = await self._transport.send(call.request, call.token)
            outcome = normalize_response(payload)
        except SummarizeError as exc:
            outcome = exc.info
        except Exception:
            logger.exception("Summarize call #%s failed unexpectedly", call.call_id)
            outcome = ErrorInfo(kind=ErrorKind.TRANSPORT, message=UNEXPECTED_MESSAGE)

        if call.token.cancelled:
            logger.debug("Discarding outcome of superseded call #%s", call.call_id)
        self._dispatch(Settle(call, outcome))

    def _notify(self) -> None:
        snapshot = self.snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Controller listener failed")
