"""Pure state transitions of the request lifecycle.

Every function here maps ``(state, event)`` to a new state plus the effects
the controller has to carry out. Nothing in this module touches the network,
the clock or the observers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..domain.errors import CANCELLED_MESSAGE, ValidationError
from ..domain.models import (
    Cancelled,
    ControllerState,
    Credentials,
    ErrorInfo,
    ErrorKind,
    Failed,
    FormatOptions,
    InFlightCall,
    Pending,
    SubmissionRequest,
    Succeeded,
    SummaryResult,
)
from ..pipeline.formatting import format_text

MIN_CHARS = 5


@dataclass(frozen=True)
class Submit:
    call: InFlightCall


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Settle:
    call: InFlightCall
    outcome: Union[SummaryResult, ErrorInfo]


Event = Union[Submit, Cancel, Settle]


@dataclass(frozen=True)
class AbortCall:
    call: InFlightCall


@dataclass(frozen=True)
class StartCall:
    call: InFlightCall


@dataclass(frozen=True)
class AcceptText:
    text: str


Effect = Union[AbortCall, StartCall, AcceptText]


@dataclass(frozen=True)
class Transition:
    state: ControllerState
    effects: tuple[Effect, ...] = ()


def prepare_submission(
    raw: str,
    options: FormatOptions,
    credentials: Optional[Credentials] = None,
    *,
    last_accepted_text: Optional[str] = None,
    min_chars: int = MIN_CHARS,
    require_credentials: bool = False,
) -> Optional[SubmissionRequest]:
    """Build the request for ``raw`` or return ``None`` when it repeats the last success.

    Raises ``ValidationError`` when the text is too short or mandatory
    credential fields are missing.
    """
    normalized, stats = format_text(raw, options)
    if len(normalized) < min_chars:
        raise ValidationError(f"Please enter at least {min_chars} characters to summarize.")
    if require_credentials:
        missing = (credentials or Credentials()).missing_fields()
        if missing:
            raise ValidationError(f"Missing credentials: {', '.join(missing)}.")
    if last_accepted_text is not None and normalized == last_accepted_text:
        return None
    return SubmissionRequest(
        raw_text=raw,
        normalized_text=normalized,
        options=options,
        credentials=credentials,
        cleanup=tuple(stats.items()),
    )


def on_submit(state: ControllerState, event: Submit) -> Transition:
    effects: tuple[Effect, ...] = ()
    if isinstance(state, Pending):
        effects += (AbortCall(state.call),)
    effects += (StartCall(event.call),)
    return Transition(state=Pending(event.call), effects=effects)


def on_cancel(state: ControllerState, event: Cancel) -> Transition:
    if not isinstance(state, Pending):
        return Transition(state=state)
    error = ErrorInfo(kind=ErrorKind.CANCELLED, message=CANCELLED_MESSAGE)
    return Transition(state=Cancelled(error), effects=(AbortCall(state.call),))


def on_settle(state: ControllerState, event: Settle) -> Transition:
    call = event.call
    # Superseded or cancelled calls never touch state.
    if call.token.cancelled or not isinstance(state, Pending) or state.call is not call:
        return Transition(state=state)
    outcome = event.outcome
    if isinstance(outcome, SummaryResult):
        return Transition(state=Succeeded(outcome), effects=(AcceptText(call.request.normalized_text),))
    if outcome.kind is ErrorKind.CANCELLED:
        return Transition(state=Cancelled(outcome))
    return Transition(state=Failed(outcome))


def transition(state: ControllerState, event: Event) -> Transition:
    if isinstance(event, Submit):
        return on_submit(state, event)
    if isinstance(event, Cancel):
        return on_cancel(state, event)
    if isinstance(event, Settle):
        return on_settle(state, event)
    raise TypeError(f"Unknown event: {event!r}")
