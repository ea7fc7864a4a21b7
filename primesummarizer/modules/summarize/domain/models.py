from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


@dataclass(frozen=True)
class FormatOptions:
    trim: bool = False
    collapse_newlines: bool = False
    collapse_spaces: bool = False

    def as_flags(self) -> dict[str, bool]:
        return {
            "trim": self.trim,
            "newlines": self.collapse_newlines,
            "spaces": self.collapse_spaces,
        }


@dataclass(frozen=True)
class Credentials:
    provider: Optional[str] = None
    model: Optional[str] = None
    api_key: Optional[str] = None

    def missing_fields(self) -> list[str]:
        return [name for name in ("provider", "model", "api_key") if not getattr(self, name)]

    def as_payload(self) -> dict[str, str]:
        return {
            name: value
            for name, value in (("provider", self.provider), ("model", self.model), ("api_key", self.api_key))
            if value
        }


@dataclass(frozen=True)
class SubmissionRequest:
    raw_text: str
    normalized_text: str
    options: FormatOptions
    credentials: Optional[Credentials] = None
    # Per-stage counts from the formatting pipeline, in stage order.
    cleanup: tuple[tuple[str, int], ...] = ()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"text": self.normalized_text}
        if self.credentials is not None:
            payload.update(self.credentials.as_payload())
        return payload


class CancellationToken:
    """One-shot signal shared between the controller and the transport."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass(frozen=True, eq=False)
class InFlightCall:
    request: SubmissionRequest
    call_id: int
    token: CancellationToken = field(default_factory=CancellationToken)


@dataclass(frozen=True)
class SummaryResult:
    summary_text: str = ""
    highlight_sentences: tuple[str, ...] = ()


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    TRANSPORT = "transport"
    CANCELLED = "cancelled"
    SERVER = "server"


@dataclass(frozen=True)
class ErrorInfo:
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    status_text: Optional[str] = None


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    call: InFlightCall


@dataclass(frozen=True)
class Succeeded:
    result: SummaryResult


@dataclass(frozen=True)
class Failed:
    error: ErrorInfo


@dataclass(frozen=True)
class Cancelled:
    error: ErrorInfo


ControllerState = Union[Idle, Pending, Succeeded, Failed, Cancelled]


@dataclass(frozen=True)
class ControllerSnapshot:
    state: ControllerState
    notice: Optional[ErrorInfo] = None


class SubmitOutcome(str, Enum):
    ISSUED = "issued"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"


class TriggerMode(str, Enum):
    EXPLICIT = "explicit"
    DEBOUNCED = "debounced"
