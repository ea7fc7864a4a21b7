from __future__ import annotations

from typing import Any, Protocol

from .models import CancellationToken, SubmissionRequest


class SummarizeTransport(Protocol):
    async def send(self, request: SubmissionRequest, token: CancellationToken) -> Any:
        """Perform the network exchange and return the decoded JSON payload."""


class ClipboardWriter(Protocol):
    async def write_text(self, content: str) -> None:
        """Place the text where the user can copy it."""
