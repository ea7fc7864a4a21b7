from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Optional

import httpx

from ..domain.errors import RequestCancelledError, ServerError, TransportError
from ..domain.interfaces import SummarizeTransport
from ..domain.models import CancellationToken, SubmissionRequest

logger = logging.getLogger(__name__)


class HttpSummarizeTransport(SummarizeTransport):
    """POSTs submissions as JSON to the summarize endpoint.

    The request races against the call's cancellation token; when the token
    fires first the request task is aborted and ``RequestCancelledError`` is
    raised.
    """

    _DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send(self, request: SubmissionRequest, token: CancellationToken) -> Any:
        if token.cancelled:
            raise RequestCancelledError()

        post = asyncio.ensure_future(
            self._client.post(
                self.endpoint,
                json=request.to_payload(),
                headers={"Content-Type": "application/json"},
            )
        )
        waiter = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({post, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not post.done():
                post.cancel()
                with contextlib.suppress(asyncio.CancelledError, httpx.HTTPError):
                    await post

        if post.cancelled() or token.cancelled:
            raise RequestCancelledError()

        try:
            response = post.result()
        except httpx.HTTPError as exc:  # network issues
            logger.warning("Summarize request to %s failed: %s", self.endpoint, exc)
            raise TransportError(f"Network error: {exc}") from exc

        if not response.is_success:
            raise ServerError(response.status_code, response.reason_phrase)

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError("Summarize endpoint returned a non-JSON response") from exc
