from __future__ import annotations

from typing import Optional

from .models import ErrorInfo, ErrorKind

CANCELLED_MESSAGE = "Request cancelled."
UNEXPECTED_MESSAGE = "Unexpected error while summarizing."


class SummarizeError(Exception):
    """Base error for failures surfaced by the summarize client."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def info(self) -> ErrorInfo:
        return ErrorInfo(kind=self.kind, message=self.message)


class ValidationError(SummarizeError):
    """Raised when input is rejected before anything is sent over the wire."""

    kind = ErrorKind.VALIDATION


class TransportError(SummarizeError):
    """Raised when the network exchange itself fails."""

    kind = ErrorKind.TRANSPORT


class RequestCancelledError(TransportError):
    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = CANCELLED_MESSAGE) -> None:
        super().__init__(message)


class ServerError(SummarizeError):
    """Raised for any non-2xx response."""

    kind = ErrorKind.SERVER

    def __init__(self, status_code: int, status_text: Optional[str] = None) -> None:
        self.status_code = status_code
        self.status_text = status_text or ""
        super().__init__(f"API error: {status_code} {self.status_text}".rstrip())

    @property
    def info(self) -> ErrorInfo:
        return ErrorInfo(
            kind=self.kind,
            message=self.message,
            status_code=self.status_code,
            status_text=self.status_text,
        )
