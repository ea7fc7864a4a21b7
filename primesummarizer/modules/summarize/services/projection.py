from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from ..domain.models import Cancelled, ControllerSnapshot, Failed, Idle, Pending, Succeeded


@dataclass(frozen=True)
class UiView:
    loading: bool = False
    cancel_visible: bool = False
    error: Optional[str] = None
    summary_text: str = ""
    highlights: tuple[str, ...] = ()
    char_count: int = 0
    cleanup: tuple[tuple[str, int], ...] = ()


def project(
    previous: UiView,
    snapshot: ControllerSnapshot,
    *,
    display_limit: Optional[int] = None,
) -> UiView:
    """Derive the next view from the previous one and a controller snapshot.

    Pending keeps the last rendered results on screen, settled states replace
    them or add an error. Applying the same snapshot twice gives the same view.
    """
    state = snapshot.state
    if isinstance(state, Pending):
        view = replace(
            previous,
            loading=True,
            cancel_visible=True,
            error=None,
            char_count=len(state.call.request.raw_text),
            cleanup=state.call.request.cleanup,
        )
    elif isinstance(state, Succeeded):
        highlights = state.result.highlight_sentences
        if display_limit is not None:
            highlights = highlights[:display_limit]
        view = replace(
            previous,
            loading=False,
            cancel_visible=False,
            error=None,
            summary_text=state.result.summary_text,
            highlights=tuple(highlights),
        )
    elif isinstance(state, (Failed, Cancelled)):
        view = replace(previous, loading=False, cancel_visible=False, error=state.error.message)
    elif isinstance(state, Idle):
        view = replace(previous, loading=False, cancel_visible=False)
    else:
        raise TypeError(f"Unknown controller state: {state!r}")

    if snapshot.notice is not None:
        view = replace(view, error=snapshot.notice.message)
    return view
