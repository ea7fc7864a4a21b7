from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from aiogram import Bot

from ..modules.summarize.domain.interfaces import SummarizeTransport
from ..modules.summarize.domain.models import Credentials, FormatOptions, SubmitOutcome, TriggerMode
from ..modules.summarize.services.controller import SummarizeController
from ..modules.summarize.services.triggers import Trigger, create_trigger
from .presenter import ChatPresenter

logger = logging.getLogger(__name__)

SESSION_IDLE_SECONDS = 3600.0
MAX_SESSIONS = 500


@dataclass
class ChatSession:
    chat_id: int
    controller: SummarizeController
    presenter: ChatPresenter
    triggers: Dict[TriggerMode, Trigger]
    unsubscribe: Callable[[], None]
    last_used: float = 0.0

    @property
    def busy(self) -> bool:
        return self.controller.in_flight is not None or any(t.pending for t in self.triggers.values())

    def fire(
        self,
        text: str,
        options: FormatOptions,
        credentials: Optional[Credentials] = None,
        *,
        live: bool = False,
    ) -> Optional[SubmitOutcome]:
        mode = TriggerMode.DEBOUNCED if live else TriggerMode.EXPLICIT
        return self.triggers[mode].fire(text, options, credentials)

    async def cancel(self) -> bool:
        """Drop a debounced submission still waiting out its window and abort the live call."""
        dropped = any(trigger.pending for trigger in self.triggers.values())
        for trigger in self.triggers.values():
            await trigger.stop()
        aborted = self.controller.in_flight is not None
        self.controller.cancel()
        return dropped or aborted

    async def close(self) -> None:
        for trigger in self.triggers.values():
            await trigger.stop()
        await self.controller.aclose()
        self.unsubscribe()
        await self.presenter.drain()


class ChatSessionRegistry:
    """Keeps one controller per chat.

    Sessions are ordered by last use. Idle ones are closed once they outlive
    ``idle_ttl`` or the registry grows past ``max_sessions``. A session with
    a request in flight or a debounced submission waiting is never evicted.
    """

    def __init__(
        self,
        bot: Bot,
        transport: SummarizeTransport,
        *,
        min_chars: int,
        require_credentials: bool,
        debounce_seconds: float,
        display_limit: Optional[int],
        idle_ttl: float = SESSION_IDLE_SECONDS,
        max_sessions: int = MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._bot = bot
        self._transport = transport
        self._min_chars = min_chars
        self._require_credentials = require_credentials
        self._debounce_seconds = debounce_seconds
        self._display_limit = display_limit
        self._idle_ttl = idle_ttl
        self._max_sessions = max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[int, ChatSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    async def get(self, chat_id: int) -> ChatSession:
        session = self._sessions.get(chat_id)
        if session is None:
            session = self._create(chat_id)
            self._sessions[chat_id] = session
        self._touch(chat_id, session)
        await self._evict(keep=chat_id)
        return session

    def find(self, chat_id: int) -> Optional[ChatSession]:
        session = self._sessions.get(chat_id)
        if session is not None:
            self._touch(chat_id, session)
        return session

    async def close_all(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await session.close()
        logger.info("Closed %d chat sessions", len(sessions))

    def _touch(self, chat_id: int, session: ChatSession) -> None:
        session.last_used = self._clock()
        self._sessions.move_to_end(chat_id)

    async def _evict(self, *, keep: int) -> None:
        now = self._clock()
        overflow = len(self._sessions) - self._max_sessions
        stale: list[int] = []
        # Least recently used first.
        for chat_id, session in self._sessions.items():
            if chat_id == keep or session.busy:
                continue
            if overflow > 0 or now - session.last_used >= self._idle_ttl:
                stale.append(chat_id)
                overflow -= 1
        for chat_id in stale:
            await self._sessions.pop(chat_id).close()
        if stale:
            logger.debug("Evicted %d idle chat sessions", len(stale))

    def _create(self, chat_id: int) -> ChatSession:
        controller = SummarizeController(
            self._transport,
            min_chars=self._min_chars,
            require_credentials=self._require_credentials,
        )
        presenter = ChatPresenter(self._bot, chat_id, display_limit=self._display_limit)
        unsubscribe = controller.subscribe(presenter.on_snapshot)
        return ChatSession(
            chat_id=chat_id,
            controller=controller,
            presenter=presenter,
            triggers={
                mode: create_trigger(mode, controller, delay=self._debounce_seconds)
                for mode in TriggerMode
            },
            unsubscribe=unsubscribe,
        )
