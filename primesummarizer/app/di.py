from __future__ import annotations

import logging
from dataclasses import dataclass

from aiogram import Bot, Dispatcher

from .config import AppConfig
from .handlers.commands import create_commands_router
from .handlers.summarize import create_summarize_router
from .handlers.unsupported import create_unsupported_router
from .sessions import ChatSessionRegistry
from ..modules.summarize.infrastructure.http_transport import HttpSummarizeTransport
from ..modules.summarize.infrastructure.storage import Storage
from ..modules.summarize.services.credentials import CredentialService
from ..modules.summarize.services.preferences import PreferencesService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    config: AppConfig
    storage: Storage
    transport: HttpSummarizeTransport
    preferences: PreferencesService
    credentials: CredentialService
    sessions: ChatSessionRegistry

    @classmethod
    async def build(cls, config: AppConfig, bot: Bot) -> "AppContainer":
        storage = Storage(config.storage_path)
        await storage.initialize()
        transport = HttpSummarizeTransport(config.summarize_endpoint, timeout=config.request_timeout)
        preferences = PreferencesService(storage, default_options=config.default_format_options)
        credentials = CredentialService(
            storage,
            default_provider=config.default_provider,
            default_model=config.default_model,
        )
        sessions = ChatSessionRegistry(
            bot,
            transport,
            min_chars=config.min_chars,
            require_credentials=config.require_credentials,
            debounce_seconds=config.debounce_seconds,
            display_limit=config.highlight_display_limit,
            idle_ttl=config.session_idle_seconds,
            max_sessions=config.max_sessions,
        )
        logger.info("Summarize endpoint: %s", config.summarize_endpoint)
        return cls(
            config=config,
            storage=storage,
            transport=transport,
            preferences=preferences,
            credentials=credentials,
            sessions=sessions,
        )

    def create_dispatcher(self) -> Dispatcher:
        dispatcher = Dispatcher()
        dispatcher.include_router(create_commands_router(self.sessions, self.preferences, self.credentials))
        dispatcher.include_router(create_summarize_router(self.sessions, self.preferences, self.credentials))
        dispatcher.include_router(create_unsupported_router())
        dispatcher.shutdown.register(self.on_shutdown)
        return dispatcher

    async def on_shutdown(self, bot: Bot) -> None:
        await self.sessions.close_all()
        await self.transport.aclose()
