from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

import aiosqlite

from ..domain.models import Credentials
from ..infrastructure.storage import Storage

logger = logging.getLogger(__name__)


class CredentialService:
    """Best-effort credential cache: storage failures are logged, never raised."""

    def __init__(
        self,
        storage: Storage,
        *,
        default_provider: Optional[str] = None,
        default_model: Optional[str] = None,
    ) -> None:
        self._storage = storage
        self._defaults = Credentials(provider=default_provider, model=default_model)

    async def get(self, user_id: int) -> Credentials:
        try:
            stored = await self._storage.get_credentials(user_id)
        except aiosqlite.Error:
            logger.warning("Could not read cached credentials for user %s", user_id, exc_info=True)
            stored = None
        if stored is None:
            return self._defaults
        return Credentials(
            provider=stored.provider or self._defaults.provider,
            model=stored.model or self._defaults.model,
            api_key=stored.api_key,
        )

    async def set_api_key(self, user_id: int, api_key: str) -> Credentials:
        current = await self.get(user_id)
        return await self._save(user_id, replace(current, api_key=api_key.strip() or None))

    async def set_provider(self, user_id: int, provider: str, model: Optional[str] = None) -> Credentials:
        current = await self.get(user_id)
        return await self._save(user_id, replace(current, provider=provider, model=model or current.model))

    async def clear(self, user_id: int) -> None:
        try:
            await self._storage.delete_credentials(user_id)
        except aiosqlite.Error:
            logger.warning("Could not clear cached credentials for user %s", user_id, exc_info=True)

    async def _save(self, user_id: int, credentials: Credentials) -> Credentials:
        try:
            await self._storage.upsert_credentials(user_id, credentials)
        except aiosqlite.Error:
            logger.warning("Could not cache credentials for user %s", user_id, exc_info=True)
        return credentials
