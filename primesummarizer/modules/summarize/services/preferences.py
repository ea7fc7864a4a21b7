from __future__ import annotations

from ..domain.models import FormatOptions
from ..infrastructure.storage import Storage, UserPreferences


class PreferencesService:
    def __init__(self, storage: Storage, *, default_options: FormatOptions, default_live_mode: bool = False) -> None:
        self._storage = storage
        self._default_options = default_options
        self._default_live_mode = default_live_mode

    async def get(self, user_id: int) -> UserPreferences:
        stored = await self._storage.get_preferences(user_id)
        if stored:
            return stored
        return UserPreferences(user_id=user_id, options=self._default_options, live_mode=self._default_live_mode)

    async def update_options(self, user_id: int, options: FormatOptions) -> UserPreferences:
        current = await self.get(user_id)
        updated = UserPreferences(user_id=user_id, options=options, live_mode=current.live_mode)
        await self._storage.upsert_preferences(updated)
        return updated

    async def set_live_mode(self, user_id: int, enabled: bool) -> UserPreferences:
        current = await self.get(user_id)
        updated = UserPreferences(user_id=user_id, options=current.options, live_mode=enabled)
        await self._storage.upsert_preferences(updated)
        return updated

    @property
    def default_options(self) -> FormatOptions:
        return self._default_options
