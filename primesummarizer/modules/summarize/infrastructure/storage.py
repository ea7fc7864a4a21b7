from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from ..domain.models import Credentials, FormatOptions


@dataclass(frozen=True)
class UserPreferences:
    user_id: int
    options: FormatOptions
    live_mode: bool = False


@dataclass
class Storage:
    path: Path

    async def initialize(self) -> None:
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS user_preferences (
                    user_id INTEGER PRIMARY KEY,
                    trim INTEGER NOT NULL,
                    collapse_newlines INTEGER NOT NULL,
                    collapse_spaces INTEGER NOT NULL,
                    live_mode INTEGER NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS credentials (
                    user_id INTEGER PRIMARY KEY,
                    provider TEXT,
                    model TEXT,
                    api_key TEXT,
                    updated_at TEXT NOT NULL
                )
                """
            )
            await db.commit()

    async def get_preferences(self, user_id: int) -> UserPreferences | None:
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "SELECT trim, collapse_newlines, collapse_spaces, live_mode FROM user_preferences WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()
            await cursor.close()
        if not row:
            return None
        options = FormatOptions(trim=bool(row[0]), collapse_newlines=bool(row[1]), collapse_spaces=bool(row[2]))
        return UserPreferences(user_id=user_id, options=options, live_mode=bool(row[3]))

    async def upsert_preferences(self, preferences: UserPreferences) -> None:
        options = preferences.options
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                """
                INSERT INTO user_preferences (user_id, trim, collapse_newlines, collapse_spaces, live_mode, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    trim = excluded.trim,
                    collapse_newlines = excluded.collapse_newlines,
                    collapse_spaces = excluded.collapse_spaces,
                    live_mode = excluded.live_mode,
                    updated_at = excluded.updated_at
                """,
                (
                    preferences.user_id,
                    int(options.trim),
                    int(options.collapse_newlines),
                    int(options.collapse_spaces),
                    int(preferences.live_mode),
                    datetime.now(UTC).isoformat(),
                ),
            )
            await db.commit()

    async def get_credentials(self, user_id: int) -> Credentials | None:
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "SELECT provider, model, api_key FROM credentials WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()
            await cursor.close()
        if not row:
            return None
        return Credentials(provider=row[0], model=row[1], api_key=row[2])

    async def upsert_credentials(self, user_id: int, credentials: Credentials) -> None:
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                """
                INSERT INTO credentials (user_id, provider, model, api_key, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    provider = excluded.provider,
                    model = excluded.model,
                    api_key = excluded.api_key,
                    updated_at = excluded.updated_at
                """,
                (
                    user_id,
                    credentials.provider,
                    credentials.model,
                    credentials.api_key,
                    datetime.now(UTC).isoformat(),
                ),
            )
            await db.commit()

    async def delete_credentials(self, user_id: int) -> None:
        async with aiosqlite.connect(self.path) as db:
            await db.execute("DELETE FROM credentials WHERE user_id = ?", (user_id,))
            await db.commit()
