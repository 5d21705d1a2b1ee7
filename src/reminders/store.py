# classbell - Timetable Reminder Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Schedule Store Module

Handles database operations for per-user schedules and one-off reminders.
Each user has one JSONB document; writes merge into it so keys this module
does not know about are preserved.
"""

import json
import logging
from typing import Any

import asyncpg

from timetable import ScheduleEntry

from .models import ReminderRecord, UserScheduleState

logger = logging.getLogger("classbell.reminders.store")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS user_schedules (
    user_id BIGINT PRIMARY KEY,
    data JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


def _load_document(raw: Any) -> dict:
    """Decode a JSONB column (asyncpg returns it as text by default)."""
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring undecodable schedule document")
            return {}
    return raw if isinstance(raw, dict) else {}


def normalize_schedule_items(raw: Any) -> list[dict]:
    """
    Return the stored schedule items whatever shape they were saved in.

    Both a flat list and an object wrapping an "items" list are accepted;
    anything else reads as an empty schedule.
    """
    if isinstance(raw, dict):
        raw = raw.get("items")
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, dict)]


def _reminder_list(document: dict) -> list:
    reminders = document.get("reminders")
    return list(reminders) if isinstance(reminders, list) else []


class ScheduleStore:
    """
    Stores schedules and reminders, one JSONB document per user.

    Document shape:
        {"schedule": [{"subject", "time", "day"}, ...],
         "reminders": [{"text", "dueAt"}, ...], ...}
    """

    def __init__(self, db_pool: asyncpg.Pool):
        """
        Initialize the store.

        Args:
            db_pool: asyncpg connection pool
        """
        self.db = db_pool

    async def ensure_schema(self) -> None:
        """Create the user_schedules table if it does not exist."""
        await self.db.execute(SCHEMA_SQL)

    async def _merge(self, user_id: int, patch: dict) -> None:
        await self.db.execute(
            """
            INSERT INTO user_schedules (user_id, data, updated_at)
            VALUES ($1, $2::jsonb, NOW())
            ON CONFLICT (user_id)
            DO UPDATE SET data = user_schedules.data || EXCLUDED.data,
                          updated_at = NOW()
            """,
            user_id,
            json.dumps(patch, default=str),
        )

    async def get_document(self, user_id: int) -> dict:
        """
        Get a user's raw document.

        Args:
            user_id: Discord user ID

        Returns:
            The stored document, or {} if the user has none
        """
        row = await self.db.fetchrow(
            """
            SELECT data FROM user_schedules
            WHERE user_id = $1
            """,
            user_id,
        )
        return _load_document(row["data"]) if row else {}

    # =========================================================================
    # Schedules
    # =========================================================================

    async def get_schedule(self, user_id: int) -> list[ScheduleEntry]:
        document = await self.get_document(user_id)
        items = normalize_schedule_items(document.get("schedule"))
        return [ScheduleEntry.from_dict(item) for item in items]

    async def save_schedule(self, user_id: int, entries: list[ScheduleEntry]) -> None:
        """
        Replace a user's schedule, keeping the rest of their document.

        Args:
            user_id: Discord user ID
            entries: Extracted schedule entries
        """
        await self._merge(user_id, {"schedule": [e.to_dict() for e in entries]})
        logger.info(f"Saved {len(entries)} schedule item(s) for user {user_id}")

    async def clear_schedule(self, user_id: int) -> None:
        await self._merge(user_id, {"schedule": []})
        logger.info(f"Cleared schedule for user {user_id}")

    # =========================================================================
    # One-off reminders
    # =========================================================================

    async def list_reminders(self, user_id: int) -> list:
        document = await self.get_document(user_id)
        return _reminder_list(document)

    async def add_reminder(self, user_id: int, record: ReminderRecord) -> None:
        """
        Append a reminder to a user's pending list.

        Args:
            user_id: Discord user ID
            record: The reminder to add
        """
        await self.db.execute(
            """
            INSERT INTO user_schedules (user_id, data, updated_at)
            VALUES ($1, jsonb_build_object('reminders', jsonb_build_array($2::jsonb)), NOW())
            ON CONFLICT (user_id)
            DO UPDATE SET data = jsonb_set(
                    user_schedules.data,
                    '{reminders}',
                    CASE WHEN jsonb_typeof(user_schedules.data->'reminders') = 'array'
                         THEN user_schedules.data->'reminders'
                         ELSE '[]'::jsonb
                    END || jsonb_build_array($2::jsonb)
                ),
                updated_at = NOW()
            """,
            user_id,
            json.dumps(record.to_dict()),
        )
        logger.info(f"Added reminder for user {user_id} due {record.due_at.isoformat()}")

    async def save_reminders(self, user_id: int, remaining: list) -> None:
        """
        Overwrite a user's pending reminders, keeping the rest of their document.

        Args:
            user_id: Discord user ID
            remaining: Reminder dicts still pending
        """
        await self._merge(user_id, {"reminders": remaining})

    async def clear_reminders(self, user_id: int) -> int:
        """
        Drop all pending reminders for a user.

        Returns:
            Number of reminders removed
        """
        pending = await self.list_reminders(user_id)
        if pending:
            await self.save_reminders(user_id, [])
        return len(pending)

    # =========================================================================
    # Scheduler-facing methods
    # =========================================================================

    async def list_user_states(self) -> list[UserScheduleState]:
        """
        Read every user's schedule and reminders.

        Returns:
            One state per stored user, schedule shapes normalized
        """
        rows = await self.db.fetch(
            """
            SELECT user_id, data FROM user_schedules
            ORDER BY user_id ASC
            """
        )

        states = []
        for row in rows:
            document = _load_document(row["data"])
            items = normalize_schedule_items(document.get("schedule"))
            states.append(
                UserScheduleState(
                    user_id=row["user_id"],
                    schedule=[ScheduleEntry.from_dict(item) for item in items],
                    reminders=_reminder_list(document),
                )
            )
        return states
