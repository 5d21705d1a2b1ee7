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
Event tracking for classbell.

Records schedule imports, alert deliveries and errors in the bot_events
table. Tracking never blocks or raises into the caller.

Usage:
    from analytics import track

    track("schedule_imported", "schedule", user_id=123, properties={"items": 7})
"""

import asyncio
import json
import logging
import os
from typing import Any, Optional

import asyncpg

logger = logging.getLogger("classbell.analytics")

EVENTS_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS bot_events (
    id BIGSERIAL PRIMARY KEY,
    event_name TEXT NOT NULL,
    event_category TEXT NOT NULL,
    user_id BIGINT,
    properties JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

# Created lazily on first event
_pool: Optional[asyncpg.Pool] = None
_schema_ready: bool = False


def is_enabled() -> bool:
    return os.getenv("ANALYTICS_ENABLED", "true").lower() == "true"


async def _get_pool() -> Optional[asyncpg.Pool]:
    """Get or create the connection pool and events table."""
    global _pool, _schema_ready
    if _pool is None:
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            return None
        try:
            _pool = await asyncpg.create_pool(database_url, min_size=1, max_size=2)
        except Exception as e:
            logger.warning(f"Analytics pool creation failed: {e}")
            return None
    if not _schema_ready:
        await _pool.execute(EVENTS_SCHEMA_SQL)
        _schema_ready = True
    return _pool


async def record_event(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Write one event row.

    Args:
        event_name: e.g. "class_alert_sent"
        event_category: One of: schedule, reminder, command, error
        user_id: Discord user ID (optional)
        properties: Extra event data

    Returns:
        True if the event was stored
    """
    if not is_enabled():
        return False

    try:
        pool = await _get_pool()
        if pool is None:
            return False
        await pool.execute(
            """
            INSERT INTO bot_events (event_name, event_category, user_id, properties)
            VALUES ($1, $2, $3, $4::jsonb)
            """,
            event_name,
            event_category,
            user_id,
            json.dumps(properties or {}, default=str),
        )
        return True
    except Exception as e:
        logger.debug(f"Event tracking failed: {e}")
        return False


def track(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> None:
    """
    Track an event without waiting for it to be written.

    Does nothing outside a running event loop.
    """
    if not is_enabled():
        return

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return
    loop.create_task(record_event(event_name, event_category, user_id, properties))


async def shutdown() -> None:
    """Close the connection pool. Call on bot shutdown."""
    global _pool, _schema_ready
    if _pool is not None:
        await _pool.close()
        _pool = None
        _schema_ready = False
