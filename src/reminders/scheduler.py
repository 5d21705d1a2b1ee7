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
Reminder Scheduler Module

Background task loop that sends class alerts and one-off reminders.
Uses discord.ext.tasks for reliable scheduling.

Every tick reads all users fresh from the store:
- Class alerts fire only on the exact minute `start - lead` (edge-triggered;
  a tick missed during that minute is not caught up).
- One-off reminders fire when the tick lands within the delivery window after
  dueAt. Older ones are dropped, malformed ones are kept, and the remaining
  list is written back.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

import pytz
from discord.ext import tasks

from analytics import track
from timetable import ScheduleEntry, day_matches, start_minute

from .config import ReminderConfig
from .models import UserScheduleState, parse_due_at
from .store import ScheduleStore

if TYPE_CHECKING:
    from discord_bot import DiscordBot

logger = logging.getLogger("classbell.reminders.scheduler")

# What a tick does with a one-off reminder
FIRE = "fire"
FIRE_LATE = "fire_late"
KEEP = "keep"
DROP = "drop"


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def is_class_alert_due(entry: ScheduleEntry, local_now: datetime, lead_minutes: int) -> bool:
    """
    Check whether a class alert fires on this exact minute.

    Args:
        entry: Stored schedule entry
        local_now: Current time in the schedule's timezone
        lead_minutes: Minutes before the start to alert

    Returns:
        True only when the current minute equals start - lead on a matching day
    """
    start = start_minute(entry.time)
    if start is None:
        return False
    if not day_matches(entry.day, local_now.weekday()):
        return False
    return local_now.hour * 60 + local_now.minute == start - lead_minutes


def classify_reminder(
    due_at: Optional[datetime],
    now: datetime,
    window_seconds: int = 60,
    fire_missed: bool = False,
) -> str:
    """
    Decide what a tick does with a one-off reminder.

    Returns:
        FIRE within the window after dueAt, KEEP before it or when dueAt is
        malformed, DROP (or FIRE_LATE if enabled) once the window has passed
    """
    if due_at is None or now < due_at:
        return KEEP
    if (now - due_at).total_seconds() < window_seconds:
        return FIRE
    return FIRE_LATE if fire_missed else DROP


def format_class_alert(entry: ScheduleEntry, lead_minutes: int) -> str:
    where = f" ({entry.location})" if entry.location else ""
    return f"Class in {lead_minutes} min: {entry.subject}{where}\n{entry.time}"


def format_reminder(text: str, late: bool = False) -> str:
    if late:
        return f"Reminder (delivered late): {text}"
    return f"Reminder: {text}"


@dataclass
class TickStats:
    """Counters for one scheduler tick."""

    users: int = 0
    class_alerts: int = 0
    reminders_fired: int = 0
    reminders_dropped: int = 0
    reminders_kept: int = 0
    persist_failures: int = 0
    skipped: bool = False


class ReminderScheduler:
    """
    Background scheduler for class alerts and one-off reminders.

    Runs a loop every `tick_seconds` (60 by default). tasks.loop awaits each
    tick before sleeping and a lock skips a tick that would start while the
    previous one is still running, so ticks never overlap.
    """

    def __init__(
        self,
        bot: "DiscordBot",
        store: ScheduleStore,
        config: Optional[ReminderConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the reminder scheduler.

        Args:
            bot: Provides notify(user_id, text) and wait_until_ready()
            store: Schedule store to read users from and write reminders to
            config: Reminder config (defaults if not given)
            clock: Returns the current aware datetime (defaults to UTC now)
        """
        self.bot = bot
        self.store = store
        self.config = config or ReminderConfig()
        self.clock = clock or utc_now
        self._started = False
        self._tick_lock = asyncio.Lock()

    def start(self) -> None:
        """Start the scheduler loop."""
        if not self._started:
            self._tick_loop.change_interval(seconds=self.config.tick_seconds)
            self._tick_loop.start()
            self._started = True
            logger.info(
                f"Reminder scheduler started (every {self.config.tick_seconds}s, "
                f"lead {self.config.lead_minutes} min, tz {self.config.timezone})"
            )

    def stop(self) -> None:
        """Stop the scheduler loop."""
        if self._started:
            self._tick_loop.cancel()
            self._started = False
            logger.info("Reminder scheduler stopped")

    @tasks.loop(seconds=60)
    async def _tick_loop(self) -> None:
        """Run one tick, logging instead of raising."""
        try:
            stats = await self.run_tick()
            if stats.class_alerts or stats.reminders_fired:
                logger.info(
                    f"Tick sent {stats.class_alerts} class alert(s) and "
                    f"{stats.reminders_fired} reminder(s) across {stats.users} user(s)"
                )
        except Exception as e:
            logger.error(f"Error in reminder scheduler loop: {e}", exc_info=True)
            track(
                "scheduler_error",
                "error",
                properties={
                    "error_type": type(e).__name__,
                    "error_message": str(e)[:200],
                },
            )

    @_tick_loop.before_loop
    async def _before_tick(self) -> None:
        """Wait for the bot to be ready before starting the loop."""
        await self.bot.wait_until_ready()
        logger.info("Reminder scheduler ready, starting loop")

    async def run_tick(self, now: Optional[datetime] = None) -> TickStats:
        """
        Evaluate every stored user once.

        Args:
            now: Time of the tick (defaults to the injected clock)

        Returns:
            Counters describing what the tick did
        """
        if self._tick_lock.locked():
            logger.warning("Previous reminder tick still running, skipping this one")
            return TickStats(skipped=True)

        async with self._tick_lock:
            now = now or self.clock()
            if now.tzinfo is None:
                now = pytz.UTC.localize(now)
            local_now = now.astimezone(self.config.tz)

            states = await self.store.list_user_states()
            stats = TickStats(users=len(states))

            for state in states:
                try:
                    await self._process_user(state, now, local_now, stats)
                except Exception as e:
                    logger.error(
                        f"Failed to process reminders for user {state.user_id}: {e}",
                        exc_info=True,
                    )
            return stats

    async def _process_user(
        self,
        state: UserScheduleState,
        now: datetime,
        local_now: datetime,
        stats: TickStats,
    ) -> None:
        await self._send_class_alerts(state, local_now, stats)

        if not state.reminders:
            return

        remaining = await self._process_reminders(state, now, stats)
        try:
            await self.store.save_reminders(state.user_id, remaining)
        except Exception as e:
            stats.persist_failures += 1
            logger.warning(f"Failed to persist reminders for user {state.user_id}: {e}")

    async def _send_class_alerts(
        self, state: UserScheduleState, local_now: datetime, stats: TickStats
    ) -> None:
        lead = self.config.lead_minutes
        for entry in state.schedule:
            if not is_class_alert_due(entry, local_now, lead):
                continue
            if await self._notify(state.user_id, format_class_alert(entry, lead)):
                stats.class_alerts += 1
                logger.info(f"Sent class alert for '{entry.subject}' to user {state.user_id}")
                track(
                    "class_alert_sent",
                    "reminder",
                    user_id=state.user_id,
                    properties={"subject": entry.subject, "day": entry.day},
                )

    async def _process_reminders(
        self, state: UserScheduleState, now: datetime, stats: TickStats
    ) -> list:
        """Fire due reminders and return the ones still pending."""
        remaining = []
        for record in state.reminders:
            if not isinstance(record, dict):
                remaining.append(record)
                stats.reminders_kept += 1
                continue

            action = classify_reminder(
                parse_due_at(record.get("dueAt")),
                now,
                window_seconds=self.config.delivery_window_seconds,
                fire_missed=self.config.fire_missed_reminders,
            )

            if action == KEEP:
                remaining.append(record)
                stats.reminders_kept += 1
            elif action == DROP:
                stats.reminders_dropped += 1
                logger.info(
                    f"Dropped missed reminder for user {state.user_id} (due {record.get('dueAt')})"
                )
            else:
                text = format_reminder(record.get("text", ""), late=action == FIRE_LATE)
                if await self._notify(state.user_id, text):
                    stats.reminders_fired += 1
                    track(
                        "reminder_delivered",
                        "reminder",
                        user_id=state.user_id,
                        properties={"late": action == FIRE_LATE},
                    )
        return remaining

    async def _notify(self, user_id: int, text: str) -> bool:
        """Send through the bot; failures are logged, not raised."""
        try:
            await self.bot.notify(user_id, text)
            return True
        except Exception as e:
            logger.warning(f"Failed to notify user {user_id}: {e}")
            track(
                "reminder_delivery_error",
                "error",
                user_id=user_id,
                properties={
                    "error_type": type(e).__name__,
                    "error_message": str(e)[:200],
                },
            )
            return False
