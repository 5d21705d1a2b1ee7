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
Reminder Scheduler Configuration

Values can be overridden via environment variables.
"""

import logging
import os
from dataclasses import dataclass

import pytz

logger = logging.getLogger("classbell.reminders.config")


def validate_timezone(tz_name: str) -> bool:
    """
    Validate that a timezone name is valid.

    Args:
        tz_name: IANA timezone name (e.g., "America/Los_Angeles")

    Returns:
        True if valid, False otherwise
    """
    try:
        pytz.timezone(tz_name)
        return True
    except pytz.UnknownTimeZoneError:
        return False


@dataclass(frozen=True)
class ReminderConfig:
    """Configuration for class alerts and one-off reminders."""

    # Minutes before a class starts at which the alert fires
    lead_minutes: int = 5

    tick_seconds: int = 60

    # A one-off reminder fires if the tick lands within this many seconds after dueAt
    delivery_window_seconds: int = 60

    # Timezone used to read class times and weekdays
    timezone: str = "UTC"

    # Deliver reminders missed by more than the window once, instead of dropping them
    fire_missed_reminders: bool = False

    @property
    def tz(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)

    @classmethod
    def from_env(cls) -> "ReminderConfig":
        """Create config from environment variables with defaults."""
        timezone = os.getenv("SCHEDULE_TIMEZONE", "UTC")
        if not validate_timezone(timezone):
            logger.warning(f"Invalid timezone '{timezone}', falling back to UTC")
            timezone = "UTC"
        return cls(
            lead_minutes=int(os.getenv("CLASS_NOTIFY_LEAD_MIN", "5")),
            tick_seconds=int(os.getenv("REMINDER_TICK_SECONDS", "60")),
            timezone=timezone,
            fire_missed_reminders=os.getenv("REMINDER_FIRE_MISSED", "false").lower()
            == "true",
        )
