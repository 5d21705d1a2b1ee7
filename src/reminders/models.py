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

"""Reminder records and per-user state as read from the store."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import pytz

from timetable import ScheduleEntry


def parse_due_at(value: Any) -> Optional[datetime]:
    """
    Parse a stored dueAt value into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings (a trailing "Z" is allowed) and epoch
    milliseconds. Naive values are read as UTC.

    Returns:
        Aware datetime, or None if the value is malformed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        return None
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=pytz.UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = pytz.UTC.localize(parsed)
    return parsed.astimezone(pytz.UTC)


@dataclass(frozen=True)
class ReminderRecord:
    """A one-off reminder."""

    text: str
    due_at: datetime

    def to_dict(self) -> dict:
        return {"text": self.text, "dueAt": self.due_at.astimezone(pytz.UTC).isoformat()}


@dataclass
class UserScheduleState:
    """A user's stored schedule and pending reminders."""

    user_id: int
    schedule: list[ScheduleEntry] = field(default_factory=list)
    # Raw stored dicts; malformed entries are kept as-is
    reminders: list[dict] = field(default_factory=list)
