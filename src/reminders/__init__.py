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
Reminders Package

Class alerts ahead of scheduled classes and one-off reminders.
"""

from .config import ReminderConfig, validate_timezone
from .models import ReminderRecord, UserScheduleState, parse_due_at
from .store import ScheduleStore, normalize_schedule_items
from .time_parser import (
    TimeParseError,
    is_class_reminder_question,
    is_reminder_request,
    parse_reminder_request,
)
from .scheduler import ReminderScheduler, TickStats

__all__ = [
    "ReminderConfig",
    "ReminderRecord",
    "UserScheduleState",
    "ScheduleStore",
    "ReminderScheduler",
    "TickStats",
    "TimeParseError",
    "normalize_schedule_items",
    "parse_due_at",
    "parse_reminder_request",
    "is_reminder_request",
    "is_class_reminder_question",
    "validate_timezone",
]
