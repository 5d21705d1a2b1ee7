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
Timetable Extraction Package

Heuristic extraction of class schedules from OCR/PDF timetable text.
"""

from .config import ExtractionConfig
from .days import day_matches, infer_day, weekday_index
from .extractor import extract_schedule, format_schedule_reply
from .models import ContextWindow, ScheduleEntry, TimeToken
from .subjects import infer_subject
from .time_tokens import (
    TIME_PATTERNS,
    duration_minutes,
    extract_time_tokens,
    start_minute,
)

__all__ = [
    "ExtractionConfig",
    "ContextWindow",
    "ScheduleEntry",
    "TimeToken",
    "TIME_PATTERNS",
    "extract_schedule",
    "format_schedule_reply",
    "extract_time_tokens",
    "infer_day",
    "infer_subject",
    "day_matches",
    "weekday_index",
    "start_minute",
    "duration_minutes",
]
