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
Time Parser Module

Parses one-off reminder requests such as "remind me at 5:30 pm to call mom",
"remind me in 20 minutes" or "remind me to stretch in 1 hour".
"""

import logging
import re
from datetime import datetime
from typing import Optional

import dateparser
import pytz

from .config import validate_timezone
from .models import ReminderRecord

logger = logging.getLogger("classbell.reminders.time_parser")

DEFAULT_REMINDER_TEXT = "Time's up!"

REMIND_PREFIX_RE = re.compile(r"^\s*!?remind\s+me\b[\s,:]*", re.IGNORECASE)

# Questions about alerts before class are answered with guidance instead
CLASS_REMINDER_INTENT_RE = re.compile(
    r"(notify|remind).*(before|prior)\s*(class|lecture)|remind me before class",
    re.IGNORECASE,
)

# "to <what> <when>", e.g. "to stretch in 1 hour"
_WHAT_THEN_WHEN_RE = re.compile(
    r"^to\s+(?P<what>.+?)\s+(?P<when>(?:in|at|on|tomorrow|tonight|next)\b.+)$",
    re.IGNORECASE,
)
# "<when> to|that|about <what>", e.g. "at 5:30 pm to call mom"
_WHEN_THEN_WHAT_RE = re.compile(
    r"^(?P<when>.+?)\s+(?:to|that|about)\s+(?P<what>.+)$",
    re.IGNORECASE,
)
_LEADING_PREPOSITION_RE = re.compile(r"^(?:at|on)\s+", re.IGNORECASE)


class TimeParseError(Exception):
    """Raised when a reminder request cannot be parsed."""

    pass


def is_reminder_request(text: str) -> bool:
    return bool(REMIND_PREFIX_RE.match(text)) and not is_class_reminder_question(text)


def is_class_reminder_question(text: str) -> bool:
    return bool(CLASS_REMINDER_INTENT_RE.search(text))


def split_reminder_request(text: str) -> tuple[str, str]:
    """
    Split a reminder request into its time expression and message.

    Args:
        text: Request with or without the "remind me" prefix

    Returns:
        Tuple of (time expression, reminder text)
    """
    body = REMIND_PREFIX_RE.sub("", text.strip(), count=1).strip()

    match = _WHAT_THEN_WHEN_RE.match(body)
    if match:
        return match.group("when").strip(), match.group("what").strip()

    match = _WHEN_THEN_WHAT_RE.match(body)
    if match:
        return match.group("when").strip(), match.group("what").strip()

    return body, DEFAULT_REMINDER_TEXT


def parse_reminder_request(
    text: str,
    user_timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> ReminderRecord:
    """
    Parse a reminder request into a record ready to store.

    Args:
        text: e.g. "remind me in 20 minutes to check the oven"
        user_timezone: IANA timezone the times are meant in
        now: Reference time (defaults to the current time)

    Returns:
        ReminderRecord with an aware UTC due time

    Raises:
        TimeParseError: If the time cannot be parsed or is in the past
    """
    when, what = split_reminder_request(text)
    if not when:
        raise TimeParseError("Empty time expression")

    if not validate_timezone(user_timezone):
        logger.warning(f"Invalid timezone '{user_timezone}', falling back to UTC")
        user_timezone = "UTC"

    user_tz = pytz.timezone(user_timezone)
    now = now or datetime.now(pytz.UTC)
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)

    settings = {
        "TIMEZONE": user_timezone,
        "RETURN_AS_TIMEZONE_AWARE": True,
        "PREFER_DATES_FROM": "future",
        "RELATIVE_BASE": now.astimezone(user_tz).replace(tzinfo=None),
    }

    parsed = dateparser.parse(_LEADING_PREPOSITION_RE.sub("", when), settings=settings)

    if parsed is None:
        raise TimeParseError(
            f"Could not parse time expression: '{when}'. "
            "Try formats like 'in 20 minutes', 'at 5:30 pm' or 'tomorrow at 10am'."
        )

    if parsed.tzinfo is None:
        parsed = user_tz.localize(parsed)

    if parsed <= now:
        raise TimeParseError(
            f"Time '{when}' appears to be in the past. "
            "Try specifying a future time like 'tomorrow at 10am'."
        )

    return ReminderRecord(text=what, due_at=parsed.astimezone(pytz.UTC))
