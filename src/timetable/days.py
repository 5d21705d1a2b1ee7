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
Day Inference Module

Finds day-of-week tokens in a context window and maps day tokens to
weekday indexes for the reminder scheduler.
"""

import re
from typing import Optional

from .models import ContextWindow

# Full names before abbreviations, two-letter forms last
DAY_PATTERNS = [
    re.compile(r"\b(monday|mon)\b", re.IGNORECASE),
    re.compile(r"\b(tuesday|tue)\b", re.IGNORECASE),
    re.compile(r"\b(wednesday|wed)\b", re.IGNORECASE),
    re.compile(r"\b(thursday|thu)\b", re.IGNORECASE),
    re.compile(r"\b(friday|fri)\b", re.IGNORECASE),
    re.compile(r"\b(saturday|sat)\b", re.IGNORECASE),
    re.compile(r"\b(sunday|sun)\b", re.IGNORECASE),
    re.compile(r"\b(mo|tu|we|th|fr|sa|su)\b", re.IGNORECASE),
]

# Any day token, used to strip days out of subject candidates
ANY_DAY_RE = re.compile(
    r"\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday"
    r"|mon|tue|wed|thu|fri|sat|sun|mo|tu|we|th|fr|sa|su)\b",
    re.IGNORECASE,
)

# Python weekday numbering: Monday == 0
_THREE_LETTER = {"mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6}
_TWO_LETTER = {"mo": 0, "tu": 1, "we": 2, "th": 3, "fr": 4, "sa": 5, "su": 6}

DAILY = "Daily"


def _format_day(hit: str) -> str:
    if len(hit) <= 2:
        return hit.upper()
    return hit[0].upper() + hit[1:].lower()


def has_day_token(text: str) -> bool:
    return any(pattern.search(text) for pattern in DAY_PATTERNS)


def infer_day(window: ContextWindow) -> str:
    """
    Find the day token for a line.

    Patterns are tried in order over the whole window; the first pattern with
    a hit wins.

    Args:
        window: Context window around the line

    Returns:
        Formatted day token ("Mon", "Tuesday", "TH"), or "" if none found
    """
    combined = window.combined
    for pattern in DAY_PATTERNS:
        match = pattern.search(combined)
        if match:
            return _format_day(match.group(0))
    return ""


def weekday_index(day: Optional[str]) -> Optional[int]:
    """
    Map a day token to its weekday index (Monday == 0).

    Returns:
        Weekday index, or None for empty, "Daily" or unknown tokens
    """
    if not day:
        return None
    token = str(day).strip().lower()
    if token[:3] in _THREE_LETTER:
        return _THREE_LETTER[token[:3]]
    if token[:2] in _TWO_LETTER:
        return _TWO_LETTER[token[:2]]
    return None


def day_matches(day: Optional[str], weekday: int) -> bool:
    """Check whether a stored day token applies to the given weekday."""
    token = str(day or "").strip()
    if not token or token.lower() == DAILY.lower():
        return True
    return weekday_index(token) == weekday
