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
Time Token Module

Finds time expressions in timetable lines and normalizes them to the
canonical 12-hour form ("9:30 AM" or "9:30 AM - 10:20 AM").

Each format is a separate strategy: a regex plus a pure normalizer
`(match, window, config) -> canonical | None`. Strategies run in precedence
order and a match overlapping a span already claimed on the line is skipped.
Supported formats, in order:
- Explicit range:   "9:00 - 10:15", "13:00 to 14:30", "9:00 AM - 10:15 AM"
- 12-hour:          "9:00 AM"
- Bare 24-hour:     "14:00" (only with a day token nearby)
- Hour only:        "9 AM"
- Dotted:           "9.30"
- Compact range:    "930-1020" (OCR output of tables without separators)
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from .config import ExtractionConfig
from .days import has_day_token
from .models import ContextWindow, TimeToken

RANGE_RE = re.compile(
    r"(?<!\d)(\d{1,2}):(\d{2})\s*(AM|PM)?\s*(?:-|–|to)\s*(\d{1,2}):(\d{2})\s*(AM|PM)?\b",
    re.IGNORECASE,
)
HHMM_AMPM_RE = re.compile(r"(?<!\d)(\d{1,2}):(\d{2})\s*(AM|PM)\b", re.IGNORECASE)
HHMM_RE = re.compile(r"(?<!\d)(\d{1,2}):(\d{2})(?!\d)")
H_AMPM_RE = re.compile(r"(?<![\d:.])(\d{1,2})\s*(AM|PM)\b", re.IGNORECASE)
H_DOT_MM_RE = re.compile(r"(?<![\d.])(\d{1,2})\.(\d{2})(?![\d.])")
COMPACT_RANGE_RE = re.compile(r"\b(\d{3,4})\s*-\s*(\d{3,4})\b")

# Leftover time fragments removed when looking for a subject
_STRIP_RES = [
    RANGE_RE,
    COMPACT_RANGE_RE,
    re.compile(r"\b\d{1,2}[:.]\d{2}\s*(?:AM|PM)?\b", re.IGNORECASE),
    H_AMPM_RE,
]

_CANONICAL_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)
_BARE_RE = re.compile(r"(\d{1,2}):(\d{2})")


def is_valid_hm(hour: int, minute: int, twelve_hour: bool = False) -> bool:
    """Check hour/minute fields for a 12-hour or 24-hour clock."""
    if minute < 0 or minute > 59:
        return False
    if twelve_hour:
        return 1 <= hour <= 12
    return 0 <= hour <= 23


def to_am_pm(hour24: int, minute: int) -> str:
    """Format a 24-hour time as "H:MM AM|PM"."""
    if hour24 == 0:
        hour, meridiem = 12, "AM"
    elif hour24 == 12:
        hour, meridiem = 12, "PM"
    elif hour24 > 12:
        hour, meridiem = hour24 - 12, "PM"
    else:
        hour, meridiem = hour24, "AM"
    return f"{hour}:{minute:02d} {meridiem}"


def _to_24(hour: int, meridiem: str) -> int:
    meridiem = meridiem.upper()
    if meridiem == "PM" and hour != 12:
        return hour + 12
    if meridiem == "AM" and hour == 12:
        return 0
    return hour


def _format_range(start: int, end: int, config: ExtractionConfig) -> Optional[str]:
    """Format a range given in minutes since midnight, or None if implausible."""
    if end <= start:
        return None
    duration = end - start
    if duration < config.min_duration_minutes or duration > config.max_duration_minutes:
        return None
    return f"{to_am_pm(start // 60, start % 60)} - {to_am_pm(end // 60, end % 60)}"


# =============================================================================
# Strategies
# =============================================================================


def normalize_explicit_range(
    match: re.Match, window: ContextWindow, config: ExtractionConfig
) -> Optional[str]:
    """Normalize "H:MM - H:MM", with an optional meridiem on either end."""
    h1, m1, h2, m2 = (int(match.group(i)) for i in (1, 2, 4, 5))
    start_meridiem, end_meridiem = match.group(3), match.group(6)

    if end_meridiem:
        if not is_valid_hm(h2, m2, twelve_hour=True):
            return None
        end = _to_24(h2, end_meridiem) * 60 + m2
    else:
        if not is_valid_hm(h2, m2):
            return None
        end = h2 * 60 + m2

    if start_meridiem:
        if not is_valid_hm(h1, m1, twelve_hour=True):
            return None
        start = _to_24(h1, start_meridiem) * 60 + m1
    else:
        if not is_valid_hm(h1, m1):
            return None
        start = h1 * 60 + m1
        # "9:00 - 10:15 AM": the start borrows the end's meridiem
        if end_meridiem and 1 <= h1 <= 12:
            borrowed = _to_24(h1, end_meridiem) * 60 + m1
            start = borrowed if borrowed < end else _to_24(h1, "AM") * 60 + m1

    return _format_range(start, end, config)


def normalize_hhmm_ampm(
    match: re.Match, window: ContextWindow, config: ExtractionConfig
) -> Optional[str]:
    hour, minute = int(match.group(1)), int(match.group(2))
    if not is_valid_hm(hour, minute, twelve_hour=True):
        return None
    return f"{hour}:{minute:02d} {match.group(3).upper()}"


def normalize_bare_hhmm(
    match: re.Match, window: ContextWindow, config: ExtractionConfig
) -> Optional[str]:
    """24-hour time without a meridiem; too ambiguous unless a day is nearby."""
    hour, minute = int(match.group(1)), int(match.group(2))
    if not is_valid_hm(hour, minute):
        return None
    if not has_day_token(window.combined):
        return None
    return to_am_pm(hour, minute)


def normalize_hour_ampm(
    match: re.Match, window: ContextWindow, config: ExtractionConfig
) -> Optional[str]:
    hour = int(match.group(1))
    if not is_valid_hm(hour, 0, twelve_hour=True):
        return None
    return f"{hour}:00 {match.group(2).upper()}"


def normalize_dotted(
    match: re.Match, window: ContextWindow, config: ExtractionConfig
) -> Optional[str]:
    hour, minute = int(match.group(1)), int(match.group(2))
    if not is_valid_hm(hour, minute):
        return None
    return to_am_pm(hour, minute)


def _decode_compact(digits: str) -> Optional[int]:
    value = int(digits)
    hour, minute = divmod(value, 100)
    if minute >= 60 or hour > 23:
        return None
    return hour * 60 + minute


def normalize_compact_range(
    match: re.Match, window: ContextWindow, config: ExtractionConfig
) -> Optional[str]:
    """Normalize "930-1020" style ranges; drops OCR noise like "1538-1025"."""
    start = _decode_compact(match.group(1))
    end = _decode_compact(match.group(2))
    if start is None or end is None:
        return None
    return _format_range(start, end, config)


@dataclass(frozen=True)
class TimePattern:
    """A named time format: regex plus normalizer."""

    name: str
    regex: re.Pattern
    normalize: Callable[[re.Match, ContextWindow, ExtractionConfig], Optional[str]]

    def scan(self, window: ContextWindow, config: ExtractionConfig) -> list[TimeToken]:
        """Run this strategy alone over the current line."""
        tokens = []
        for match in self.regex.finditer(window.current):
            canonical = self.normalize(match, window, config)
            if canonical:
                tokens.append(
                    TimeToken(
                        raw=match.group(0),
                        canonical=canonical,
                        pattern=self.name,
                        start=match.start(),
                        end=match.end(),
                    )
                )
        return tokens


EXPLICIT_RANGE = TimePattern("hh:mm range", RANGE_RE, normalize_explicit_range)
BARE_HHMM = TimePattern("hh:mm", HHMM_RE, normalize_bare_hhmm)

# Single-time and compact patterns, in precedence order
TIME_PATTERNS = [
    TimePattern("hh:mm ampm", HHMM_AMPM_RE, normalize_hhmm_ampm),
    BARE_HHMM,
    TimePattern("h ampm", H_AMPM_RE, normalize_hour_ampm),
    TimePattern("h.mm", H_DOT_MM_RE, normalize_dotted),
    TimePattern("digits-range", COMPACT_RANGE_RE, normalize_compact_range),
]


def _overlaps(token: TimeToken, claimed: list[tuple[int, int]]) -> bool:
    return any(token.start < end and start < token.end for start, end in claimed)


def extract_time_tokens(
    window: ContextWindow, config: Optional[ExtractionConfig] = None
) -> list[TimeToken]:
    """
    Find all time expressions on the current line of a window.

    Explicit ranges come first. Every "H:MM - H:MM" span is claimed whether
    or not the range was accepted, so a rejected range never comes back as
    two single times. A line containing an explicit range never yields bare
    "H:MM" singles, and no token may overlap a claimed span.

    Args:
        window: Context window; only the current line is scanned
        config: Extraction config (duration bounds)

    Returns:
        Tokens in precedence order, then by position in the line
    """
    config = config or ExtractionConfig()
    tokens = EXPLICIT_RANGE.scan(window, config)
    claimed = [match.span() for match in RANGE_RE.finditer(window.current)]
    has_range = bool(claimed)

    for pattern in TIME_PATTERNS:
        if pattern is BARE_HHMM and has_range:
            continue
        for token in pattern.scan(window, config):
            if _overlaps(token, claimed):
                continue
            claimed.append((token.start, token.end))
            tokens.append(token)
    return tokens


def strip_time_tokens(text: str) -> str:
    """Remove every time-like fragment from a piece of text."""
    for regex in _STRIP_RES:
        text = regex.sub(" ", text)
    return text


def start_minute(canonical: Optional[str]) -> Optional[int]:
    """
    Minutes since midnight of the first time in a canonical string.

    Accepts "H:MM AM|PM" and ranges (the start is used). Falls back to a bare
    "H:MM" read as 24-hour.

    Returns:
        Minutes since midnight, or None if no time can be parsed
    """
    if not canonical:
        return None
    first = str(canonical).split("-")[0].strip()
    match = _CANONICAL_RE.search(first)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if not is_valid_hm(hour, minute, twelve_hour=True):
            return None
        return _to_24(hour, match.group(3)) * 60 + minute
    match = _BARE_RE.search(first)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if not is_valid_hm(hour, minute):
            return None
        return hour * 60 + minute
    return None


def duration_minutes(canonical: str) -> Optional[int]:
    """Length of a canonical range in minutes, or None for single times."""
    if " - " not in canonical:
        return None
    start_part, end_part = canonical.split(" - ", 1)
    start, end = start_minute(start_part), start_minute(end_part)
    if start is None or end is None:
        return None
    return end - start
