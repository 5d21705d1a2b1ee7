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
Schedule Extraction Module

Turns raw timetable text (from OCR, PDF extraction or a pasted message)
into a deduplicated list of classes sorted by start time.
"""

import logging
import re
from typing import Optional

from .config import ExtractionConfig
from .days import infer_day
from .models import ContextWindow, ScheduleEntry
from .subjects import infer_subject
from .time_tokens import extract_time_tokens, start_minute

logger = logging.getLogger("classbell.timetable.extractor")

_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")


def normalize_lines(text: str) -> list[str]:
    """Split text into trimmed, non-empty lines with whitespace runs collapsed."""
    lines = (_WHITESPACE_RUN_RE.sub(" ", line).strip() for line in text.split("\n"))
    return [line for line in lines if line]


def _windows(lines: list[str]):
    for i, line in enumerate(lines):
        previous = lines[i - 1] if i > 0 else ""
        following = lines[i + 1] if i + 1 < len(lines) else ""
        yield ContextWindow(previous, line, following)


def _extract_line(window: ContextWindow, config: ExtractionConfig) -> list[ScheduleEntry]:
    entries = []
    for token in extract_time_tokens(window, config):
        subject = infer_subject(window, config)
        day = infer_day(window) or config.default_day
        entries.append(ScheduleEntry(subject=subject, time=token.canonical, day=day))
    return entries


def dedupe_entries(entries: list[ScheduleEntry]) -> list[ScheduleEntry]:
    """Drop repeated (subject, time, day) entries, keeping the first."""
    seen = set()
    unique = []
    for entry in entries:
        if entry.key in seen:
            continue
        seen.add(entry.key)
        unique.append(entry)
    return unique


def sort_entries(entries: list[ScheduleEntry]) -> list[ScheduleEntry]:
    """Stable sort by start minute; unparseable times sort first."""
    return sorted(entries, key=lambda e: start_minute(e.time) or 0)


def extract_schedule(
    text: Optional[str], config: Optional[ExtractionConfig] = None
) -> list[ScheduleEntry]:
    """
    Extract class entries from timetable text.

    Never raises: on empty input or any internal failure an empty list is
    returned and the error is logged.

    Args:
        text: Raw text recovered from a timetable
        config: Extraction config (defaults if not given)

    Returns:
        Deduplicated entries sorted by start time
    """
    config = config or ExtractionConfig()
    try:
        if not text or not text.strip():
            logger.info("No text provided for schedule extraction")
            return []

        lines = normalize_lines(text)
        logger.debug(f"Extracting schedule from {len(lines)} line(s): {lines[:10]}")

        entries = []
        for window in _windows(lines):
            entries.extend(_extract_line(window, config))

        schedule = sort_entries(dedupe_entries(entries))
        logger.info(
            f"Schedule extraction found {len(schedule)} item(s) "
            f"({len(entries) - len(schedule)} duplicate(s) dropped)"
        )
        return schedule

    except Exception as e:
        logger.error(f"Schedule extraction failed: {e}", exc_info=True)
        return []


def format_schedule_reply(entries: list[ScheduleEntry]) -> str:
    """Build the confirmation message sent after a schedule is saved."""
    if not entries:
        return (
            "Could not detect a schedule. Send the timetable as text or a text "
            "file with one class per line, e.g. `Math 9:00 AM - 10:15 AM Mon`."
        )
    lines = ["Your schedule has been saved:"]
    for entry in entries:
        lines.append(f"- {entry.subject} at {entry.time} ({entry.day})")
    return "\n".join(lines)
