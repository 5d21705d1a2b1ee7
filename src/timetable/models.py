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

"""Data types shared by the timetable extraction modules."""

from dataclasses import dataclass
from typing import NamedTuple, Optional


class ContextWindow(NamedTuple):
    """The previous, current and next line around the line being processed."""

    previous: str
    current: str
    next: str

    @property
    def combined(self) -> str:
        return f"{self.previous} {self.current} {self.next}"

    def lines(self) -> list[str]:
        return [self.previous, self.current, self.next]


@dataclass(frozen=True)
class TimeToken:
    """A time expression found in a line, with its canonical form."""

    raw: str
    canonical: str
    pattern: str
    start: int  # character span in the line
    end: int


@dataclass(frozen=True)
class ScheduleEntry:
    """One class in an extracted timetable."""

    subject: str
    time: str  # "H:MM AM" or "H:MM AM - H:MM PM"
    day: str  # weekday token or "Daily"
    location: Optional[str] = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.subject, self.time, self.day)

    def to_dict(self) -> dict:
        data = {"subject": self.subject, "time": self.time, "day": self.day}
        if self.location:
            data["location"] = self.location
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleEntry":
        """Build an entry from a stored document, accepting legacy field names."""
        return cls(
            subject=data.get("subject") or data.get("course") or data.get("title") or "Class",
            time=data.get("time") or data.get("start") or data.get("startTime") or "",
            day=data.get("day") or data.get("dayName") or data.get("dayShort") or "Daily",
            location=data.get("location") or data.get("room") or None,
        )
