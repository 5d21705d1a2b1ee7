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
Timetable Extraction Configuration

Tunable parameters for schedule extraction. Values can be overridden via
environment variables; the config is built once at startup and passed into
the pipeline explicitly.
"""

import os
from dataclasses import dataclass

# Order matters: the first keyword found in a line labels the class
DEFAULT_SUBJECT_KEYWORDS = (
    "math", "mathematics", "calculus", "algebra", "geometry",
    "english", "literature", "writing", "grammar",
    "science", "physics", "chemistry", "biology",
    "history", "geography", "social", "studies",
    "computer", "programming", "coding", "it", "cs", "cse",
    "economics", "psychology", "philosophy",
    "language", "spanish", "french", "german",
    "lecture", "lab", "tutorial", "seminar",
    "class", "course", "subject",
)


@dataclass(frozen=True)
class ExtractionConfig:
    """Configuration for the schedule extraction pipeline."""

    subject_keywords: tuple = DEFAULT_SUBJECT_KEYWORDS

    # Plausible class length, in minutes
    min_duration_minutes: int = 15
    max_duration_minutes: int = 360

    max_subject_length: int = 60
    default_subject: str = "Class"
    default_day: str = "Daily"

    @classmethod
    def from_env(cls) -> "ExtractionConfig":
        """Create config from environment variables with defaults."""
        raw_keywords = os.getenv("SCHEDULE_SUBJECT_KEYWORDS", "")
        keywords = tuple(
            k.strip().lower() for k in raw_keywords.split(",") if k.strip()
        )
        return cls(
            subject_keywords=keywords or DEFAULT_SUBJECT_KEYWORDS,
            min_duration_minutes=int(os.getenv("SCHEDULE_MIN_DURATION", "15")),
            max_duration_minutes=int(os.getenv("SCHEDULE_MAX_DURATION", "360")),
        )
