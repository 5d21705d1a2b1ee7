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

"""Tests for time token strategies and canonical time helpers."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from timetable.config import ExtractionConfig
from timetable.models import ContextWindow
from timetable.time_tokens import (
    EXPLICIT_RANGE,
    TIME_PATTERNS,
    duration_minutes,
    extract_time_tokens,
    start_minute,
    strip_time_tokens,
    to_am_pm,
)


def window(line: str, previous: str = "", following: str = "") -> ContextWindow:
    return ContextWindow(previous, line, following)


def canonicals(line: str, previous: str = "", following: str = "") -> list[str]:
    return [t.canonical for t in extract_time_tokens(window(line, previous, following))]


class TestToAmPm:
    """Test 24-hour to 12-hour conversion."""

    def test_midnight(self):
        assert to_am_pm(0, 5) == "12:05 AM"

    def test_noon(self):
        assert to_am_pm(12, 0) == "12:00 PM"

    def test_afternoon(self):
        assert to_am_pm(23, 59) == "11:59 PM"

    def test_morning_pads_minutes(self):
        assert to_am_pm(9, 7) == "9:07 AM"


class TestExplicitRange:
    """Test the "H:MM - H:MM" strategy."""

    def test_dash_range(self):
        assert canonicals("Lecture 9:00 - 10:15") == ["9:00 AM - 10:15 AM"]

    def test_to_separator_24_hour(self):
        assert canonicals("13:00 to 14:30 Seminar") == ["1:00 PM - 2:30 PM"]

    def test_en_dash_separator(self):
        assert canonicals("8:00–9:00") == ["8:00 AM - 9:00 AM"]

    def test_meridiem_on_both_ends(self):
        assert canonicals("Math 9:00 AM - 10:15 AM Mon") == ["9:00 AM - 10:15 AM"]

    def test_start_borrows_end_meridiem(self):
        assert canonicals("9:00 - 10:15 AM") == ["9:00 AM - 10:15 AM"]

    def test_start_read_as_morning_when_borrowing_would_invert(self):
        assert canonicals("11:00 - 1:00 PM") == ["11:00 AM - 1:00 PM"]

    def test_noon_range(self):
        assert canonicals("12:30 PM - 1:45 PM") == ["12:30 PM - 1:45 PM"]

    def test_rejects_too_short(self):
        # The range matched, so no bare singles are emitted from inside it
        assert canonicals("Mon 9:00 - 9:10") == []

    def test_rejects_too_long(self):
        assert canonicals("8:00 - 15:00") == []

    def test_rejected_meridiem_range_not_split_into_singles(self):
        assert canonicals("Lab 8:00 AM - 3:00 PM Mon") == []
        assert canonicals("Quiz 9:00 AM - 9:05 AM") == []
        assert canonicals("9:00 - 9:10 AM") == []

    def test_rejected_range_leaves_other_times(self):
        assert canonicals("Quiz 9:00 AM - 9:05 AM then Gym 7 PM") == ["7:00 PM"]

    def test_rejects_end_before_start(self):
        assert canonicals("10:00 - 9:00") == []

    def test_rejects_invalid_fields(self):
        assert canonicals("25:00 - 26:00") == []
        assert canonicals("9:75 - 10:00") == []

    def test_strategy_runs_alone(self):
        tokens = EXPLICIT_RANGE.scan(window("9:00 - 10:00 and 11:00 - 12:00"), ExtractionConfig())
        assert [t.canonical for t in tokens] == [
            "9:00 AM - 10:00 AM",
            "11:00 AM - 12:00 PM",
        ]

    def test_custom_duration_bounds(self):
        config = ExtractionConfig(min_duration_minutes=90)
        tokens = extract_time_tokens(window("9:00 - 10:00"), config)
        assert tokens == []


class TestSingleTimes:
    """Test the single-time strategies."""

    def test_twelve_hour(self):
        assert canonicals("Exam 2:30 pm") == ["2:30 PM"]

    def test_twelve_hour_rejects_hour_13(self):
        assert canonicals("13:30 PM") == []

    def test_bare_time_needs_day_context(self):
        assert canonicals("14:00 English") == []

    def test_bare_time_with_day_in_previous_line(self):
        assert canonicals("14:00 English", previous="Monday") == ["2:00 PM"]

    def test_bare_time_with_day_in_next_line(self):
        assert canonicals("14:00 English", following="Fri") == ["2:00 PM"]

    def test_bare_midnight(self):
        assert canonicals("0:15 Mon") == ["12:15 AM"]

    def test_hour_only(self):
        assert canonicals("Gym 7am") == ["7:00 AM"]

    def test_hour_only_rejects_invalid_hour(self):
        assert canonicals("13 PM") == []

    def test_minutes_of_rejected_time_not_read_as_hour(self):
        assert canonicals("Lab 13:05 PM") == []

    def test_dotted(self):
        assert canonicals("Biology 9.30") == ["9:30 AM"]
        assert canonicals("Biology 14.45") == ["2:45 PM"]

    def test_dotted_ignores_longer_decimals(self):
        assert canonicals("pi is 3.14159") == []


class TestCompactRange:
    """Test the "930-1020" strategy."""

    def test_three_and_four_digits(self):
        assert canonicals("930-1020 Physics Lab") == ["9:30 AM - 10:20 AM"]

    def test_four_and_four_digits(self):
        assert canonicals("1300 - 1450") == ["1:00 PM - 2:50 PM"]

    def test_rejects_end_before_start(self):
        assert canonicals("1538-1025 Chemistry") == []

    def test_rejects_short_duration(self):
        assert canonicals("900-905") == []

    def test_rejects_invalid_minutes(self):
        assert canonicals("960-1030") == []


class TestSpanClaiming:
    """A time is reported once even when several formats match it."""

    def test_meridiem_time_not_repeated_as_bare(self):
        assert canonicals("9:00 AM Mon") == ["9:00 AM"]

    def test_minutes_not_read_as_hour(self):
        # "10 AM" inside "9:10 AM" must not become a separate 10:00 AM
        assert canonicals("Math 9:10 AM") == ["9:10 AM"]

    def test_two_times_on_one_line(self):
        assert canonicals("Physics 9:00 AM and 2:00 PM") == ["9:00 AM", "2:00 PM"]

    def test_token_spans(self):
        tokens = extract_time_tokens(window("Art 3 PM"))
        assert len(tokens) == 1
        assert tokens[0].raw == "3 PM"
        assert tokens[0].pattern == "h ampm"
        assert (tokens[0].start, tokens[0].end) == (4, 8)


class TestPatternOrder:
    def test_precedence(self):
        assert [p.name for p in TIME_PATTERNS] == [
            "hh:mm ampm",
            "hh:mm",
            "h ampm",
            "h.mm",
            "digits-range",
        ]


class TestStartMinute:
    """Test parsing canonical times back to minutes."""

    @pytest.mark.parametrize(
        "canonical,expected",
        [
            ("9:00 AM", 540),
            ("12:00 AM", 0),
            ("12:30 PM", 750),
            ("1:00 PM - 2:00 PM", 780),
            ("14:30", 870),
            ("garbage", None),
            (None, None),
            ("", None),
        ],
    )
    def test_start_minute(self, canonical, expected):
        assert start_minute(canonical) == expected

    def test_duration(self):
        assert duration_minutes("9:30 AM - 10:20 AM") == 50
        assert duration_minutes("9:30 AM") is None


class TestStripTimeTokens:
    def test_strips_all_formats(self):
        text = strip_time_tokens("Math 9:00 AM - 10:15 AM 930-1020 7 pm 9.30")
        assert text.split() == ["Math"]
