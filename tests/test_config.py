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

"""Tests for configuration and stored value parsing."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.config import ReminderConfig, validate_timezone
from reminders.models import parse_due_at
from timetable.config import DEFAULT_SUBJECT_KEYWORDS, ExtractionConfig


class TestExtractionConfig:
    def test_default_config(self):
        config = ExtractionConfig()
        assert config.min_duration_minutes == 15
        assert config.max_duration_minutes == 360
        assert config.default_day == "Daily"
        assert config.subject_keywords == DEFAULT_SUBJECT_KEYWORDS

    def test_config_from_env_default(self):
        with patch.dict("os.environ", {}, clear=True):
            config = ExtractionConfig.from_env()
            assert config == ExtractionConfig()

    def test_config_from_env_custom_values(self):
        with patch.dict("os.environ", {
            "SCHEDULE_SUBJECT_KEYWORDS": "Anatomy, Art ,",
            "SCHEDULE_MIN_DURATION": "30",
            "SCHEDULE_MAX_DURATION": "240",
        }):
            config = ExtractionConfig.from_env()
            assert config.subject_keywords == ("anatomy", "art")
            assert config.min_duration_minutes == 30
            assert config.max_duration_minutes == 240


class TestReminderConfig:
    def test_default_config(self):
        config = ReminderConfig()
        assert config.lead_minutes == 5
        assert config.tick_seconds == 60
        assert config.delivery_window_seconds == 60
        assert config.timezone == "UTC"
        assert config.fire_missed_reminders is False

    def test_config_from_env_custom_values(self):
        with patch.dict("os.environ", {
            "CLASS_NOTIFY_LEAD_MIN": "10",
            "REMINDER_TICK_SECONDS": "30",
            "SCHEDULE_TIMEZONE": "Europe/London",
            "REMINDER_FIRE_MISSED": "TRUE",
        }):
            config = ReminderConfig.from_env()
            assert config.lead_minutes == 10
            assert config.tick_seconds == 30
            assert config.timezone == "Europe/London"
            assert config.fire_missed_reminders is True

    def test_invalid_timezone_falls_back(self):
        with patch.dict("os.environ", {"SCHEDULE_TIMEZONE": "Not/AZone"}):
            config = ReminderConfig.from_env()
            assert config.timezone == "UTC"

    def test_validate_timezone(self):
        assert validate_timezone("America/Los_Angeles")
        assert not validate_timezone("Invalid/Timezone")


class TestParseDueAt:
    """Test reading stored dueAt values."""

    def test_iso_with_z(self):
        assert parse_due_at("2026-10-19T08:55:00Z") == datetime(2026, 10, 19, 8, 55, tzinfo=pytz.UTC)

    def test_iso_with_offset(self):
        parsed = parse_due_at("2026-10-19T10:55:00+02:00")
        assert parsed == datetime(2026, 10, 19, 8, 55, tzinfo=pytz.UTC)

    def test_naive_read_as_utc(self):
        assert parse_due_at("2026-10-19T08:55:00") == datetime(2026, 10, 19, 8, 55, tzinfo=pytz.UTC)

    def test_epoch_milliseconds(self):
        due = datetime(2026, 10, 19, 8, 55, tzinfo=pytz.UTC)
        assert parse_due_at(int(due.timestamp() * 1000)) == due

    def test_datetime_passthrough(self):
        due = datetime(2026, 10, 19, 10, 55, tzinfo=timezone(timedelta(hours=2)))
        assert parse_due_at(due) == datetime(2026, 10, 19, 8, 55, tzinfo=pytz.UTC)

    @pytest.mark.parametrize("value", [None, "", "   ", "tomorrow", True, [], {}])
    def test_malformed(self, value):
        assert parse_due_at(value) is None
