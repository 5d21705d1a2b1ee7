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

"""Tests for the schedule store."""

import json
import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.models import ReminderRecord
from reminders.store import ScheduleStore, normalize_schedule_items
from timetable import ScheduleEntry


@pytest.fixture
def mock_pool():
    pool = MagicMock()
    pool.execute = AsyncMock()
    pool.fetch = AsyncMock(return_value=[])
    pool.fetchrow = AsyncMock(return_value=None)
    return pool


@pytest.fixture
def store(mock_pool):
    return ScheduleStore(mock_pool)


class TestNormalizeScheduleItems:
    def test_flat_list(self):
        items = [{"subject": "Math"}]
        assert normalize_schedule_items(items) == items

    def test_wrapped_items(self):
        items = [{"subject": "Math"}]
        assert normalize_schedule_items({"items": items}) == items

    @pytest.mark.parametrize("raw", [None, "Math", 42, {"other": []}, {"items": "x"}])
    def test_unusable_shapes(self, raw):
        assert normalize_schedule_items(raw) == []

    def test_non_dict_items_skipped(self):
        assert normalize_schedule_items([{"subject": "Math"}, "junk", None]) == [{"subject": "Math"}]


class TestListUserStates:
    """Test the scheduler-facing read of every user."""

    @pytest.mark.asyncio
    async def test_both_schedule_shapes(self, store, mock_pool):
        mock_pool.fetch.return_value = [
            {
                "user_id": 1,
                "data": json.dumps(
                    {"schedule": [{"subject": "Math", "time": "9:00 AM", "day": "Mon"}]}
                ),
            },
            {
                "user_id": 2,
                "data": {
                    "schedule": {"items": [{"course": "Bio", "start": "1:00 PM"}]},
                    "reminders": [{"text": "x", "dueAt": "2026-10-19T08:55:00Z"}],
                },
            },
        ]

        states = await store.list_user_states()

        assert [s.user_id for s in states] == [1, 2]
        assert states[0].schedule == [ScheduleEntry(subject="Math", time="9:00 AM", day="Mon")]
        assert states[0].reminders == []
        assert states[1].schedule == [ScheduleEntry(subject="Bio", time="1:00 PM", day="Daily")]
        assert states[1].reminders == [{"text": "x", "dueAt": "2026-10-19T08:55:00Z"}]

    @pytest.mark.asyncio
    async def test_empty_or_broken_documents(self, store, mock_pool):
        mock_pool.fetch.return_value = [
            {"user_id": 1, "data": None},
            {"user_id": 2, "data": "{not json"},
            {"user_id": 3, "data": {"reminders": "oops"}},
        ]

        states = await store.list_user_states()

        assert len(states) == 3
        for state in states:
            assert state.schedule == []
            assert state.reminders == []


class TestWrites:
    @pytest.mark.asyncio
    async def test_ensure_schema(self, store, mock_pool):
        await store.ensure_schema()
        assert "CREATE TABLE IF NOT EXISTS user_schedules" in mock_pool.execute.call_args[0][0]

    @pytest.mark.asyncio
    async def test_save_schedule_merges(self, store, mock_pool):
        await store.save_schedule(5, [ScheduleEntry(subject="Math", time="9:00 AM", day="Mon")])

        sql, user_id, payload = mock_pool.execute.call_args[0]
        assert "ON CONFLICT (user_id)" in sql
        assert "user_schedules.data || EXCLUDED.data" in sql
        assert user_id == 5
        assert json.loads(payload) == {
            "schedule": [{"subject": "Math", "time": "9:00 AM", "day": "Mon"}]
        }

    @pytest.mark.asyncio
    async def test_save_reminders(self, store, mock_pool):
        remaining = [{"text": "later", "dueAt": "2026-10-19T10:00:00+00:00"}]
        await store.save_reminders(5, remaining)

        _, user_id, payload = mock_pool.execute.call_args[0]
        assert user_id == 5
        assert json.loads(payload) == {"reminders": remaining}

    @pytest.mark.asyncio
    async def test_add_reminder_appends(self, store, mock_pool):
        due = datetime(2026, 10, 19, 10, 0, tzinfo=pytz.UTC)
        await store.add_reminder(5, ReminderRecord(text="call mom", due_at=due))

        sql, user_id, payload = mock_pool.execute.call_args[0]
        assert "jsonb_set" in sql
        assert user_id == 5
        assert json.loads(payload) == {"text": "call mom", "dueAt": "2026-10-19T10:00:00+00:00"}

    @pytest.mark.asyncio
    async def test_clear_reminders_counts(self, store, mock_pool):
        mock_pool.fetchrow.return_value = {"data": {"reminders": [{"text": "a"}, {"text": "b"}]}}

        removed = await store.clear_reminders(5)

        assert removed == 2
        _, _, payload = mock_pool.execute.call_args[0]
        assert json.loads(payload) == {"reminders": []}

    @pytest.mark.asyncio
    async def test_clear_reminders_nothing_pending(self, store, mock_pool):
        assert await store.clear_reminders(5) == 0
        mock_pool.execute.assert_not_called()


class TestReads:
    @pytest.mark.asyncio
    async def test_get_schedule_missing_user(self, store):
        assert await store.get_schedule(5) == []

    @pytest.mark.asyncio
    async def test_get_schedule_keeps_location(self, store, mock_pool):
        mock_pool.fetchrow.return_value = {
            "data": json.dumps({"schedule": [{"title": "Art", "time": "3:00 PM", "room": "A1"}]})
        }

        schedule = await store.get_schedule(5)

        assert schedule == [ScheduleEntry(subject="Art", time="3:00 PM", day="Daily", location="A1")]
