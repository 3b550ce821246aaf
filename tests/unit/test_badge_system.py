"""Unit tests for Badge System (lumin/gamification/badge_system.py)"""
import pytest
from unittest.mock import AsyncMock, patch
from datetime import datetime, timezone

from lumin.gamification.badge_system import BADGES, find_new_badges, check_and_award_badges


def test_badge_catalogue():
    """Test the nine badges are defined with unique names"""
    names = [badge.name for badge in BADGES]
    assert len(names) == 9
    assert len(set(names)) == 9


def test_first_entry_badge():
    new = find_new_badges(set(), entry_count=1, streak=1, level=1)
    assert [b.name for b in new] == ["first-entry"]


def test_already_earned_badges_skipped():
    new = find_new_badges({"first-entry", "fire-starter"}, entry_count=10, streak=3, level=1)
    assert [b.name for b in new] == ["consistent-writer"]


def test_level_badges():
    new = find_new_badges(set(), entry_count=0, streak=0, level=10)
    assert {b.name for b in new} == {"level-5", "level-10"}


@pytest.mark.asyncio
async def test_check_and_award_badges_persists_records(test_user):
    """Test new badges are appended with their XP value"""
    now = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)

    with patch('lumin.gamification.badge_system.queries.add_user_badges', AsyncMock()) as mock_add:
        records = await check_and_award_badges(test_user, entry_count=1, streak=3, level=1, now=now)

        mock_add.assert_called_once()
        assert {r["name"] for r in records} == {"first-entry", "fire-starter"}
        assert sum(r["xp_awarded"] for r in records) == 75
        assert records[0]["earned_at"] == now.isoformat()


@pytest.mark.asyncio
async def test_check_and_award_badges_nothing_new(test_user):
    user = {**test_user, "badges": [{"name": "first-entry"}]}

    with patch('lumin.gamification.badge_system.queries.add_user_badges', AsyncMock()) as mock_add:
        records = await check_and_award_badges(user, entry_count=2, streak=1, level=1, now=datetime.now(timezone.utc))

        mock_add.assert_not_called()
        assert records == []
