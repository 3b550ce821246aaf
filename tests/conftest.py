"""Global test fixtures and utilities for LUMIN tests"""
import os

# Must be set before lumin.config is imported anywhere
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENABLE_SENTRY", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-123")

import random
import pytest
from unittest.mock import AsyncMock, patch
from datetime import datetime, date, timezone
from uuid import uuid4

from lumin.utils.clock import FixedClock


# ============================================================================
# Clock Fixtures
# ============================================================================

@pytest.fixture
def fixed_now():
    """Mid-morning UTC instant used as 'now' across tests"""
    return datetime(2024, 3, 15, 10, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    return FixedClock(fixed_now)


@pytest.fixture
def rng():
    """Seeded RNG for deterministic challenge generation"""
    return random.Random(42)


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "6f1c2b3a-4d5e-4f60-8a7b-9c0d1e2f3a4b"


@pytest.fixture
def test_user(test_user_id):
    """Standard stored user row (without password hash)"""
    return {
        "id": test_user_id,
        "name": "Test User",
        "email": "test@example.com",
        "xp": 0,
        "level": 1,
        "streak": 0,
        "last_entry_date": None,
        "badges": [],
        "settings": {
            "email_notifications": True,
            "daily_reminder": True,
            "reminder_time": "09:00",
            "theme": "system",
            "language": "en",
        },
        "avatar": None,
        "bio": None,
        "location": None,
        "occupation": None,
        "date_of_birth": None,
        "created_at": datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
    }


# ============================================================================
# Record Factories
# ============================================================================

@pytest.fixture
def make_entry(test_user_id, fixed_now):
    """Factory for stored entry rows"""
    def _make(**overrides):
        entry = {
            "id": str(uuid4()),
            "user_id": test_user_id,
            "mood": "happy",
            "mood_emoji": "😊",
            "mood_intensity": 7,
            "title": None,
            "notes": "Today was a good day with friends",
            "tags": [],
            "category": "personal",
            "location": None,
            "is_private": True,
            "word_count": 7,
            "entry_date": fixed_now,
            "entry_day": fixed_now.date(),
            "xp_awarded": 50,
            "created_at": fixed_now,
            "updated_at": fixed_now,
        }
        entry.update(overrides)
        return entry
    return _make


@pytest.fixture
def make_goal(test_user_id, fixed_now):
    """Factory for stored goal rows"""
    def _make(**overrides):
        goal = {
            "id": str(uuid4()),
            "user_id": test_user_id,
            "title": "Run 100 km",
            "description": None,
            "metric": "distance",
            "target_value": 100.0,
            "current_value": 0.0,
            "unit": "km",
            "category": "health",
            "priority": "medium",
            "status": "active",
            "start_date": date(2024, 3, 1),
            "target_date": date(2024, 6, 1),
            "completed_at": None,
            "milestones": [],
            "xp_reward": 200,
            "tags": [],
            "notes": None,
            "created_at": fixed_now,
            "updated_at": fixed_now,
        }
        goal.update(overrides)
        return goal
    return _make


@pytest.fixture
def fake_completion():
    """AI transport returning a canned reply"""
    return AsyncMock(return_value='["Prompt one?", "Prompt two?", "Prompt three?"]')


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def mock_queries():
    """
    Replace every query function with an AsyncMock returning None.

    Services look functions up on lumin.db.queries at call time, so tests
    configure return values on the yielded module.
    """
    from lumin.db import queries

    with patch.multiple(queries, **{name: AsyncMock(return_value=None) for name in queries.__all__}):
        yield queries
