"""Tests for request models and derived values"""
import pytest
from datetime import date, datetime, timezone
from pydantic import ValidationError

from lumin.models.entry import EntryCreate, EntryUpdate, count_words, entry_document
from lumin.models.goal import GoalCreate, goal_summary, progress_percentage
from lumin.models.user import SettingsUpdate, UserRegistration, UserSettings, public_user


class TestUserModels:

    def test_registration_normalizes_email(self):
        data = UserRegistration(name="  Ana ", email=" Ana@Example.COM ", password="secret1")

        assert data.name == "Ana"
        assert data.email == "ana@example.com"

    def test_registration_rejects_bad_email(self):
        with pytest.raises(ValidationError):
            UserRegistration(name="Ana", email="not-an-email", password="secret1")

    def test_registration_rejects_short_password(self):
        with pytest.raises(ValidationError):
            UserRegistration(name="Ana", email="ana@example.com", password="123")

    def test_settings_reminder_time_format(self):
        assert UserSettings(reminder_time="21:30").reminder_time == "21:30"

        with pytest.raises(ValidationError):
            UserSettings(reminder_time="25:00")
        with pytest.raises(ValidationError):
            SettingsUpdate(reminder_time="9am")

    def test_public_user_hides_password_hash(self, test_user):
        user = {**test_user, "password_hash": "hash"}
        assert "password_hash" not in public_user(user)


class TestEntryModels:

    def test_notes_minimum_length(self):
        with pytest.raises(ValidationError):
            EntryCreate(mood="happy", notes="   short   ")

    def test_unknown_mood_rejected(self):
        with pytest.raises(ValidationError):
            EntryCreate(mood="ecstatic", notes="A long enough note")

    def test_tags_normalized(self):
        data = EntryCreate(mood="happy", notes="A long enough note", tags=[" Work", "work", "", "Family"])
        assert data.tags == ["work", "family"]

    def test_intensity_bounds(self):
        with pytest.raises(ValidationError):
            EntryCreate(mood="happy", notes="A long enough note", mood_intensity=11)

    def test_update_allows_partial(self):
        data = EntryUpdate(mood="sad")
        assert data.model_dump(exclude_unset=True) == {"mood": "sad"}

    def test_entry_document(self):
        now = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)
        data = EntryCreate(mood="happy", notes="one two three four five", title="Hi")

        doc = entry_document(data, now, now.date())

        assert doc["mood_emoji"] == "😊"
        assert doc["word_count"] == 5
        assert doc["entry_day"] == date(2024, 3, 15)
        assert doc["location"] is None

    def test_count_words(self):
        assert count_words("  a  b\nc\td ") == 4


class TestGoalModels:

    def test_target_must_be_positive(self):
        with pytest.raises(ValidationError):
            GoalCreate(title="Run", target_value=0)

    def test_progress_percentage_capped(self):
        assert progress_percentage(50, 100) == 50
        assert progress_percentage(150, 100) == 100
        assert progress_percentage(5, 0) == 0

    def test_goal_summary_overdue(self, make_goal):
        goal = make_goal(current_value=25.0, target_date=date(2024, 3, 10))

        summary = goal_summary(goal, date(2024, 3, 15))

        assert summary["progress_percentage"] == 25
        assert summary["days_remaining"] == -5
        assert summary["is_overdue"] is True

    def test_goal_summary_completed_never_overdue(self, make_goal):
        goal = make_goal(status="completed", target_date=date(2024, 3, 10))
        assert goal_summary(goal, date(2024, 3, 15))["is_overdue"] is False

    def test_goal_summary_milestone_progress(self, make_goal):
        goal = make_goal(milestones=[
            {"id": "m1", "completed": True},
            {"id": "m2", "completed": False},
            {"id": "m3", "completed": False},
            {"id": "m4", "completed": True},
        ])
        assert goal_summary(goal, date(2024, 3, 15))["milestone_progress"] == 50
