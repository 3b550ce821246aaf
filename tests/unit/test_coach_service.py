"""Unit tests for CoachService context building"""
import pytest
from datetime import date
from unittest.mock import AsyncMock

from lumin.exceptions import RecordNotFoundError, ValidationError
from lumin.services.coach_service import COACH_PROMPTS, CoachService, time_of_day

GOAL_ID = "3c1d4e5f-6a7b-4c8d-9e0f-a1b2c3d4e5f6"


@pytest.fixture
def ai():
    ai = AsyncMock()
    ai.generate_smart_prompts.return_value = {"success": True, "prompts": ["a", "b", "c"]}
    ai.analyze_mood.return_value = {"success": True, "analysis": {"summary": "ok"}}
    ai.plan_goal.return_value = {"success": True, "plan": {"tips": []}}
    ai.suggest_habits.return_value = {"success": True, "suggestions": {"habits": []}}
    ai.generate_motivation.return_value = {"success": True, "motivation": {"message": "Go"}}
    ai.chat_with_ai.return_value = {"success": True, "message": "Hi there"}
    return ai


@pytest.fixture
def service(clock, ai):
    return CoachService(clock, ai)


@pytest.fixture
def user_data(mock_queries, test_user, make_entry, make_goal):
    mock_queries.get_user_by_id.return_value = {**test_user, "xp": 300, "level": 3}
    mock_queries.get_recent_entries.return_value = [make_entry(mood="anxious"), make_entry(mood="happy")]
    mock_queries.get_user_goals.return_value = [make_goal()]
    mock_queries.get_streak.return_value = {
        "current_streak": 5, "longest_streak": 5, "last_entry_date": date(2024, 3, 15),
    }
    mock_queries.count_entries.return_value = 20
    return mock_queries


def test_time_of_day():
    assert time_of_day(6) == "morning"
    assert time_of_day(13) == "afternoon"
    assert time_of_day(18) == "evening"
    assert time_of_day(23) == "night"
    assert time_of_day(3) == "night"


def test_static_prompts(service):
    prompts = service.get_prompts()
    assert len(prompts) == 6
    assert {p["category"] for p in prompts} >= {"mood", "goals", "habits", "motivation"}
    prompts[0]["title"] = "changed"
    assert COACH_PROMPTS[0]["title"] != "changed"


@pytest.mark.asyncio
async def test_smart_prompts_context(service, ai, user_data, test_user_id):
    result = await service.smart_prompts(test_user_id)

    context = ai.generate_smart_prompts.call_args.args[0]
    assert context == {
        "recent_moods": ["anxious", "happy"],
        "goals_count": 1,
        "time_of_day": "morning",
        "streak": 5,
    }
    assert result["prompts"] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_analyze_mood_requires_entries(service, ai, mock_queries, test_user_id):
    mock_queries.get_entries_between.return_value = []

    with pytest.raises(ValidationError) as exc_info:
        await service.analyze_mood(test_user_id)

    assert "No recent entries" in exc_info.value.user_message
    ai.analyze_mood.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_mood_distribution(service, ai, mock_queries, test_user_id, make_entry):
    mock_queries.get_entries_between.return_value = [
        make_entry(mood="happy"), make_entry(mood="happy"), make_entry(mood="sad"),
    ]

    result = await service.analyze_mood(test_user_id)

    weekly = ai.analyze_mood.call_args.args[0]
    assert weekly["mood_distribution"] == {"happy": 2, "sad": 1}
    assert len(weekly["entries"]) == 3
    assert result["entries_analyzed"] == 3
    assert result["date_range"] == {"from": "2024-03-09", "to": "2024-03-15"}


@pytest.mark.asyncio
async def test_plan_goal_from_idea(service, ai, mock_queries, test_user_id):
    result = await service.plan_goal(test_user_id, goal_idea="Learn Spanish", timeframe="6 months")

    context = ai.plan_goal.call_args.args[0]
    assert context["title"] == "Learn Spanish"
    assert context["target_date"] == "6 months"
    assert result["original_idea"] == "Learn Spanish"


@pytest.mark.asyncio
async def test_plan_goal_from_existing_goal(service, ai, mock_queries, test_user_id, make_goal):
    mock_queries.get_goal_by_id.return_value = make_goal(id=GOAL_ID)

    await service.plan_goal(test_user_id, goal_id=GOAL_ID)

    context = ai.plan_goal.call_args.args[0]
    assert context["title"] == "Run 100 km"
    assert context["target_date"] == "2024-06-01"


@pytest.mark.asyncio
async def test_plan_goal_missing_goal(service, mock_queries, test_user_id):
    with pytest.raises(RecordNotFoundError):
        await service.plan_goal(test_user_id, goal_id=GOAL_ID)


@pytest.mark.asyncio
async def test_plan_goal_requires_input(service, test_user_id):
    with pytest.raises(ValidationError):
        await service.plan_goal(test_user_id)


@pytest.mark.asyncio
async def test_suggest_habits(service, ai, user_data, test_user_id):
    result = await service.suggest_habits(test_user_id, current_habits=["Morning run"])

    data = ai.suggest_habits.call_args.args[0]
    assert data["current_habits"] == ["Morning run"]
    assert data["goals"] == [{"title": "Run 100 km"}]
    assert result["based_on"] == {"goals_count": 1, "entries_analyzed": 2}


@pytest.mark.asyncio
async def test_motivate_context(service, ai, user_data, test_user_id):
    await service.motivate(test_user_id, situation="Tough week at work")

    context = ai.generate_motivation.call_args.args[0]
    assert context["mood"] == "anxious"
    assert context["streak"] == 5
    assert context["situation"] == "Tough week at work"
    assert context["recent_progress"].startswith("level 3")


@pytest.mark.asyncio
async def test_chat_trims_history(service, ai, user_data, test_user_id):
    history = [{"role": "user", "content": f"message {i}"} for i in range(15)]

    result = await service.chat(test_user_id, "  What next?  ", history)

    messages, user_context = ai.chat_with_ai.call_args.args
    assert len(messages) == 11
    assert messages[0]["content"] == "message 5"
    assert messages[-1] == {"role": "user", "content": "What next?"}
    assert user_context["total_entries"] == 20
    assert user_context["recent_mood"] == "anxious"
    assert result["message"] == "Hi there"


@pytest.mark.asyncio
async def test_chat_empty_message(service, ai, test_user_id):
    with pytest.raises(ValidationError):
        await service.chat(test_user_id, "   ")
    ai.chat_with_ai.assert_not_called()
