"""Unit tests for GoalService"""
import pytest
from datetime import date

from lumin.exceptions import ConflictError, RecordNotFoundError, ValidationError
from lumin.models.goal import GoalCreate, GoalFilters, GoalUpdate, MilestoneCreate
from lumin.services.goal_service import GoalService

GOAL_ID = "3c1d4e5f-6a7b-4c8d-9e0f-a1b2c3d4e5f6"


@pytest.fixture
def service(clock):
    return GoalService(clock)


@pytest.fixture
def xp_store(mock_queries, test_user):
    """Make add_user_xp accumulate onto the test user's XP"""
    state = {"xp": test_user["xp"]}

    def _add(user_id, amount):
        state["xp"] += amount
        return state["xp"]

    mock_queries.get_user_by_id.return_value = test_user
    mock_queries.add_user_xp.side_effect = _add
    return state


# ============================================================================
# Create
# ============================================================================

@pytest.mark.asyncio
async def test_create_goal_awards_xp(service, mock_queries, xp_store, test_user_id):
    """Test goal creation grants 50 XP and sanitizes text"""
    mock_queries.create_goal.side_effect = lambda user_id, doc: {
        **doc, "id": GOAL_ID, "user_id": user_id, "status": "active", "completed_at": None,
    }
    data = GoalCreate(
        title="<b>Read</b> 12 books",
        target_value=12,
        unit="books",
        category="learning",
        milestones=[MilestoneCreate(title="First book", target_value=1)],
    )

    result = await service.create_goal(test_user_id, data)

    assert result["xp_earned"] == 50
    assert result["goal"]["title"] == "Read 12 books"
    assert result["goal"]["start_date"] == date(2024, 3, 15)
    assert result["goal"]["milestones"][0]["completed"] is False
    assert result["goal"]["progress_percentage"] == 0
    assert xp_store["xp"] == 50


@pytest.mark.asyncio
async def test_create_goal_already_reached_rejected(service, mock_queries, test_user_id):
    with pytest.raises(ValidationError):
        await service.create_goal(test_user_id, GoalCreate(title="Done", target_value=5, current_value=5))
    mock_queries.create_goal.assert_not_called()


@pytest.mark.asyncio
async def test_create_goal_target_before_start_rejected(service, mock_queries, test_user_id):
    data = GoalCreate(title="Late", target_value=5, target_date=date(2024, 1, 1))

    with pytest.raises(ValidationError):
        await service.create_goal(test_user_id, data)


# ============================================================================
# Progress
# ============================================================================

@pytest.mark.asyncio
async def test_progress_completes_milestones_and_goal(service, mock_queries, xp_store, test_user_id, make_goal):
    """Test reaching the target completes the goal and reached milestones"""
    goal = make_goal(id=GOAL_ID, milestones=[
        {"id": "m1", "title": "Half", "target_value": 50, "completed": False, "completed_at": None, "xp_reward": 25},
        {"id": "m2", "title": "Manual", "target_value": None, "completed": False, "completed_at": None, "xp_reward": 25},
    ])
    mock_queries.get_goal_by_id.return_value = goal
    mock_queries.update_goal.side_effect = lambda goal_id, fields: {**goal, **fields}

    result = await service.update_progress(test_user_id, GOAL_ID, 100)

    assert result["goal_completed"] is True
    assert result["goal"]["status"] == "completed"
    assert result["goal"]["progress_percentage"] == 100
    assert [m["id"] for m in result["milestones_completed"]] == ["m1"]
    assert result["xp_earned"] == 25 + 200
    assert xp_store["xp"] == 225
    assert result["leveled_up"] is True


@pytest.mark.asyncio
async def test_progress_partial_no_xp(service, mock_queries, test_user_id, make_goal):
    goal = make_goal(id=GOAL_ID)
    mock_queries.get_goal_by_id.return_value = goal
    mock_queries.update_goal.side_effect = lambda goal_id, fields: {**goal, **fields}

    result = await service.update_progress(test_user_id, GOAL_ID, 40)

    assert result["goal_completed"] is False
    assert result["xp_earned"] == 0
    assert result["goal"]["progress_percentage"] == 40
    mock_queries.add_user_xp.assert_not_called()


@pytest.mark.asyncio
async def test_progress_on_completed_goal_conflicts(service, mock_queries, test_user_id, make_goal):
    """Test a completed goal cannot be completed twice"""
    mock_queries.get_goal_by_id.return_value = make_goal(id=GOAL_ID, status="completed", current_value=100)

    with pytest.raises(ConflictError):
        await service.update_progress(test_user_id, GOAL_ID, 120)
    mock_queries.update_goal.assert_not_called()


@pytest.mark.asyncio
async def test_progress_negative_rejected(service, test_user_id, mock_queries):
    with pytest.raises(ValidationError):
        await service.update_progress(test_user_id, GOAL_ID, -1)


@pytest.mark.asyncio
async def test_paused_goal_progress_does_not_complete(service, mock_queries, test_user_id, make_goal):
    goal = make_goal(id=GOAL_ID, status="paused")
    mock_queries.get_goal_by_id.return_value = goal
    mock_queries.update_goal.side_effect = lambda goal_id, fields: {**goal, **fields}

    result = await service.update_progress(test_user_id, GOAL_ID, 150)

    assert result["goal_completed"] is False
    assert result["goal"]["status"] == "paused"


# ============================================================================
# Milestones
# ============================================================================

@pytest.mark.asyncio
async def test_complete_milestone(service, mock_queries, xp_store, test_user_id, make_goal):
    goal = make_goal(id=GOAL_ID, milestones=[
        {"id": "m1", "title": "Start", "target_value": None, "completed": False, "completed_at": None, "xp_reward": 30},
    ])
    mock_queries.get_goal_by_id.return_value = goal
    mock_queries.update_goal.side_effect = lambda goal_id, fields: {**goal, **fields}

    result = await service.complete_milestone(test_user_id, GOAL_ID, "m1")

    assert result["milestone"]["completed"] is True
    assert result["xp_earned"] == 30
    assert result["goal"]["milestone_progress"] == 100
    assert xp_store["xp"] == 30


@pytest.mark.asyncio
async def test_complete_milestone_twice_conflicts(service, mock_queries, test_user_id, make_goal):
    mock_queries.get_goal_by_id.return_value = make_goal(id=GOAL_ID, milestones=[
        {"id": "m1", "title": "Start", "completed": True, "completed_at": "2024-03-10T00:00:00", "xp_reward": 30},
    ])

    with pytest.raises(ConflictError):
        await service.complete_milestone(test_user_id, GOAL_ID, "m1")


@pytest.mark.asyncio
async def test_complete_unknown_milestone(service, mock_queries, test_user_id, make_goal):
    mock_queries.get_goal_by_id.return_value = make_goal(id=GOAL_ID)

    with pytest.raises(RecordNotFoundError):
        await service.complete_milestone(test_user_id, GOAL_ID, "missing")


# ============================================================================
# Update / List / Stats
# ============================================================================

@pytest.mark.asyncio
async def test_update_cannot_set_completed(service, mock_queries, test_user_id, make_goal):
    mock_queries.get_goal_by_id.return_value = make_goal(id=GOAL_ID)

    with pytest.raises(ValidationError):
        await service.update_goal(test_user_id, GOAL_ID, GoalUpdate(status="completed"))


@pytest.mark.asyncio
async def test_completed_goal_cannot_be_reopened(service, mock_queries, xp_store, test_user_id, make_goal, fixed_now):
    """Test reopening a completed goal is refused and pays no XP"""
    goal = make_goal(id=GOAL_ID, status="completed", current_value=100.0, completed_at=fixed_now)
    mock_queries.get_goal_by_id.return_value = goal

    for _ in range(3):
        with pytest.raises(ConflictError):
            await service.update_goal(test_user_id, GOAL_ID, GoalUpdate(status="active"))

    mock_queries.update_goal.assert_not_called()
    assert xp_store["xp"] == 0


@pytest.mark.asyncio
async def test_editing_completed_goal_pays_no_xp(service, mock_queries, xp_store, test_user_id, make_goal, fixed_now):
    goal = make_goal(id=GOAL_ID, status="completed", current_value=100.0, completed_at=fixed_now)
    mock_queries.get_goal_by_id.return_value = goal
    mock_queries.update_goal.side_effect = lambda goal_id, fields: {**goal, **fields}

    result = await service.update_goal(test_user_id, GOAL_ID, GoalUpdate(title="Ran 100 km"))

    assert result["xp_earned"] == 0
    assert result["goal"]["status"] == "completed"
    assert xp_store["xp"] == 0


@pytest.mark.asyncio
async def test_create_goal_entity_heavy_title_fits(service, mock_queries, xp_store, test_user_id):
    """Test a title at the length limit is stored no longer than validated"""
    mock_queries.create_goal.side_effect = lambda user_id, doc: {
        **doc, "id": GOAL_ID, "user_id": user_id, "status": "active", "completed_at": None,
    }
    title = ("Tom & Jerry's " * 7).strip()
    data = GoalCreate(
        title=title,
        description="Q&A \"notes\" & <b>more</b>",
        target_value=10,
        unit="R&D's",
        milestones=[MilestoneCreate(title="Cat & mouse's " * 7)],
    )

    await service.create_goal(test_user_id, data)

    stored = mock_queries.create_goal.call_args.args[1]
    assert stored["title"] == title
    assert len(stored["title"]) <= 100
    assert stored["unit"] == "R&D's"
    assert len(stored["milestones"][0]["title"]) <= 100
    assert stored["description"] == "Q&A \"notes\" & more"


@pytest.mark.asyncio
async def test_create_goal_markup_only_title_rejected(service, mock_queries, test_user_id):
    with pytest.raises(ValidationError):
        await service.create_goal(test_user_id, GoalCreate(title="<b></b>", target_value=5))
    mock_queries.create_goal.assert_not_called()


@pytest.mark.asyncio
async def test_lowering_target_completes_goal(service, mock_queries, xp_store, test_user_id, make_goal):
    """Test a target lowered to the current value completes the goal"""
    goal = make_goal(id=GOAL_ID, current_value=60.0)
    mock_queries.get_goal_by_id.return_value = goal
    mock_queries.update_goal.side_effect = lambda goal_id, fields: {**goal, **fields}

    result = await service.update_goal(test_user_id, GOAL_ID, GoalUpdate(target_value=50))

    assert result["goal"]["status"] == "completed"
    assert result["xp_earned"] == 200


@pytest.mark.asyncio
async def test_list_goals_with_status_counts(service, mock_queries, test_user_id, make_goal):
    goals = [make_goal(), make_goal(status="completed"), make_goal(status="paused")]
    mock_queries.list_goals.return_value = (goals[:1], 1)
    mock_queries.get_user_goals.return_value = goals

    result = await service.list_goals(test_user_id, GoalFilters(status="active"), sort_by="priority", sort_order="asc")

    assert result["stats"] == {"total": 3, "active": 1, "completed": 1, "paused": 1, "abandoned": 0}
    assert result["pagination"]["total_pages"] == 1
    assert mock_queries.list_goals.call_args.kwargs["sort_by"] == "priority"


@pytest.mark.asyncio
async def test_goal_stats(service, mock_queries, test_user_id, make_goal):
    mock_queries.get_user_goals.return_value = [
        make_goal(current_value=50.0),
        make_goal(current_value=10.0, target_date=date(2024, 3, 1)),
        make_goal(status="completed", current_value=100.0, category="career"),
        make_goal(status="abandoned"),
    ]

    stats = await service.get_stats(test_user_id)

    assert stats["total"] == 4
    assert stats["by_status"]["completed"] == 1
    assert stats["by_category"]["career"] == {"total": 1, "completed": 1}
    assert stats["completion_rate"] == 25
    assert stats["avg_progress"] == 30
    assert stats["overdue"] == 1
