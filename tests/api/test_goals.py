"""Tests for goal endpoints"""
GOAL_ID = "3c1d4e5f-6a7b-4c8d-9e0f-a1b2c3d4e5f6"


def _store_goal(user_id, document):
    return {**document, "id": GOAL_ID, "user_id": user_id, "status": "active", "completed_at": None}


def test_create_goal(client, mock_queries, test_user, auth_headers):
    mock_queries.create_goal.side_effect = _store_goal
    mock_queries.get_user_by_id.return_value = test_user
    mock_queries.add_user_xp.return_value = 50

    response = client.post("/api/goals", json={
        "title": "Meditate 30 times",
        "target_value": 30,
        "unit": "sessions",
        "category": "health",
        "milestones": [{"title": "First week", "target_value": 7}],
    }, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Goal created! +50 XP"
    assert body["data"]["goal"]["start_date"] == "2024-03-15"
    assert body["data"]["goal"]["milestones"][0]["xp_reward"] == 25


def test_create_goal_invalid_category_is_422(client, auth_headers):
    response = client.post("/api/goals", json={"title": "X", "target_value": 3, "category": "space"}, headers=auth_headers)
    assert response.status_code == 422


def test_list_goals_sorting_params(client, mock_queries, auth_headers, make_goal):
    mock_queries.list_goals.return_value = ([make_goal()], 1)
    mock_queries.get_user_goals.return_value = [make_goal()]

    response = client.get("/api/goals?status=active&sort_by=target_date&sort_order=asc", headers=auth_headers)

    assert response.status_code == 200
    kwargs = mock_queries.list_goals.call_args.kwargs
    assert kwargs["sort_by"] == "target_date"
    assert kwargs["sort_order"] == "asc"
    assert response.json()["data"]["stats"]["active"] == 1


def test_list_goals_bad_sort_key(client, auth_headers):
    response = client.get("/api/goals?sort_by=password", headers=auth_headers)
    assert response.status_code == 422


def test_goal_stats_route_not_shadowed(client, mock_queries, auth_headers, make_goal):
    mock_queries.get_user_goals.return_value = [make_goal(), make_goal(status="completed")]

    response = client.get("/api/goals/stats/overview", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["completion_rate"] == 50


def test_progress_completes_goal(client, mock_queries, test_user, auth_headers, make_goal):
    goal = make_goal(id=GOAL_ID)
    mock_queries.get_goal_by_id.return_value = goal
    mock_queries.update_goal.side_effect = lambda goal_id, fields: {**goal, **fields}
    mock_queries.get_user_by_id.return_value = test_user
    mock_queries.add_user_xp.return_value = 200

    response = client.patch(f"/api/goals/{GOAL_ID}/progress", json={"current_value": 100}, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Goal completed! 🎉"
    assert body["data"]["goal"]["status"] == "completed"
    assert body["data"]["xp_earned"] == 200


def test_progress_on_completed_goal_is_409(client, mock_queries, auth_headers, make_goal):
    mock_queries.get_goal_by_id.return_value = make_goal(id=GOAL_ID, status="completed")

    response = client.patch(f"/api/goals/{GOAL_ID}/progress", json={"current_value": 5}, headers=auth_headers)

    assert response.status_code == 409


def test_complete_milestone(client, mock_queries, test_user, auth_headers, make_goal):
    goal = make_goal(id=GOAL_ID, milestones=[
        {"id": "m1", "title": "Start", "target_value": None, "completed": False, "completed_at": None, "xp_reward": 25},
    ])
    mock_queries.get_goal_by_id.return_value = goal
    mock_queries.update_goal.side_effect = lambda goal_id, fields: {**goal, **fields}
    mock_queries.get_user_by_id.return_value = test_user
    mock_queries.add_user_xp.return_value = 25

    response = client.patch(f"/api/goals/{GOAL_ID}/milestones/m1", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Milestone completed!"


def test_missing_goal_is_404(client, auth_headers):
    response = client.get(f"/api/goals/{GOAL_ID}", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Goal not found."


def test_delete_goal(client, mock_queries, auth_headers, make_goal):
    mock_queries.get_goal_by_id.return_value = make_goal(id=GOAL_ID)

    response = client.delete(f"/api/goals/{GOAL_ID}", headers=auth_headers)

    assert response.status_code == 200
    mock_queries.delete_goal.assert_called_once_with(GOAL_ID)
