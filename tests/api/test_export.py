"""Tests for data export endpoints"""
import csv
import io
from datetime import date


def test_export_entries_json(client, mock_queries, auth_headers, make_entry):
    mock_queries.get_user_entries.return_value = [make_entry(), make_entry(entry_day=date(2024, 3, 14))]

    response = client.get("/api/export/entries/json", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["count"] == 2
    assert data["export_date"].startswith("2024-03-15T10:30")
    assert "user_id" not in data["entries"][0]
    assert data["entries"][1]["entry_day"] == "2024-03-14"


def test_export_entries_csv(client, mock_queries, auth_headers, make_entry):
    """Test CSV rows quote notes containing commas and quotes"""
    mock_queries.get_user_entries.return_value = [
        make_entry(title="Busy, busy", notes='She said "hello", then left', tags=["work", "family"]),
    ]

    response = client.get("/api/export/entries/csv", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="lumin-entries-20240315-103000.csv"' in response.headers["content-disposition"]
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert len(rows) == 1
    assert rows[0]["Date"] == "2024-03-15"
    assert rows[0]["Title"] == "Busy, busy"
    assert rows[0]["Notes"] == 'She said "hello", then left'
    assert rows[0]["Tags"] == "work; family"
    assert rows[0]["Mood"] == "happy"


def test_export_entries_csv_empty_is_404(client, mock_queries, auth_headers):
    mock_queries.get_user_entries.return_value = []

    response = client.get("/api/export/entries/csv", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_export_goals_json(client, mock_queries, auth_headers, make_goal):
    mock_queries.get_user_goals.return_value = [make_goal()]

    response = client.get("/api/export/goals/json", headers=auth_headers)

    data = response.json()["data"]
    assert data["count"] == 1
    assert data["goals"][0]["title"] == "Run 100 km"
    assert "user_id" not in data["goals"][0]


def test_export_goals_csv(client, mock_queries, auth_headers, make_goal):
    mock_queries.get_user_goals.return_value = [make_goal(current_value=25.0)]

    response = client.get("/api/export/goals/csv", headers=auth_headers)

    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert rows[0]["Progress %"] == "25"
    assert rows[0]["Target Date"] == "2024-06-01"
    assert rows[0]["Completed At"] == ""


def test_export_all(client, mock_queries, test_user, auth_headers, make_entry, make_goal):
    mock_queries.get_user_by_id.return_value = {**test_user, "xp": 120, "level": 2}
    mock_queries.get_user_entries.return_value = [make_entry()]
    mock_queries.get_user_goals.return_value = [make_goal(), make_goal()]
    mock_queries.get_streak.return_value = {
        "current_streak": 3, "longest_streak": 5, "last_entry_date": date(2024, 3, 15),
    }

    response = client.get("/api/export/all", headers=auth_headers)

    data = response.json()["data"]
    assert data["user"]["level"] == 2
    assert data["user"]["longest_streak"] == 5
    assert "password_hash" not in data["user"]
    assert data["entries"]["count"] == 1
    assert data["goals"]["count"] == 2


def test_export_requires_auth(client):
    assert client.get("/api/export/entries/json").status_code == 401
