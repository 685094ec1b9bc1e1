from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from revhub.application.factory import Services
from revhub.consts import VERSION
from revhub.domain.errors import PersistenceError
from revhub.server import create_app


@pytest.fixture
def client(service, stats_service):
    return TestClient(create_app(Services(srs=service, stats=stats_service)))


@pytest.fixture
def bookmark_id(client):
    response = client.post("/bookmarks", json={"user_id": "user-1", "question_id": "q1"})
    assert response.status_code == 200
    return response.json()["id"]


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version(client):
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_create_bookmark(client):
    response = client.post("/bookmarks", json={"user_id": "user-1", "question_id": "q1"})

    data = response.json()
    assert data["question_id"] == "q1"
    assert data["srs_state"] == {
        "repetitions": 0,
        "ease_factor": 2.5,
        "interval": 0,
        "next_review_date": "2024-03-10",
    }
    assert data["custom_reminder_active"] is False


def test_delete_bookmark(client, bookmark_id):
    response = client.delete(f"/bookmarks/{bookmark_id}", params={"user_id": "user-1"})
    assert response.json() == {"success": True}

    response = client.delete(f"/bookmarks/{bookmark_id}", params={"user_id": "user-1"})
    assert response.status_code == 404


def test_submit_and_undo_feedback(client, bookmark_id):
    response = client.post(
        "/srs-feedback/result-1/submit",
        json={"user_id": "user-1", "question_id": "q1", "rating": 3},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["updated_srs_state"]["interval"] == 1
    assert data["updated_srs_state"]["ease_factor"] == 2.36
    assert data["feedback_log"]["q1"]["rating"] == 3
    assert data["feedback_log"]["q1"]["original_srs_state"]["repetitions"] == 0

    log = client.get("/srs-feedback/result-1", params={"user_id": "user-1"}).json()
    assert list(log["feedback_log"]) == ["q1"]

    response = client.post(
        "/srs-feedback/result-1/undo", json={"user_id": "user-1", "question_id": "q1"}
    )
    assert response.json() == {"success": True, "feedback_log": {}}


def test_submit_errors(client, bookmark_id):
    bad_rating = client.post(
        "/srs-feedback/result-1/submit",
        json={"user_id": "user-1", "question_id": "q1", "rating": 7},
    )
    assert bad_rating.status_code == 400

    unknown_result = client.post(
        "/srs-feedback/nope/submit",
        json={"user_id": "user-1", "question_id": "q1", "rating": 3},
    )
    assert unknown_result.status_code == 404

    unknown_bookmark = client.post(
        "/srs-feedback/result-1/submit",
        json={"user_id": "user-1", "question_id": "q9", "rating": 3},
    )
    assert unknown_bookmark.status_code == 404


def test_persistence_error_is_500():
    srs = MagicMock()
    srs.submit_review = AsyncMock(side_effect=PersistenceError("db locked"))
    client = TestClient(create_app(Services(srs=srs, stats=MagicMock())))

    response = client.post(
        "/srs-feedback/result-1/submit",
        json={"user_id": "user-1", "question_id": "q1", "rating": 3},
    )

    assert response.status_code == 500
    assert "db locked" in response.json()["detail"]


def test_due_questions(client, bookmark_id):
    data = client.get("/due-questions", params={"user_id": "user-1"}).json()
    assert data["count"] == 1
    assert data["questions"][0] == {
        "bookmark_id": bookmark_id,
        "question_id": "q1",
        "via_custom_reminder": False,
    }
    assert client.get("/due-count", params={"user_id": "user-1"}).json() == {"count": 1}


def test_custom_reminder(client, bookmark_id):
    url = f"/bookmarks/{bookmark_id}/custom-reminder"

    past = client.put(
        url,
        json={
            "user_id": "user-1",
            "is_custom_reminder_active": True,
            "custom_next_review_date": "2024-03-01",
        },
    )
    assert past.status_code == 400

    ok = client.put(
        url,
        json={
            "user_id": "user-1",
            "is_custom_reminder_active": True,
            "custom_next_review_date": "2024-03-12",
        },
    )
    assert ok.status_code == 200
    assert "2024-03-12" in ok.json()["message"]

    due = client.get("/due-questions", params={"user_id": "user-1"}).json()
    assert due["count"] == 0
    later = client.get(
        "/due-questions", params={"user_id": "user-1", "today": "2024-03-12"}
    ).json()
    assert later["questions"][0]["via_custom_reminder"] is True


def test_log_review(client, bookmark_id):
    response = client.post(
        "/reviews/log",
        json={"user_id": "user-1", "bookmark_id": bookmark_id, "performance_rating": 1},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["previous_srs_state"]["ease_factor"] == 2.5
    assert data["updated_srs_state"]["ease_factor"] == 2.3
    assert data["custom_reminder_cleared"] is False

    retention = client.get("/users/user-1/analytics/retention").json()
    assert retention["young_7_days"] == 0
    streak = client.get("/users/user-1/analytics/streak").json()
    assert streak["current_streak"] == 1
    assert len(streak["last_90_days"]) == 90
    assert streak["last_90_days"][-1] == {"date": "2024-03-10", "count": 1}


def test_preferences(client, bookmark_id):
    assert client.get("/users/user-1/srs-preferences").json() == {"srs_pacing_mode": 0.0}

    bad = client.post("/users/user-1/srs-preferences/pacing", json={"pacing_mode": 2})
    assert bad.status_code == 400

    ok = client.post("/users/user-1/srs-preferences/pacing", json={"pacing_mode": 0.5})
    assert ok.json() == {"success": True, "updated_count": 1, "newly_due_count": 0}
    assert client.get("/users/user-1/srs-preferences").json() == {"srs_pacing_mode": 0.5}


def test_delay(client, bookmark_id):
    bad = client.post("/users/user-1/srs-preferences/delay", json={"delay_days": 0})
    assert bad.status_code == 400

    ok = client.post("/users/user-1/srs-preferences/delay", json={"delay_days": 3})
    assert ok.json() == {"success": True, "updated_count": 1, "now_due_count": 0}
    assert client.get("/due-count", params={"user_id": "user-1"}).json() == {"count": 0}
