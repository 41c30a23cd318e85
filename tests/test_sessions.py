import pytest
from fastapi.testclient import TestClient

from gymdesk.app.core.cache import query_cache
from gymdesk.app.db.base import Base
from gymdesk.app.db.session import engine
from gymdesk.app.main import app

PASSWORD = "Secret123"
# 2030-01-07 is a Monday (dayOfWeek 1, Sunday = 0).
MONDAY = "2030-01-07"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    query_cache.clear()
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str = PASSWORD) -> str:
    client.post(
        "/auth/register",
        json={"email": email, "password": password, "firstName": "Alex", "lastName": "Admin"},
    )
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_trainer(client: TestClient, token: str, email: str = "tom@fitness.com", with_window: bool = True) -> str:
    response = client.post(
        "/api/trainers",
        json={
            "firstName": "Tom",
            "lastName": "Coach",
            "email": email,
            "password": PASSWORD,
            "specializations": ["Strength Training"],
        },
        headers=auth_headers(token),
    )
    trainer_id = response.json()["id"]
    if with_window:
        client.post(
            f"/api/trainers/{trainer_id}/availability",
            json={"dayOfWeek": 1, "startTime": "09:00", "endTime": "17:00"},
            headers=auth_headers(token),
        )
    return trainer_id


def create_member(client: TestClient, token: str, first_name: str = "Jane") -> str:
    response = client.post(
        "/api/members", json={"firstName": first_name, "lastName": "Doe"}, headers=auth_headers(token)
    )
    return response.json()["id"]


def book(client: TestClient, token: str, member_id: str, trainer_id: str, when: str = f"{MONDAY}T10:00:00Z", **extra):
    payload = {
        "memberId": member_id,
        "trainerId": trainer_id,
        "type": "personal",
        "title": "Leg day",
        "scheduledDate": when,
        "duration": 60,
    }
    payload.update(extra)
    return client.post("/api/sessions", json=payload, headers=auth_headers(token))


def setup_booking(client: TestClient):
    admin = register_and_login(client, "admin@fitness.com")
    trainer_id = create_trainer(client, admin)
    member_id = create_member(client, admin)
    return admin, trainer_id, member_id


def test_create_session_within_availability():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    response = book(client, admin, member_id, trainer_id, sessionRoom="Studio A", cost=45)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "scheduled"
    assert data["scheduledDate"].startswith(f"{MONDAY}T10:00:00")
    assert data["sessionRoom"] == "Studio A"
    assert data["member"]["firstName"] == "Jane"
    assert data["trainer"]["email"] == "tom@fitness.com"


def test_create_session_outside_availability_is_rejected():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    response = book(client, admin, member_id, trainer_id, when=f"{MONDAY}T18:30:00Z")
    assert response.status_code == 400
    assert response.json()["detail"] == "Schedule conflict detected: trainer_unavailable"

    sessions = client.get("/api/sessions", headers=auth_headers(admin)).json()
    assert sessions == []


def test_trainer_without_windows_is_unavailable():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    trainer_id = create_trainer(client, admin, with_window=False)
    member_id = create_member(client, admin)
    response = book(client, admin, member_id, trainer_id)
    assert response.status_code == 400
    assert response.json()["detail"] == "Schedule conflict detected: trainer_unavailable"


def test_window_end_is_inclusive():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    response = book(client, admin, member_id, trainer_id, when=f"{MONDAY}T17:00:00Z")
    assert response.status_code == 201


def test_overlapping_booking_is_rejected():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    other_member = create_member(client, admin, first_name="Mark")
    assert book(client, admin, member_id, trainer_id).status_code == 201

    response = book(client, admin, other_member, trainer_id, when=f"{MONDAY}T09:30:00Z")
    assert response.status_code == 400
    assert response.json()["detail"] == "Schedule conflict detected: trainer_booked"


def test_cancelled_session_does_not_block_slot():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    session_id = book(client, admin, member_id, trainer_id).json()["id"]
    client.post(f"/api/sessions/{session_id}/cancel", json={}, headers=auth_headers(admin))

    response = book(client, admin, member_id, trainer_id)
    assert response.status_code == 201


def test_check_conflicts_endpoint():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    book(client, admin, member_id, trainer_id)

    response = client.post(
        "/api/sessions/check-conflicts",
        json={"trainerId": trainer_id, "scheduledDate": f"{MONDAY}T10:00:00Z", "duration": 30},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["hasConflicts"] is True
    assert data["checkFailed"] is False
    assert data["conflicts"] == [{"type": "trainer_booked", "details": {"overlappingSessions": 1}}]

    response = client.post(
        "/api/sessions/check-conflicts",
        json={"trainerId": trainer_id, "scheduledDate": f"{MONDAY}T07:15:00Z", "duration": 30},
        headers=auth_headers(admin),
    )
    assert response.json()["conflicts"] == [
        {"type": "trainer_unavailable", "details": {"trainerId": trainer_id, "dayOfWeek": 1, "time": "07:15"}}
    ]


def test_create_session_validation():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)

    response = book(client, admin, member_id, trainer_id, duration=10)
    assert response.status_code == 400
    assert response.json()["detail"] == "duration: Duration must be at least 15 minutes"

    response = book(client, admin, member_id, trainer_id, duration=600)
    assert response.json()["detail"] == "duration: Duration cannot exceed 8 hours"

    response = book(client, admin, member_id, trainer_id, title="")
    assert response.json()["detail"] == "title: Title is required"

    response = book(client, admin, "", trainer_id)
    assert response.json()["detail"] == "memberId: Invalid member ID"


def test_create_session_for_unknown_member():
    client = TestClient(app)
    admin, trainer_id, _ = setup_booking(client)
    response = book(client, admin, "missing-member", trainer_id)
    assert response.status_code == 400
    assert response.json()["detail"] == "Member not found"


def test_session_lifecycle_complete_then_cancel_is_rejected():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    session_id = book(client, admin, member_id, trainer_id).json()["id"]

    response = client.post(f"/api/sessions/{session_id}/confirm", headers=auth_headers(admin))
    assert response.json()["status"] == "confirmed"

    response = client.post(f"/api/sessions/{session_id}/start", headers=auth_headers(admin))
    assert response.json()["status"] == "in_progress"
    assert response.json()["actualStartTime"]

    response = client.post(
        f"/api/sessions/{session_id}/complete",
        json={"completionSummary": "Hit a new squat PR", "memberRating": 5},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    completed = response.json()
    assert completed["status"] == "completed"
    assert completed["memberRating"] == 5
    assert completed["actualEndTime"]

    response = client.post(f"/api/sessions/{session_id}/cancel", json={"reason": "late"}, headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status transition from completed to cancelled"

    current = client.get(f"/api/sessions/{session_id}", headers=auth_headers(admin)).json()
    assert current["status"] == "completed"
    assert current["actualEndTime"] == completed["actualEndTime"]
    assert current["notes"] is None


def test_confirming_twice_is_rejected():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    session_id = book(client, admin, member_id, trainer_id).json()["id"]
    client.post(f"/api/sessions/{session_id}/confirm", headers=auth_headers(admin))
    response = client.post(f"/api/sessions/{session_id}/confirm", headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status transition from confirmed to confirmed"


def test_complete_rejects_bad_rating():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    session_id = book(client, admin, member_id, trainer_id).json()["id"]
    response = client.post(
        f"/api/sessions/{session_id}/complete", json={"memberRating": 7}, headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "memberRating: Rating must be between 1 and 5"


def test_cancel_records_reason():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    session_id = book(client, admin, member_id, trainer_id).json()["id"]
    response = client.post(
        f"/api/sessions/{session_id}/cancel", json={"reason": "Member sick"}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["notes"] == "Cancelled: Member sick"


def test_reschedule_and_no_show():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    session_id = book(client, admin, member_id, trainer_id).json()["id"]

    response = client.post(
        f"/api/sessions/{session_id}/reschedule",
        json={"newDate": "2030-01-14T11:00:00Z"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "rescheduled"
    assert response.json()["scheduledDate"].startswith("2030-01-14T11:00:00")

    response = client.post(f"/api/sessions/{session_id}/no-show", headers=auth_headers(admin))
    assert response.json()["status"] == "no_show"

    response = client.post(f"/api/sessions/{session_id}/start", headers=auth_headers(admin))
    assert response.status_code == 400


def test_generic_update_checks_transitions():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    session_id = book(client, admin, member_id, trainer_id).json()["id"]

    response = client.put(
        f"/api/sessions/{session_id}",
        json={"status": "scheduled", "sessionGoals": "Mobility"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["sessionGoals"] == "Mobility"

    client.post(f"/api/sessions/{session_id}/cancel", json={}, headers=auth_headers(admin))
    response = client.put(f"/api/sessions/{session_id}", json={"status": "confirmed"}, headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status transition from cancelled to confirmed"


def test_recurring_pattern_is_stored_verbatim():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    response = book(
        client,
        admin,
        member_id,
        trainer_id,
        recurringPattern={"frequency": "weekly", "interval": 1, "daysOfWeek": [1]},
    )
    assert response.status_code == 201
    assert response.json()["recurringPattern"] == {"frequency": "weekly", "interval": 1, "daysOfWeek": [1]}
    sessions = client.get("/api/sessions", headers=auth_headers(admin)).json()
    assert len(sessions) == 1


def test_list_sessions_by_date_range():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    book(client, admin, member_id, trainer_id, when=f"{MONDAY}T15:00:00Z", title="Late")
    book(client, admin, member_id, trainer_id, when=f"{MONDAY}T09:00:00Z", title="Early")
    book(client, admin, member_id, trainer_id, when="2030-01-14T09:00:00Z", title="Next week")

    response = client.get(
        "/api/sessions", params={"start": MONDAY, "end": MONDAY}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert [s["title"] for s in response.json()] == ["Early", "Late"]

    response = client.get(
        "/api/sessions", params={"start": MONDAY, "end": "2030-01-31"}, headers=auth_headers(admin)
    )
    assert len(response.json()) == 3

    response = client.get("/api/sessions", params={"start": "garbage", "end": MONDAY}, headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid date range"


def test_trainer_sees_only_own_sessions():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    other_trainer = create_trainer(client, admin, email="amy@fitness.com")
    book(client, admin, member_id, trainer_id, title="Tom's")
    book(client, admin, member_id, other_trainer, title="Amy's")

    token = client.post("/auth/login", json={"email": "amy@fitness.com", "password": PASSWORD}).json()["access_token"]
    response = client.get("/api/sessions", headers=auth_headers(token))
    assert [s["title"] for s in response.json()] == ["Amy's"]


def test_member_and_trainer_session_listings():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    other_member = create_member(client, admin, first_name="Mark")
    book(client, admin, member_id, trainer_id, when=f"{MONDAY}T09:00:00Z")
    book(client, admin, other_member, trainer_id, when=f"{MONDAY}T11:00:00Z")

    member_sessions = client.get(f"/api/members/{member_id}/sessions", headers=auth_headers(admin)).json()
    assert len(member_sessions) == 1
    assert member_sessions[0]["memberId"] == member_id

    trainer_sessions = client.get(f"/api/trainers/{trainer_id}/sessions", headers=auth_headers(admin)).json()
    assert len(trainer_sessions) == 2

    response = client.get(
        f"/api/trainers/{trainer_id}/sessions", params={"dateFrom": "2031-01-01"}, headers=auth_headers(admin)
    )
    assert response.json() == []


def test_session_stats():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    first = book(client, admin, member_id, trainer_id, when=f"{MONDAY}T09:00:00Z").json()["id"]
    second = book(client, admin, member_id, trainer_id, when=f"{MONDAY}T11:00:00Z").json()["id"]
    book(client, admin, member_id, trainer_id, when=f"{MONDAY}T13:00:00Z")
    client.post(f"/api/sessions/{first}/complete", json={"memberRating": 4}, headers=auth_headers(admin))
    client.post(f"/api/sessions/{second}/cancel", json={}, headers=auth_headers(admin))

    stats = client.get("/api/sessions/stats", headers=auth_headers(admin)).json()
    assert stats["totalSessions"] == 3
    assert stats["completedSessions"] == 1
    assert stats["cancelledSessions"] == 1
    assert stats["upcomingSessions"] == 1
    assert stats["completionRate"] == 33
    assert stats["averageRating"] == 4


def test_delete_session():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    session_id = book(client, admin, member_id, trainer_id).json()["id"]
    response = client.delete(f"/api/sessions/{session_id}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert client.get(f"/api/sessions/{session_id}", headers=auth_headers(admin)).status_code == 404


def test_created_session_is_returned_by_exact_range():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    when = f"{MONDAY}T10:00:00Z"
    created = book(client, admin, member_id, trainer_id, when=when, title="T").json()

    response = client.get("/api/sessions", params={"start": when, "end": when}, headers=auth_headers(admin))
    assert response.status_code == 200
    sessions = response.json()
    assert len(sessions) == 1
    session = sessions[0]
    assert session["id"] == created["id"]
    assert session["memberId"] == member_id
    assert session["trainerId"] == trainer_id
    assert session["type"] == "personal"
    assert session["title"] == "T"
    assert session["duration"] == 60
    assert session["scheduledDate"].startswith(f"{MONDAY}T10:00:00")
    assert session["status"] == "scheduled"
    assert session["createdAt"]


def test_repeated_range_reads_are_identical():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    book(client, admin, member_id, trainer_id, when=f"{MONDAY}T09:00:00Z", title="Early")
    book(client, admin, member_id, trainer_id, when=f"{MONDAY}T15:00:00Z", title="Late")

    params = {"start": MONDAY, "end": "2030-01-31"}
    first = client.get("/api/sessions", params=params, headers=auth_headers(admin))
    second = client.get("/api/sessions", params=params, headers=auth_headers(admin))
    assert first.status_code == second.status_code == 200
    assert len(first.json()) == 2
    assert first.json() == second.json()


def test_member_rename_shows_in_calendar():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    book(client, admin, member_id, trainer_id)
    params = {"start": MONDAY, "end": MONDAY}
    assert client.get("/api/sessions", params=params, headers=auth_headers(admin)).json()[0]["member"]["firstName"] == "Jane"

    response = client.put(f"/api/members/{member_id}", json={"firstName": "Renamed"}, headers=auth_headers(admin))
    assert response.status_code == 200

    calendar = client.get("/api/sessions", params=params, headers=auth_headers(admin)).json()
    assert calendar[0]["member"]["firstName"] == "Renamed"
    member_sessions = client.get(f"/api/members/{member_id}/sessions", headers=auth_headers(admin)).json()
    assert member_sessions[0]["member"]["firstName"] == "Renamed"


def test_trainer_rename_shows_in_calendar():
    client = TestClient(app)
    admin, trainer_id, member_id = setup_booking(client)
    book(client, admin, member_id, trainer_id)
    params = {"start": MONDAY, "end": MONDAY}
    assert client.get("/api/sessions", params=params, headers=auth_headers(admin)).json()[0]["trainer"]["firstName"] == "Tom"

    response = client.put(f"/api/trainers/{trainer_id}", json={"firstName": "Thomas"}, headers=auth_headers(admin))
    assert response.status_code == 200
    calendar = client.get("/api/sessions", params=params, headers=auth_headers(admin)).json()
    assert calendar[0]["trainer"]["firstName"] == "Thomas"

    trainer_token = client.post("/auth/login", json={"email": "tom@fitness.com", "password": PASSWORD}).json()[
        "access_token"
    ]
    response = client.put("/api/users/me", json={"firstName": "Tommy"}, headers=auth_headers(trainer_token))
    assert response.status_code == 200
    calendar = client.get("/api/sessions", params=params, headers=auth_headers(admin)).json()
    assert calendar[0]["trainer"]["firstName"] == "Tommy"


def test_missing_body_is_a_validation_error_not_422():
    client = TestClient(app)
    admin, _, _ = setup_booking(client)
    response = client.post("/api/sessions", headers=auth_headers(admin))
    assert response.status_code == 400
    assert ": " in response.json()["detail"]

    response = client.post("/api/sessions", json={"title": "No people"}, headers=auth_headers(admin))
    assert response.status_code == 400
