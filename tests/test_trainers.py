import pytest
from fastapi.testclient import TestClient

from gymdesk.app.core.cache import query_cache
from gymdesk.app.db.base import Base
from gymdesk.app.db.session import engine
from gymdesk.app.main import app

PASSWORD = "Secret123"


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


def create_trainer(client: TestClient, token: str, **overrides):
    payload = {
        "firstName": "Tom",
        "lastName": "Coach",
        "email": "tom@fitness.com",
        "password": PASSWORD,
        "specializations": ["Strength Training", "HIIT"],
        "certifications": ["NASM-CPT"],
        "hourlyRate": 60,
    }
    payload.update(overrides)
    return client.post("/api/trainers", json=payload, headers=auth_headers(token))


def test_create_trainer_creates_login():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    response = create_trainer(client, admin)
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "trainer"
    assert data["hourlyRate"] == 60
    assert data["specializations"] == ["Strength Training", "HIIT"]
    assert "password" not in data

    login = client.post("/auth/login", json={"email": "tom@fitness.com", "password": PASSWORD})
    assert login.status_code == 200


def test_create_trainer_requires_specialization():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    response = create_trainer(client, admin, specializations=[])
    assert response.status_code == 400
    assert response.json()["detail"] == "specializations: At least one specialization is required"


def test_create_trainer_rejects_excessive_rate():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    response = create_trainer(client, admin, hourlyRate=1500)
    assert response.status_code == 400
    assert response.json()["detail"] == "hourlyRate: Hourly rate seems too high"


def test_duplicate_trainer_email_is_reported():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    create_trainer(client, admin)
    response = create_trainer(client, admin, firstName="Other")
    assert response.status_code == 400
    assert response.json()["detail"] == "This record already exists"


def test_trainer_cannot_create_trainers():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    create_trainer(client, admin)
    trainer = client.post("/auth/login", json={"email": "tom@fitness.com", "password": PASSWORD}).json()["access_token"]
    response = create_trainer(client, trainer, email="other@fitness.com")
    assert response.status_code == 403


def test_list_filter_and_sort_trainers():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    create_trainer(client, admin)
    create_trainer(
        client,
        admin,
        firstName="Amy",
        lastName="Yoga",
        email="amy@fitness.com",
        specializations=["Yoga"],
        hourlyRate=45,
    )

    response = client.get("/api/trainers", headers=auth_headers(admin))
    assert [t["firstName"] for t in response.json()] == ["Amy", "Tom"]

    response = client.get(
        "/api/trainers", params={"sortBy": "hourlyRate", "sortOrder": "desc"}, headers=auth_headers(admin)
    )
    assert [t["firstName"] for t in response.json()] == ["Tom", "Amy"]

    response = client.get("/api/trainers", params={"specialization": "yoga"}, headers=auth_headers(admin))
    assert [t["firstName"] for t in response.json()] == ["Amy"]


def test_update_and_delete_trainer():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    trainer_id = create_trainer(client, admin).json()["id"]

    response = client.put(
        f"/api/trainers/{trainer_id}", json={"bio": "Ex-athlete", "lastName": "Coachman"}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json()["bio"] == "Ex-athlete"
    assert response.json()["lastName"] == "Coachman"

    response = client.delete(f"/api/trainers/{trainer_id}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert client.get(f"/api/trainers/{trainer_id}", headers=auth_headers(admin)).status_code == 404


def test_trainer_stats():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    create_trainer(client, admin)
    create_trainer(
        client,
        admin,
        firstName="Amy",
        lastName="Yoga",
        email="amy@fitness.com",
        specializations=["Yoga", "HIIT"],
        certifications=[],
        hourlyRate=40,
    )

    stats = client.get("/api/trainers/stats", headers=auth_headers(admin)).json()
    assert stats["totalTrainers"] == 2
    assert stats["averageHourlyRate"] == 50
    assert stats["topSpecializations"][0] == {"name": "HIIT", "count": 2}
    assert stats["totalCertifications"] == 1
    assert stats["newThisMonth"] == 2


def test_availability_windows():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    trainer_id = create_trainer(client, admin).json()["id"]

    response = client.post(
        f"/api/trainers/{trainer_id}/availability",
        json={"dayOfWeek": 1, "startTime": "09:00", "endTime": "17:00"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 201
    window = response.json()
    assert window["dayOfWeek"] == 1
    assert window["startTime"] == "09:00:00"
    assert window["isAvailable"] is True

    response = client.post(
        f"/api/trainers/{trainer_id}/availability",
        json={"dayOfWeek": 2, "startTime": "17:00", "endTime": "09:00"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "End time must be after start time"

    windows = client.get(f"/api/trainers/{trainer_id}/availability", headers=auth_headers(admin)).json()
    assert len(windows) == 1

    response = client.delete(f"/api/trainers/{trainer_id}/availability/{window['id']}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert client.get(f"/api/trainers/{trainer_id}/availability", headers=auth_headers(admin)).json() == []


def test_export_trainers_csv():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    create_trainer(client, admin)
    response = client.get("/api/trainers/export", headers=auth_headers(admin))
    assert response.status_code == 200
    header, row = response.text.split("\n")
    assert header.startswith('"ID","First Name","Last Name"')
    assert '"Strength Training; HIIT"' in row
