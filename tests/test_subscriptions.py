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


def create_plan(client: TestClient, token: str, **overrides):
    payload = {
        "name": "Premium Monthly",
        "description": "Enhanced experience",
        "price": 59.99,
        "duration": "monthly",
        "features": ["24/7 gym access", "Group classes"],
    }
    payload.update(overrides)
    return client.post("/api/subscription-plans", json=payload, headers=auth_headers(token))


def create_member(client: TestClient, token: str, first_name: str = "Jane", email: str = "jane@fitness.com") -> str:
    response = client.post(
        "/api/members",
        json={"firstName": first_name, "lastName": "Doe", "email": email},
        headers=auth_headers(token),
    )
    return response.json()["id"]


def subscribe(client: TestClient, token: str, member_id: str, plan_id: str, **overrides):
    payload = {"memberId": member_id, "planId": plan_id, "startDate": "2030-01-31"}
    payload.update(overrides)
    return client.post("/api/subscriptions", json=payload, headers=auth_headers(token))


def test_create_subscription_derives_end_date_and_price():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    plan_id = create_plan(client, admin).json()["id"]
    member_id = create_member(client, admin)

    response = subscribe(client, admin, member_id, plan_id)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "active"
    assert data["endDate"] == "2030-02-28"
    assert data["price"] == 59.99
    assert data["member"]["firstName"] == "Jane"
    assert data["plan"]["name"] == "Premium Monthly"


def test_create_subscription_accepts_datetime_start():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    plan_id = create_plan(client, admin, duration="annual", name="Basic Annual").json()["id"]
    member_id = create_member(client, admin)
    response = subscribe(client, admin, member_id, plan_id, startDate="2030-03-01T00:00:00.000Z", price=250)
    assert response.status_code == 201
    assert response.json()["startDate"] == "2030-03-01"
    assert response.json()["endDate"] == "2031-03-01"
    assert response.json()["price"] == 250


def test_subscription_validation():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    plan_id = create_plan(client, admin).json()["id"]
    member_id = create_member(client, admin)

    response = subscribe(client, admin, member_id, plan_id, endDate="2030-01-01")
    assert response.status_code == 400
    assert response.json()["detail"] == "endDate: End date must be after start date"

    response = subscribe(client, admin, member_id, plan_id, price=20000)
    assert response.json()["detail"] == "price: Price cannot exceed $10,000"

    response = subscribe(client, admin, "missing", plan_id)
    assert response.json()["detail"] == "Member not found"

    response = subscribe(client, admin, member_id, "missing")
    assert response.json()["detail"] == "Plan not found"


def test_subscription_actions():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    plan_id = create_plan(client, admin).json()["id"]
    member_id = create_member(client, admin)
    subscription_id = subscribe(client, admin, member_id, plan_id).json()["id"]

    response = client.post(f"/api/subscriptions/{subscription_id}/freeze", headers=auth_headers(admin))
    assert response.json()["status"] == "frozen"
    response = client.post(f"/api/subscriptions/{subscription_id}/reactivate", headers=auth_headers(admin))
    assert response.json()["status"] == "active"
    response = client.post(f"/api/subscriptions/{subscription_id}/cancel", headers=auth_headers(admin))
    assert response.json()["status"] == "cancelled"

    response = client.delete(f"/api/subscriptions/{subscription_id}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert client.get(f"/api/subscriptions/{subscription_id}", headers=auth_headers(admin)).status_code == 404


def test_trainer_cannot_modify_subscriptions():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    client.post(
        "/api/trainers",
        json={
            "firstName": "Tom",
            "lastName": "Coach",
            "email": "tom@fitness.com",
            "password": PASSWORD,
            "specializations": ["HIIT"],
        },
        headers=auth_headers(admin),
    )
    trainer = client.post("/auth/login", json={"email": "tom@fitness.com", "password": PASSWORD}).json()["access_token"]
    plan_id = create_plan(client, admin).json()["id"]
    member_id = create_member(client, admin)
    response = subscribe(client, trainer, member_id, plan_id)
    assert response.status_code == 403
    assert client.get("/api/subscriptions", headers=auth_headers(trainer)).status_code == 200


def test_list_search_and_member_subscriptions():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    premium = create_plan(client, admin).json()["id"]
    basic = create_plan(client, admin, name="Basic Monthly", price=29.99).json()["id"]
    jane = create_member(client, admin)
    mark = create_member(client, admin, first_name="Mark", email="mark@fitness.com")
    subscribe(client, admin, jane, premium)
    subscribe(client, admin, mark, basic)

    response = client.get("/api/subscriptions", params={"searchTerm": "basic"}, headers=auth_headers(admin))
    assert [s["member"]["firstName"] for s in response.json()] == ["Mark"]

    response = client.get("/api/subscriptions", params={"searchTerm": "jane"}, headers=auth_headers(admin))
    assert [s["plan"]["name"] for s in response.json()] == ["Premium Monthly"]

    response = client.get(f"/api/members/{jane}/subscriptions", headers=auth_headers(admin))
    assert len(response.json()) == 1
    assert response.json()[0]["memberId"] == jane


def test_subscription_stats():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    premium = create_plan(client, admin).json()["id"]
    basic = create_plan(client, admin, name="Basic Monthly", price=29.99).json()["id"]
    jane = create_member(client, admin)
    mark = create_member(client, admin, first_name="Mark", email="mark@fitness.com")
    subscribe(client, admin, jane, premium)
    cancelled = subscribe(client, admin, mark, basic).json()["id"]
    client.post(f"/api/subscriptions/{cancelled}/cancel", headers=auth_headers(admin))

    stats = client.get("/api/subscriptions/stats", headers=auth_headers(admin)).json()
    assert stats["totalSubscriptions"] == 2
    assert stats["activeSubscriptions"] == 1
    assert stats["totalRevenue"] == 59.99
    assert stats["expiringSoon"] == 0
    assert stats["statusDistribution"] == {"active": 1, "cancelled": 1}
    assert stats["planDistribution"] == {"Premium Monthly": 1, "Basic Monthly": 1}


def test_export_subscriptions_csv():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    plan_id = create_plan(client, admin).json()["id"]
    member_id = create_member(client, admin)
    subscribe(client, admin, member_id, plan_id, autoRenew=True)

    response = client.get("/api/subscriptions/export", headers=auth_headers(admin))
    assert response.status_code == 200
    header, row = response.text.split("\n")
    assert '"Member First Name"' in header
    assert '"Jane"' in row
    assert '"Premium Monthly"' in row
    assert '"Yes"' in row


def test_member_and_plan_renames_show_in_subscription_list():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    plan_id = create_plan(client, admin).json()["id"]
    member_id = create_member(client, admin)
    subscribe(client, admin, member_id, plan_id)
    listing = client.get("/api/subscriptions", headers=auth_headers(admin)).json()
    assert listing[0]["member"]["firstName"] == "Jane"

    client.put(f"/api/members/{member_id}", json={"firstName": "Renamed"}, headers=auth_headers(admin))
    client.put(f"/api/subscription-plans/{plan_id}", json={"name": "Gold Monthly"}, headers=auth_headers(admin))

    listing = client.get("/api/subscriptions", headers=auth_headers(admin)).json()
    assert listing[0]["member"]["firstName"] == "Renamed"
    assert listing[0]["plan"]["name"] == "Gold Monthly"
