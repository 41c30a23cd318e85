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
        "price": 59.99,
        "duration": "monthly",
        "features": ["24/7 gym access", "Group classes"],
    }
    payload.update(overrides)
    return client.post("/api/subscription-plans", json=payload, headers=auth_headers(token))


def test_create_plan():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    response = create_plan(client, admin, maxSessionsPerMonth=4, includesPersonalTraining=True)
    assert response.status_code == 201
    data = response.json()
    assert data["isActive"] is True
    assert data["includesPersonalTraining"] is True
    assert data["maxSessionsPerMonth"] == 4
    assert data["subscriberCount"] == 0


def test_plan_validation():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    response = create_plan(client, admin, name="")
    assert response.status_code == 400
    assert response.json()["detail"] == "name: Plan name is required"

    response = create_plan(client, admin, features=[])
    assert response.json()["detail"] == "features: At least one feature is required"

    response = create_plan(client, admin, price=-1)
    assert response.json()["detail"] == "price: Price cannot be negative"


def test_duplicate_plan_name():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    create_plan(client, admin)
    response = create_plan(client, admin)
    assert response.status_code == 400
    assert response.json()["detail"] == "This record already exists"


def test_list_plans_filters_and_sorting():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    create_plan(client, admin)
    create_plan(client, admin, name="Basic Annual", price=299.99, duration="annual")
    inactive = create_plan(client, admin, name="Legacy Quarterly", price=10, duration="quarterly").json()["id"]
    client.patch(f"/api/subscription-plans/{inactive}/status", json={"isActive": False}, headers=auth_headers(admin))

    names = [p["name"] for p in client.get("/api/subscription-plans", headers=auth_headers(admin)).json()]
    assert names == ["Basic Annual", "Legacy Quarterly", "Premium Monthly"]

    response = client.get(
        "/api/subscription-plans", params={"sortBy": "price", "sortOrder": "desc"}, headers=auth_headers(admin)
    )
    assert [p["name"] for p in response.json()] == ["Basic Annual", "Premium Monthly", "Legacy Quarterly"]

    active = client.get("/api/subscription-plans/active", headers=auth_headers(admin)).json()
    assert [p["name"] for p in active] == ["Basic Annual", "Premium Monthly"]


def test_update_plan_and_trainer_forbidden():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    plan_id = create_plan(client, admin).json()["id"]
    response = client.put(f"/api/subscription-plans/{plan_id}", json={"price": 64.99}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["price"] == 64.99
    assert response.json()["name"] == "Premium Monthly"

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
    response = client.put(f"/api/subscription-plans/{plan_id}", json={"price": 1}, headers=auth_headers(trainer))
    assert response.status_code == 403


def test_delete_plan_is_soft_and_refused_while_in_use():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    plan_id = create_plan(client, admin).json()["id"]
    member_id = client.post(
        "/api/members", json={"firstName": "Jane", "lastName": "Doe"}, headers=auth_headers(admin)
    ).json()["id"]
    subscription_id = client.post(
        "/api/subscriptions",
        json={"memberId": member_id, "planId": plan_id, "startDate": "2030-01-01"},
        headers=auth_headers(admin),
    ).json()["id"]

    listed = client.get("/api/subscription-plans", headers=auth_headers(admin)).json()
    assert listed[0]["subscriberCount"] == 1

    response = client.delete(f"/api/subscription-plans/{plan_id}", headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete plan with active subscriptions. Please set it as inactive instead."

    client.post(f"/api/subscriptions/{subscription_id}/cancel", headers=auth_headers(admin))
    response = client.delete(f"/api/subscription-plans/{plan_id}", headers=auth_headers(admin))
    assert response.status_code == 200

    plan = client.get(f"/api/subscription-plans/{plan_id}", headers=auth_headers(admin)).json()
    assert plan["isActive"] is False


def test_plan_stats_use_subscription_prices():
    client = TestClient(app)
    admin = register_and_login(client, "admin@fitness.com")
    monthly = create_plan(client, admin).json()["id"]
    annual = create_plan(client, admin, name="Basic Annual", price=299.99, duration="annual").json()["id"]
    member_id = client.post(
        "/api/members", json={"firstName": "Jane", "lastName": "Doe"}, headers=auth_headers(admin)
    ).json()["id"]
    for plan_id, price in ((monthly, 50), (annual, 280)):
        client.post(
            "/api/subscriptions",
            json={"memberId": member_id, "planId": plan_id, "startDate": "2030-01-01", "price": price},
            headers=auth_headers(admin),
        )

    stats = client.get("/api/subscription-plans/stats", headers=auth_headers(admin)).json()
    assert stats["totalPlans"] == 2
    assert stats["activePlans"] == 2
    assert stats["totalSubscribers"] == 2
    assert stats["monthlyRevenue"] == 50
    assert stats["annualRevenue"] == 280
    assert stats["quarterlyRevenue"] == 0
