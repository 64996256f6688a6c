from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import deps
from app.api.auth import router as auth_router
from app.api.records import router as records_router


def _build_test_client(session_factory) -> TestClient:
    app = FastAPI()
    app.include_router(auth_router, prefix="/api")
    app.include_router(records_router, prefix="/api")

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[deps.get_db] = override_get_db
    return TestClient(app)


def _auth_headers(client: TestClient, email: str) -> dict[str, str]:
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": "TestPass123!"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_records_require_authentication(session_factory):
    client = _build_test_client(session_factory)

    assert client.get("/api/records").status_code == 401
    assert client.post("/api/records", json={"title": "x"}).status_code == 401


def test_record_crud_flow(session_factory):
    client = _build_test_client(session_factory)
    headers = _auth_headers(client, "writer@example.com")

    created = client.post("/api/records", json={"title": "First", "content": "hello"}, headers=headers)
    assert created.status_code == 201
    record = created.json()
    assert record["title"] == "First"
    assert record["content"] == "hello"

    second = client.post("/api/records", json={"title": "Second"}, headers=headers)
    assert second.json()["content"] is None

    listed = client.get("/api/records", headers=headers).json()
    assert [item["title"] for item in listed] == ["Second", "First"]

    renamed = client.put(f"/api/records/{record['id']}", json={"title": "Renamed"}, headers=headers)
    assert renamed.status_code == 200
    assert renamed.json()["title"] == "Renamed"
    assert renamed.json()["content"] == "hello"

    cleared = client.put(f"/api/records/{record['id']}", json={"content": None}, headers=headers)
    assert cleared.json()["title"] == "Renamed"
    assert cleared.json()["content"] is None

    deleted = client.delete(f"/api/records/{record['id']}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"ok": True}
    assert client.delete(f"/api/records/{record['id']}", headers=headers).status_code == 404
    assert len(client.get("/api/records", headers=headers).json()) == 1


def test_records_are_scoped_to_their_owner(session_factory):
    client = _build_test_client(session_factory)
    owner = _auth_headers(client, "owner@example.com")
    intruder = _auth_headers(client, "intruder@example.com")

    record_id = client.post("/api/records", json={"title": "Private"}, headers=owner).json()["id"]

    assert client.get("/api/records", headers=intruder).json() == []
    assert client.put(f"/api/records/{record_id}", json={"title": "Mine"}, headers=intruder).status_code == 404
    assert client.delete(f"/api/records/{record_id}", headers=intruder).status_code == 404


def test_record_title_must_not_be_empty(session_factory):
    client = _build_test_client(session_factory)
    headers = _auth_headers(client, "validator@example.com")

    assert client.post("/api/records", json={"title": ""}, headers=headers).status_code == 422
