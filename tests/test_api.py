import pytest
from fastapi.testclient import TestClient

from main import create_app
from teamcomm.core.config import Settings
from teamcomm.core.security import utcnow
from teamcomm.crud import user_session as user_session_crud

PASSWORD = "secret123"


@pytest.fixture
def client(engine, seeded):
    """Test client sharing the seeded in-memory database."""
    app = create_app(settings=Settings(), engine=engine)
    with TestClient(app) as client:
        yield client


def _login(client, username):
    response = client.post("/api/auth/login", json={"username": username, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['session_token']}"}


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["schema_steps_failed"] == []

    def test_enums(self, client):
        response = client.get("/api/enums")
        assert response.status_code == 200
        priorities = {p["value"]: p for p in response.json()["priority"]}
        assert priorities["URGENT"]["display_name"] == "Urgent"
        assert priorities["URGENT"]["color_code"] == "#F44336"

    def test_client_config(self, client):
        response = client.get("/api/client-config")
        assert response.status_code == 200
        assert response.json() == {"refresh_interval": 10, "session_duration_hours": 8}


class TestAuthApi:
    def test_login_and_me(self, client):
        headers = _login(client, "jdoe")

        response = client.get("/api/auth/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["username"] == "jdoe"

    def test_bad_credentials(self, client):
        response = client.post("/api/auth/login", json={"username": "jdoe", "password": "nope"})
        assert response.status_code == 401

    def test_missing_token(self, client):
        response = client.get("/api/announcements")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_logout(self, client):
        headers = _login(client, "jdoe")

        assert client.post("/api/auth/logout", headers=headers).status_code == 204
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_expired_session(self, client, db):
        headers = _login(client, "jdoe")
        token = headers["Authorization"].split(" ", 1)[1]
        session = user_session_crud.get_by_token(db, token)
        session.expires_at = utcnow().replace(year=2000)
        db.commit()

        response = client.get("/api/announcements", headers=headers)

        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"


class TestAnnouncementsApi:
    def test_workspace_isolation(self, client, seeded):
        jdoe = _login(client, "jdoe")
        msmith = _login(client, "msmith")

        created = client.post(
            "/api/announcements",
            json={"title": "Deploy tonight", "content": "Expect downtime", "workspace_id": seeded.marketing.id},
            headers=jdoe,
        )
        assert created.status_code == 201
        body = created.json()
        assert body["workspace_id"] == seeded.engineering.id
        announcement_id = body["id"]

        assert client.get("/api/announcements", headers=msmith).json() == []
        assert client.get(f"/api/announcements/{announcement_id}", headers=msmith).status_code == 404
        refused = client.put(f"/api/announcements/{announcement_id}", json={"title": "Mine"}, headers=msmith)
        assert refused.status_code == 403

        unchanged = client.get(f"/api/announcements/{announcement_id}", headers=jdoe).json()
        assert unchanged["title"] == "Deploy tonight"

    def test_super_admin_workspace_header(self, client, seeded):
        jdoe = _login(client, "jdoe")
        admin = _login(client, "sys_admin")
        client.post("/api/announcements", json={"title": "Eng", "content": "x"}, headers=jdoe)

        everything = client.get("/api/announcements", headers={**admin, "X-Workspace-Id": "ALL"})
        marketing_only = client.get(
            "/api/announcements", headers={**admin, "X-Workspace-Id": str(seeded.marketing.id)}
        )

        assert [a["title"] for a in everything.json()] == ["Eng"]
        assert marketing_only.json() == []

    def test_super_admin_create_needs_workspace(self, client):
        admin = _login(client, "sys_admin")

        response = client.post("/api/announcements", json={"title": "Hi", "content": "x"}, headers=admin)

        assert response.status_code == 422
        assert response.json()["field"] == "workspace_id"

    def test_bad_workspace_header(self, client):
        headers = {**_login(client, "sys_admin"), "X-Workspace-Id": "marketing"}
        assert client.get("/api/announcements", headers=headers).status_code == 422

    def test_archive_flow(self, client):
        jdoe = _login(client, "jdoe")
        created = client.post("/api/announcements", json={"title": "Old", "content": "x"}, headers=jdoe).json()

        archived = client.post(f"/api/announcements/{created['id']}/archive", headers=jdoe)
        again = client.post(f"/api/announcements/{created['id']}/archive", headers=jdoe)

        assert archived.status_code == 200
        assert again.status_code == 200
        assert again.json()["is_archived"] is True
        assert client.get("/api/announcements", headers=jdoe).json() == []
        listed = client.get("/api/announcements", params={"include_archived": True}, headers=jdoe).json()
        assert [a["id"] for a in listed] == [created["id"]]


class TestOtherResourcesApi:
    def test_target_date_status(self, client):
        jdoe = _login(client, "jdoe")
        created = client.post(
            "/api/target-dates",
            json={"project_name": "Platform", "task_name": "Ship", "target_date": "2030-01-01T09:00:00Z"},
            headers=jdoe,
        ).json()

        response = client.patch(
            f"/api/target-dates/{created['id']}/status", json={"status": "COMPLETED"}, headers=jdoe
        )

        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"

    def test_deployment_comments(self, client):
        jdoe = _login(client, "jdoe")
        deployment = client.post(
            "/api/deployments",
            json={
                "release_name": "Platform",
                "version": "2.0.0",
                "deployment_datetime": "2030-01-01T09:00:00Z",
                "ticket_number": "OPS-7",
            },
            headers=jdoe,
        ).json()

        posted = client.post(
            f"/api/deployments/{deployment['id']}/comments", json={"comment_text": "Looks good"}, headers=jdoe
        )
        count = client.get(f"/api/deployments/{deployment['id']}/comments/count", headers=jdoe)

        assert posted.status_code == 201
        assert count.json() == {"count": 1}

    def test_workspaces_for_regular_user(self, client):
        assert client.get("/api/workspaces", headers=_login(client, "jdoe")).json() == []

    def test_admin_creates_user(self, client, seeded):
        response = client.post(
            "/api/users",
            json={"username": "newbie", "password": "secret123", "full_name": "New Bie"},
            headers=_login(client, "eng_admin"),
        )
        assert response.status_code == 201
        assert response.json()["workspace_id"] == seeded.engineering.id
