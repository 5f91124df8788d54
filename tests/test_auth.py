"""Tests for team/admin login and session handling."""

from __future__ import annotations

from fastapi import status
from fastapi.testclient import TestClient


class TestTeamLogin:
    """Tests for POST /auth/team."""

    def test_valid_access_code(self, client: TestClient):
        response = client.post("/auth/team", json={"accessCode": "123456"})

        assert response.status_code == status.HTTP_200_OK
        team = response.json()["team"]
        assert team["id"] == 1
        assert team["cashBalance"] == "100000.00"
        assert "accessCode" not in team
        assert "session" in response.cookies

    def test_invalid_access_code(self, client: TestClient):
        response = client.post("/auth/team", json={"accessCode": "nope"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "INVALID_ACCESS_CODE"

    def test_missing_access_code(self, client: TestClient):
        response = client.post("/auth/team", json={})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_session_reports_team(self, client: TestClient):
        client.post("/auth/team", json={"accessCode": "yedek1"})

        data = client.get("/auth/me").json()
        assert data == {"authenticated": True, "role": "team", "teamId": 31}


class TestAdminLogin:
    """Tests for POST /auth/admin."""

    def test_password_field(self, client: TestClient):
        response = client.post("/auth/admin", json={"password": "admin123"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True}

    def test_code_field_is_accepted(self, client: TestClient):
        response = client.post("/auth/admin", json={"code": "admin123"})
        assert response.status_code == status.HTTP_200_OK
        assert client.get("/auth/me").json()["role"] == "admin"

    def test_wrong_password(self, client: TestClient):
        response = client.post("/auth/admin", json={"password": "admin124"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "INVALID_PASSWORD"
        assert "session" not in response.cookies


class TestSession:
    def test_anonymous(self, client: TestClient):
        assert client.get("/auth/me").json() == {
            "authenticated": False,
            "role": None,
            "teamId": None,
        }

    def test_tampered_cookie_is_ignored(self, client: TestClient):
        client.cookies.set("session", "not-a-token")
        assert client.get("/auth/me").json()["authenticated"] is False

    def test_logout_clears_session(self, client: TestClient):
        client.post("/auth/team", json={"accessCode": "123456"})

        response = client.post("/auth/logout")

        assert response.status_code == status.HTTP_200_OK
        assert client.get("/auth/me").json()["authenticated"] is False


class TestCredentialUpdates:
    """Admin credential management."""

    def test_new_admin_password_replaces_old(self, admin_client: TestClient):
        response = admin_client.put(
            "/admin/update-admin-password", json={"newPassword": "s3cret!"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["persisted"] is False

        fresh = admin_client.post("/auth/admin", json={"password": "admin123"})
        assert fresh.status_code == status.HTTP_401_UNAUTHORIZED
        accepted = admin_client.post("/auth/admin", json={"password": "s3cret!"})
        assert accepted.status_code == status.HTTP_200_OK

    def test_short_admin_password(self, admin_client: TestClient):
        response = admin_client.put("/admin/update-admin-password", json={"newPassword": "abc"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_team_access_code_update(self, admin_client: TestClient):
        response = admin_client.put(
            "/admin/update-team-password", json={"teamId": 2, "newAccessCode": "fresh42"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["team"]["accessCode"] == "fresh42"
        assert admin_client.post("/auth/team", json={"accessCode": "fresh42"}).json()["team"]["id"] == 2

    def test_access_code_in_use(self, admin_client: TestClient):
        response = admin_client.put(
            "/admin/update-team-password", json={"teamId": 2, "newAccessCode": "123456"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "ACCESS_CODE_TAKEN"

    def test_access_code_too_short(self, admin_client: TestClient):
        response = admin_client.put(
            "/admin/update-team-password", json={"teamId": 2, "newAccessCode": "abc"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_team_name_update(self, admin_client: TestClient):
        response = admin_client.put(
            "/admin/update-team-name", json={"teamId": 3, "newName": "  Boğalar  "}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["team"]["name"] == "Boğalar"

    def test_unknown_team(self, admin_client: TestClient):
        response = admin_client.put(
            "/admin/update-team-name", json={"teamId": 999, "newName": "Ghost"}
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_team_session_cannot_change_credentials(self, team_client: TestClient):
        response = team_client.put(
            "/admin/update-admin-password", json={"newPassword": "hijacked"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "ADMIN_REQUIRED"
