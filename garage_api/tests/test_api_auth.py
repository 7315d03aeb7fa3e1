"""Registration, login, token rotation, profile and session endpoints."""
from conftest import PASSWORD, bearer, login, register

CHROME = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


def error_type(res) -> str:
    return res.json()["error"]["type"]


class TestRegisterAndLogin:

    def test_register_normalises_email(self, client):
        user = register(client, "  Alice@Example.COM ")
        assert user["email"] == "alice@example.com"
        assert user["first_name"] == "Test"

    def test_duplicate_email_is_conflict(self, client):
        register(client, "bob@example.com")
        res = client.post(
            "/api/v1/auth/register",
            json={"email": "BOB@example.com", "password": PASSWORD, "first_name": "B", "last_name": "C"},
        )
        assert res.status_code == 409
        assert error_type(res) == "User.EmailNotUnique"

    def test_short_password_rejected(self, client):
        res = client.post(
            "/api/v1/auth/register",
            json={"email": "short@example.com", "password": "abc", "first_name": "S", "last_name": "P"},
        )
        assert res.status_code == 400
        assert error_type(res) == "User.PasswordTooShort"

    def test_wrong_password(self, client):
        register(client, "carol@example.com")
        res = client.post("/api/v1/auth/login", json={"email": "carol@example.com", "password": "nope-nope"})
        assert res.status_code == 401
        assert error_type(res) == "Auth.CredentialsInvalid"

    def test_login_returns_token_pair(self, client):
        register(client, "dan@example.com")
        tokens = login(client, "dan@example.com")
        assert tokens["token_type"] == "bearer"
        assert tokens["access_token"]
        assert tokens["refresh_token"]
        assert client.get("/api/v1/users/me", headers=bearer(tokens)).json()["email"] == "dan@example.com"

    def test_protected_route_requires_token(self, client):
        res = client.get("/api/v1/users/me")
        assert res.status_code == 401
        res = client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert res.status_code == 401
        assert error_type(res) == "Auth.TokenInvalid"

    def test_error_envelope_has_correlation_id(self, client):
        res = client.get("/api/v1/users/me", headers={"X-Correlation-ID": "abc-123"})
        assert res.headers["X-Correlation-ID"] == "abc-123"
        body = res.json()
        assert body["correlation_id"] == "abc-123"
        assert body["status"] == 401
        assert body["path"] == "/api/v1/users/me"


class TestRefreshTokens:

    def test_rotation(self, client):
        register(client, "erin@example.com")
        first = login(client, "erin@example.com")

        res = client.post("/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
        assert res.status_code == 200
        second = res.json()
        assert second["refresh_token"] != first["refresh_token"]
        assert client.get("/api/v1/users/me", headers=bearer(second)).status_code == 200

    def test_reuse_revokes_every_session(self, client):
        register(client, "frank@example.com")
        first = login(client, "frank@example.com")
        second = client.post("/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]}).json()

        reused = client.post("/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
        assert reused.status_code == 401
        assert error_type(reused) == "Auth.TokenRevoked"

        res = client.post("/api/v1/auth/refresh", json={"refresh_token": second["refresh_token"]})
        assert res.status_code == 401

    def test_unknown_token(self, client):
        res = client.post("/api/v1/auth/refresh", json={"refresh_token": "does-not-exist"})
        assert res.status_code == 401
        assert error_type(res) == "Auth.TokenInvalid"

    def test_logout_ends_session(self, client):
        register(client, "gina@example.com")
        tokens = login(client, "gina@example.com")
        assert client.post("/api/v1/auth/logout", json={"refresh_token": tokens["refresh_token"]}).status_code == 204
        res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 401

    def test_logout_unknown_token_is_ignored(self, client):
        assert client.post("/api/v1/auth/logout", json={"refresh_token": "whatever"}).status_code == 204


class TestChangePassword:

    def test_change_and_login_with_new_password(self, client):
        register(client, "hank@example.com")
        headers = bearer(login(client, "hank@example.com"))
        res = client.post(
            "/api/v1/auth/change-password",
            json={"current_password": PASSWORD, "new_password": "BrandNew456"},
            headers=headers,
        )
        assert res.status_code == 204
        login(client, "hank@example.com", "BrandNew456")

    def test_wrong_current_password(self, client):
        register(client, "ivy@example.com")
        headers = bearer(login(client, "ivy@example.com"))
        res = client.post(
            "/api/v1/auth/change-password",
            json={"current_password": "incorrect", "new_password": "BrandNew456"},
            headers=headers,
        )
        assert res.status_code == 400
        assert error_type(res) == "Auth.PasswordInvalid"

    def test_same_password_rejected(self, client):
        register(client, "jack@example.com")
        headers = bearer(login(client, "jack@example.com"))
        res = client.post(
            "/api/v1/auth/change-password",
            json={"current_password": PASSWORD, "new_password": PASSWORD},
            headers=headers,
        )
        assert res.status_code == 400
        assert error_type(res) == "User.PasswordSameAsOld"

    def test_logout_all_devices_keeps_current_session(self, client):
        register(client, "kate@example.com")
        current = login(client, "kate@example.com")
        other = login(client, "kate@example.com")
        res = client.post(
            "/api/v1/auth/change-password",
            json={"current_password": PASSWORD, "new_password": "BrandNew456", "logout_all_devices": True},
            headers=bearer(current),
        )
        assert res.status_code == 204

        sessions = client.get("/api/v1/users/me/sessions", headers=bearer(current)).json()
        assert len(sessions) == 1
        assert sessions[0]["is_current"]
        assert client.post("/api/v1/auth/refresh", json={"refresh_token": other["refresh_token"]}).status_code == 401


class TestProfileAndSessions:

    def test_update_profile(self, client, auth_headers):
        res = client.put(
            "/api/v1/users/me", json={"first_name": " Lena ", "last_name": "Smith"}, headers=auth_headers
        )
        assert res.status_code == 200
        assert res.json()["first_name"] == "Lena"

    def test_sessions_flag_current_and_device(self, client):
        register(client, "mia@example.com")
        current = login(client, "mia@example.com")
        client.post(
            "/api/v1/auth/login",
            json={"email": "mia@example.com", "password": PASSWORD},
            headers={"User-Agent": CHROME},
        )

        sessions = client.get("/api/v1/users/me/sessions", headers=bearer(current)).json()
        assert len(sessions) == 2
        assert sum(s["is_current"] for s in sessions) == 1
        assert "Chrome on Windows" in {s["device_name"] for s in sessions}

    def test_cannot_end_current_session(self, client):
        register(client, "ned@example.com")
        headers = bearer(login(client, "ned@example.com"))
        current = next(
            s for s in client.get("/api/v1/users/me/sessions", headers=headers).json() if s["is_current"]
        )
        res = client.delete(f"/api/v1/users/me/sessions/{current['id']}", headers=headers)
        assert res.status_code == 400
        assert error_type(res) == "User.SessionsDelete"

    def test_end_other_session(self, client):
        register(client, "olga@example.com")
        headers = bearer(login(client, "olga@example.com"))
        login(client, "olga@example.com")
        other = next(
            s for s in client.get("/api/v1/users/me/sessions", headers=headers).json() if not s["is_current"]
        )
        assert client.delete(f"/api/v1/users/me/sessions/{other['id']}", headers=headers).status_code == 204
        assert len(client.get("/api/v1/users/me/sessions", headers=headers).json()) == 1

    def test_unknown_session(self, client, auth_headers):
        res = client.delete(
            "/api/v1/users/me/sessions/00000000-0000-0000-0000-000000000000", headers=auth_headers
        )
        assert res.status_code == 404

    def test_end_all_other_sessions(self, client):
        register(client, "pia@example.com")
        headers = bearer(login(client, "pia@example.com"))
        login(client, "pia@example.com")
        login(client, "pia@example.com")
        assert client.delete("/api/v1/users/me/sessions", headers=headers).status_code == 204
        assert len(client.get("/api/v1/users/me/sessions", headers=headers).json()) == 1

    def test_delete_account(self, client, make_user, make_vehicle):
        headers = make_user("quinn@example.com")
        make_vehicle(headers)
        assert client.delete("/api/v1/users/me", headers=headers).status_code == 204
        res = client.post("/api/v1/auth/login", json={"email": "quinn@example.com", "password": PASSWORD})
        assert res.status_code == 401
