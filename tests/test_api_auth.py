"""
HTTP tests for the auth and profile endpoints: cookies, the request gate and
the error envelope.
"""
from datetime import timedelta

from utils.security import ACCESS


def _register(client, email="a@x.com", password="secret1", name="A"):
    return client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})


class TestRegisterEndpoint:
    def test_register_sets_both_cookies(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.get_json()
        assert body["data"]["email"] == "a@x.com"
        assert body["data"]["role"] == "user"
        assert "password" not in body["data"] and "password_hash" not in body["data"]
        assert client.get_cookie("access_token").value == body["access_token"]
        assert client.get_cookie("refresh_token") is not None
        cookies = response.headers.getlist("Set-Cookie")
        assert all("SameSite=Strict" in c for c in cookies)

    def test_duplicate_email(self, client):
        _register(client)

        response = _register(client, name="B")

        assert response.status_code == 409
        assert response.get_json()["error"] == "CONFLICT"

    def test_validation_envelope(self, client):
        response = client.post("/api/v1/auth/register", json={"email": "not-an-email", "password": "1"})

        assert response.status_code == 422
        body = response.get_json()
        assert body["error"] == "VALIDATION_ERROR"
        assert set(body["details"]) >= {"name", "email", "password"}


class TestLoginEndpoint:
    def test_login(self, client):
        registered = _register(client).get_json()["access_token"]

        response = client.post("/api/v1/auth/login", json={"email": "A@x.com", "password": "secret1"})

        assert response.status_code == 200
        assert response.get_json()["access_token"] != registered

    def test_bad_credentials(self, client):
        _register(client)

        wrong = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "nope-nope"})
        unknown = client.post("/api/v1/auth/login", json={"email": "b@x.com", "password": "secret1"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json() == unknown.get_json()


class TestRequestGate:
    def test_no_token(self, client):
        response = client.get("/api/v1/users/me")

        assert response.status_code == 401
        assert response.get_json()["error"] == "UNAUTHENTICATED"

    def test_header_token(self, app, bearer):
        token = _register(app.test_client()).get_json()["access_token"]

        response = app.test_client().get("/api/v1/users/me", headers=bearer(token))

        assert response.status_code == 200
        assert response.get_json()["data"]["email"] == "a@x.com"

    def test_cookie_token(self, client):
        _register(client)

        response = client.get("/api/v1/users/me")

        assert response.status_code == 200

    def test_garbage_token(self, app, bearer):
        response = app.test_client().get("/api/v1/users/me", headers=bearer("not.a.token"))

        assert response.status_code == 401
        assert response.get_json()["error"] == "UNAUTHENTICATED"

    def test_expired_token_is_distinguishable(self, app, codec, bearer):
        user_id = _register(app.test_client()).get_json()["data"]["id"]
        stale = codec.sign({"sub": user_id, "type": ACCESS}, codec.secrets[ACCESS], timedelta(seconds=-1))

        response = app.test_client().get("/api/v1/users/me", headers=bearer(stale))

        assert response.status_code == 401
        assert response.get_json()["error"] == "TOKEN_EXPIRED"


class TestRefreshEndpoint:
    def test_refresh_from_cookie(self, client):
        _register(client)

        response = client.post("/api/v1/auth/refresh")

        assert response.status_code == 200
        token = response.get_json()["access_token"]
        assert client.get_cookie("access_token").value == token

    def test_refresh_from_body(self, app):
        first = app.test_client()
        _register(first)
        refresh_token = first.get_cookie("refresh_token").value

        response = app.test_client().post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})

        assert response.status_code == 200

    def test_missing_refresh_token(self, client):
        response = client.post("/api/v1/auth/refresh")

        assert response.status_code == 401
        assert response.get_json()["error"] == "UNAUTHENTICATED"

    def test_invalid_refresh_token(self, client):
        response = client.post("/api/v1/auth/refresh", json={"refresh_token": "garbage"})

        assert response.get_json()["error"] == "INVALID_SIGNATURE"

    def test_login_elsewhere_revokes_refresh_token(self, app):
        laptop, phone = app.test_client(), app.test_client()
        _register(laptop)
        phone.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "secret1"})

        stale = laptop.post("/api/v1/auth/refresh")
        fresh = phone.post("/api/v1/auth/refresh")

        assert stale.status_code == 401
        assert stale.get_json()["error"] == "TOKEN_REVOKED"
        assert fresh.status_code == 200


class TestLogoutEndpoint:
    def test_logout_clears_cookies_and_revokes(self, client):
        _register(client)
        refresh_token = client.get_cookie("refresh_token").value

        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert client.get_cookie("access_token") is None
        assert client.get_cookie("refresh_token") is None
        replay = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        assert replay.get_json()["error"] == "TOKEN_REVOKED"

    def test_anonymous_logout(self, client):
        assert client.post("/api/v1/auth/logout").status_code == 200

    def test_expired_access_cookie_still_logs_out(self, client, codec):
        user_id = _register(client).get_json()["data"]["id"]
        refresh_token = client.get_cookie("refresh_token").value
        stale = codec.sign({"sub": user_id, "type": ACCESS}, codec.secrets[ACCESS], timedelta(seconds=-10))
        client.set_cookie("access_token", stale)

        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert client.get_cookie("access_token") is None
        assert client.get_cookie("refresh_token") is None
        replay = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        assert replay.get_json()["error"] == "TOKEN_REVOKED"

    def test_garbled_access_token_still_logs_out(self, client, bearer):
        _register(client)
        refresh_token = client.get_cookie("refresh_token").value

        response = client.post("/api/v1/auth/logout", headers=bearer("not.a.token"))

        assert response.status_code == 200
        assert client.get_cookie("refresh_token") is None
        replay = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        assert replay.get_json()["error"] == "TOKEN_REVOKED"

    def test_refresh_token_in_body_identifies_the_session(self, app, codec, bearer):
        first = app.test_client()
        user_id = _register(first).get_json()["data"]["id"]
        refresh_token = first.get_cookie("refresh_token").value
        stale = codec.sign({"sub": user_id, "type": ACCESS}, codec.secrets[ACCESS], timedelta(seconds=-10))

        response = app.test_client().post("/api/v1/auth/logout", json={"refresh_token": refresh_token},
                                          headers=bearer(stale))

        assert response.status_code == 200
        assert first.post("/api/v1/auth/refresh").get_json()["error"] == "TOKEN_REVOKED"

    def test_expired_token_without_refresh_token(self, app, codec, bearer):
        user_id = _register(app.test_client()).get_json()["data"]["id"]
        stale = codec.sign({"sub": user_id, "type": ACCESS}, codec.secrets[ACCESS], timedelta(seconds=-10))

        response = app.test_client().post("/api/v1/auth/logout", headers=bearer(stale))

        assert response.status_code == 200
        cookies = response.headers.getlist("Set-Cookie")
        assert any(c.startswith("access_token=;") for c in cookies)
        assert any(c.startswith("refresh_token=;") for c in cookies)


class TestChangePasswordEndpoint:
    def test_change_password_rotates_the_session(self, client):
        _register(client)
        old_refresh = client.get_cookie("refresh_token").value

        response = client.post("/api/v1/auth/change-password",
                               json={"current_password": "secret1", "new_password": "secret2"})

        assert response.status_code == 200
        assert client.get_cookie("refresh_token").value != old_refresh
        assert client.post("/api/v1/auth/refresh").status_code == 200
        other = client.application.test_client()
        replay = other.post("/api/v1/auth/refresh", json={"refresh_token": old_refresh})
        assert replay.get_json()["error"] == "TOKEN_REVOKED"
        assert other.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "secret1"}).status_code == 401
        assert other.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "secret2"}).status_code == 200

    def test_wrong_current_password(self, client):
        _register(client)

        response = client.post("/api/v1/auth/change-password",
                               json={"current_password": "wrong-one", "new_password": "secret2"})

        assert response.status_code == 401
        assert response.get_json()["error"] == "INVALID_CREDENTIALS"

    def test_short_new_password(self, client):
        _register(client)

        response = client.post("/api/v1/auth/change-password",
                               json={"current_password": "secret1", "new_password": "abc"})

        assert response.status_code == 422

    def test_requires_login(self, client):
        response = client.post("/api/v1/auth/change-password",
                               json={"current_password": "secret1", "new_password": "secret2"})

        assert response.status_code == 401

    def test_profile_update_does_not_take_a_password(self, client):
        _register(client)

        response = client.put("/api/v1/users/me", json={"password": "secret2"})

        assert response.status_code == 422


class TestProfileEndpoint:
    def test_update_me(self, client):
        _register(client)
        _register(client.application.test_client(), email="b@x.com", name="B")

        ok = client.put("/api/v1/users/me", json={"name": "Alice"})
        taken = client.put("/api/v1/users/me", json={"email": "b@x.com"})

        assert ok.status_code == 200
        assert ok.get_json()["data"]["name"] == "Alice"
        assert taken.status_code == 409


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.get_json()["database"] == "ok"

    def test_unknown_route_envelope(self, client):
        response = client.get("/api/v1/nope")

        assert response.status_code == 404
        assert response.get_json()["error"] == "NOT_FOUND"
