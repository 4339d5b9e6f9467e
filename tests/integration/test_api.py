"""HTTP contract: token headers, gate responses, and CRUD routes."""

from datetime import timedelta
from uuid import uuid4

import pytest
from pymongo.errors import ServerSelectionTimeoutError
from structlog.testing import capture_logs

from postboard.core.modules.session.models import Session
from postboard.core.modules.token.signer import TokenSigner
from postboard.utils import now

EMAIL = "alice@example.com"
PASSWORD = "secret123"


async def _register(client, email=EMAIL, password=PASSWORD):
    resp = await client.post("/api/v1/users", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp


def _session_headers(resp):
    return {"_id": resp.json()["id"], "x-refresh-token": resp.headers["x-refresh-token"]}


def _access_headers(resp):
    return {"x-access-token": resp.headers["x-access-token"]}


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


class TestAuthRoutes:
    @pytest.mark.asyncio
    async def test_register_returns_user_and_token_headers(self, client):
        resp = await _register(client)
        body = resp.json()
        assert body["email"] == EMAIL
        assert "password_hash" not in body
        assert "sessions" not in body
        assert resp.headers["x-access-token"]
        assert resp.headers["x-refresh-token"]

    @pytest.mark.asyncio
    async def test_register_empty_password(self, client):
        resp = await client.post("/api/v1/users", json={"email": EMAIL, "password": ""})
        assert resp.status_code == 400
        assert resp.json()["type"] == "validation_error"
        assert "at least 8" in resp.json()["message"]

    @pytest.mark.asyncio
    async def test_register_missing_field(self, client):
        resp = await client.post("/api/v1/users", json={"email": EMAIL})
        assert resp.status_code == 400
        body = resp.json()
        assert set(body) == {"message", "type"}
        assert body["type"] == "validation_error"
        assert body["message"].startswith("password")

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client):
        await _register(client)
        resp = await client.post("/api/v1/users", json={"email": EMAIL, "password": PASSWORD})
        assert resp.status_code == 400
        assert resp.json()["type"] == "duplicate_email"

    @pytest.mark.asyncio
    async def test_login_sets_both_tokens(self, client):
        registered = await _register(client)
        resp = await client.post("/api/v1/users/login", json={"email": EMAIL, "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json()["id"] == registered.json()["id"]
        assert resp.headers["x-refresh-token"] != registered.headers["x-refresh-token"]
        assert resp.headers["x-access-token"]

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client):
        await _register(client)
        resp = await client.post("/api/v1/users/login", json={"email": EMAIL, "password": "wrong-password"})
        assert resp.status_code == 401
        assert resp.json()["type"] == "invalid_credentials"
        assert "x-access-token" not in resp.headers
        assert "x-refresh-token" not in resp.headers

    @pytest.mark.asyncio
    async def test_refresh_access_token(self, client):
        registered = await _register(client)
        resp = await client.get("/api/v1/users/me/access-token", headers=_session_headers(registered))
        assert resp.status_code == 200
        access_token = resp.json()["access_token"]
        assert resp.headers["x-access-token"] == access_token

        created = await client.post(
            "/api/v1/posts", json={"title": "Hello", "body": "World"}, headers={"x-access-token": access_token}
        )
        assert created.status_code == 201

    @pytest.mark.asyncio
    async def test_refresh_without_headers(self, client):
        resp = await client.get("/api/v1/users/me/access-token")
        assert resp.status_code == 401
        assert resp.json()["type"] == "session_not_found"

    @pytest.mark.asyncio
    async def test_refresh_with_expired_session(self, client, database):
        registered = await _register(client)
        user_id = registered.json()["id"]
        users = database.get_collection("users")
        doc = users.docs[0]
        doc["sessions"] = [Session(token="old-token", expires_at=now() - timedelta(minutes=1)).model_dump()]

        resp = await client.get("/api/v1/users/me/access-token", headers={"_id": user_id, "x-refresh-token": "old-token"})
        assert resp.status_code == 401
        body = resp.json()
        assert body["type"] == "session_not_found"
        assert "expired" in body["message"]

    @pytest.mark.asyncio
    async def test_logout_invalidates_only_that_session(self, client):
        registered = await _register(client)
        other = await client.post("/api/v1/users/login", json={"email": EMAIL, "password": PASSWORD})

        resp = await client.delete("/api/v1/users/session", headers=_session_headers(registered))
        assert resp.status_code == 204

        again = await client.get("/api/v1/users/me/access-token", headers=_session_headers(registered))
        assert again.status_code == 401
        still = await client.get("/api/v1/users/me/access-token", headers=_session_headers(other))
        assert still.status_code == 200


class TestAuthenticateGate:
    @pytest.mark.asyncio
    async def test_missing_access_token(self, client):
        resp = await client.post("/api/v1/posts", json={"title": "t", "body": "b"})
        assert resp.status_code == 401
        assert resp.json()["type"] == "authentication_error"

    @pytest.mark.asyncio
    async def test_wrongly_signed_access_token(self, client, clock):
        forged = TokenSigner("not-the-server-secret-0123456789abcdef", timedelta(minutes=15), clock=clock)
        resp = await client.post(
            "/api/v1/posts", json={"title": "t", "body": "b"}, headers={"x-access-token": forged.issue(uuid4())}
        )
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid access token signature", "type": "invalid_signature"}

    @pytest.mark.asyncio
    async def test_expired_access_token(self, client, config):
        issued_long_ago = now() - timedelta(hours=1)
        signer = TokenSigner(config.access_token_secret, timedelta(minutes=15), clock=lambda: issued_long_ago)
        resp = await client.post(
            "/api/v1/posts", json={"title": "t", "body": "b"}, headers={"x-access-token": signer.issue(uuid4())}
        )
        assert resp.status_code == 401
        assert resp.json()["type"] == "token_expired"


class TestUserRoutes:
    @pytest.mark.asyncio
    async def test_update_own_email_and_password(self, client):
        registered = await _register(client)
        user_id = registered.json()["id"]
        resp = await client.patch(
            f"/api/v1/users/{user_id}",
            json={"email": "alice@new.example.com", "password": "new-secret-1", "sessions": []},
            headers=_access_headers(registered),
        )
        assert resp.status_code == 200
        assert resp.json()["email"] == "alice@new.example.com"

        login = await client.post("/api/v1/users/login", json={"email": "alice@new.example.com", "password": "new-secret-1"})
        assert login.status_code == 200

        # Sessions in the body are ignored, so the original session is still valid
        still = await client.get("/api/v1/users/me/access-token", headers=_session_headers(registered))
        assert still.status_code == 200

    @pytest.mark.asyncio
    async def test_cannot_update_another_user(self, client):
        alice = await _register(client)
        bob = await _register(client, email="bob@example.com")
        resp = await client.patch(
            f"/api/v1/users/{bob.json()['id']}", json={"email": "evil@example.com"}, headers=_access_headers(alice)
        )
        assert resp.status_code == 403
        assert resp.json()["type"] == "access_denied"

    @pytest.mark.asyncio
    async def test_cannot_take_existing_email(self, client):
        alice = await _register(client)
        await _register(client, email="bob@example.com")
        resp = await client.patch(
            f"/api/v1/users/{alice.json()['id']}", json={"email": "bob@example.com"}, headers=_access_headers(alice)
        )
        assert resp.status_code == 400
        assert resp.json()["type"] == "duplicate_email"


class TestPostAndCommentRoutes:
    @pytest.mark.asyncio
    async def test_post_lifecycle(self, client):
        author = await _register(client)
        headers = _access_headers(author)

        created = await client.post("/api/v1/posts", json={"title": "First", "body": "Hello"}, headers=headers)
        assert created.status_code == 201
        post = created.json()
        assert post["author_id"] == author.json()["id"]

        listed = await client.get("/api/v1/posts")
        assert [p["id"] for p in listed.json()] == [post["id"]]

        updated = await client.patch(f"/api/v1/posts/{post['id']}", json={"title": "Renamed"}, headers=headers)
        assert updated.status_code == 200
        assert updated.json()["title"] == "Renamed"
        assert updated.json()["body"] == "Hello"
        assert updated.json()["edited_at"] is not None

        comment = await client.post(
            f"/api/v1/posts/{post['id']}/comments", json={"name": "Bob", "body": "Nice"}, headers=headers
        )
        assert comment.status_code == 201
        comments = await client.get(f"/api/v1/posts/{post['id']}/comments")
        assert [c["body"] for c in comments.json()] == ["Nice"]

        deleted = await client.delete(f"/api/v1/posts/{post['id']}", headers=headers)
        assert deleted.status_code == 200
        assert deleted.json()["id"] == post["id"]

        missing = await client.get(f"/api/v1/posts/{post['id']}")
        assert missing.status_code == 404
        assert missing.json()["type"] == "not_found"
        assert (await client.get(f"/api/v1/posts/{post['id']}/comments")).json() == []

    @pytest.mark.asyncio
    async def test_only_author_can_modify_post(self, client):
        author = await _register(client)
        other = await _register(client, email="bob@example.com")
        post = (
            await client.post("/api/v1/posts", json={"title": "Mine", "body": "x"}, headers=_access_headers(author))
        ).json()

        resp = await client.delete(f"/api/v1/posts/{post['id']}", headers=_access_headers(other))
        assert resp.status_code == 403
        resp = await client.patch(f"/api/v1/posts/{post['id']}", json={"title": "Theirs"}, headers=_access_headers(other))
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_comment_on_missing_post(self, client):
        author = await _register(client)
        resp = await client.post(
            f"/api/v1/posts/{uuid4()}/comments", json={"name": "Bob", "body": "Hi"}, headers=_access_headers(author)
        )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_post_id(self, client):
        resp = await client.get("/api/v1/posts/not-a-uuid")
        assert resp.status_code == 400
        assert resp.json()["type"] == "validation_error"
        assert resp.json()["message"].startswith("path.post_id")

    @pytest.mark.asyncio
    async def test_storage_failure_returns_503(self, client, database, monkeypatch):
        author = await _register(client)
        post = (
            await client.post("/api/v1/posts", json={"title": "Up", "body": "x"}, headers=_access_headers(author))
        ).json()

        async def failing(*_args, **_kwargs):
            raise ServerSelectionTimeoutError("no servers available")

        monkeypatch.setattr(database.get_collection("posts"), "find_one", failing)

        resp = await client.get(f"/api/v1/posts/{post['id']}")
        assert resp.status_code == 503
        assert resp.json()["type"] == "persistence_error"

        monkeypatch.undo()
        monkeypatch.setattr(database.get_collection("comments"), "insert_one", failing)
        resp = await client.post(
            f"/api/v1/posts/{post['id']}/comments", json={"name": "Bob", "body": "Hi"}, headers=_access_headers(author)
        )
        assert resp.status_code == 503
        assert resp.json()["type"] == "persistence_error"


class TestRequestLogging:
    @pytest.mark.asyncio
    async def test_each_request_is_logged(self, client):
        with capture_logs() as logs:
            await client.get("/health")
        [completed] = [entry for entry in logs if entry["event"] == "request_completed"]
        assert completed["status_code"] == 200
        assert completed["log_level"] == "info"
