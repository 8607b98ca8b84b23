"""
HTTP tests: envelope shape, status codes and the end-to-end flows.
"""

import asyncio

from fastapi.testclient import TestClient

from inkpress.api.app import create_app
from inkpress.core.models import Role
from inkpress.services import PostLifecycle
from inkpress.storage import Collections

from conftest import PASSWORD

POST_BODY = {"title": "Hello World", "content": "This is the body of a post, long enough."}


def register(client, username):
    response = client.post(
        "/api/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": PASSWORD},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_unexpected_error_is_a_generic_500(settings, store, seed_user, auth_header, monkeypatch):
    async def explode(self, ctx, payload):
        raise RuntimeError("database on fire")

    monkeypatch.setattr(PostLifecycle, "create", explode)
    client = TestClient(create_app(settings, store), raise_server_exceptions=False)
    alice = seed_user("alice")

    response = client.post("/api/posts", json=POST_BODY, headers=auth_header(alice))
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error"}


def test_method_not_allowed_keeps_allow_header(client):
    response = client.delete("/api/posts")
    assert response.status_code == 405
    assert response.json()["success"] is False
    assert "GET" in response.headers["allow"]


# =============================================================================
# Auth
# =============================================================================


class TestAuthEndpoints:
    def test_register_and_me(self, client):
        user, headers = register(client, "alice")
        assert user["role"] == "user"
        assert "password_hash" not in user

        me = client.get("/api/auth/me", headers=headers).json()
        assert me["success"] is True
        assert me["data"]["user"]["username"] == "alice"

    def test_duplicate_email(self, client):
        register(client, "alice")
        response = client.post(
            "/api/auth/register",
            json={"username": "alice2", "email": "ALICE@example.com", "password": PASSWORD},
        )
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email already registered"}

    def test_register_validation(self, client):
        response = client.post("/api/auth/register", json={})
        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert {e["field"] for e in body["errors"]} == {"username", "email", "password"}

    def test_login(self, client):
        register(client, "alice")
        response = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["data"]["token"]

    def test_login_wrong_password(self, client):
        register(client, "alice")
        response = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "nope-nope"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_deactivated(self, client, seed_user):
        seed_user("bob", is_active=False)
        response = client.post("/api/auth/login", json={"email": "bob@example.com", "password": PASSWORD})
        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated."

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert "No token provided" in response.json()["message"]

    def test_me_with_invalid_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer invalid-token"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token."

    def test_me_for_deactivated_account(self, client, seed_user, auth_header):
        bob = seed_user("bob", is_active=False)
        response = client.get("/api/auth/me", headers=auth_header(bob))
        assert response.status_code == 401


# =============================================================================
# Posts
# =============================================================================


class TestPostEndpoints:
    def test_end_to_end(self, client):
        _, alice = register(client, "alice")
        _, bob = register(client, "bob")

        created = client.post("/api/posts", json=POST_BODY, headers=alice)
        assert created.status_code == 201
        post = created.json()["data"]
        assert post["status"] == "published"
        assert post["slug"] == "hello-world"
        assert post["author"]["username"] == "alice"

        forbidden = client.put(f"/api/posts/{post['id']}", json={"title": "x"}, headers=bob)
        assert forbidden.status_code == 403
        assert forbidden.json()["success"] is False

        deleted = client.delete(f"/api/posts/{post['id']}", headers=alice)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Post deleted successfully"

        missing = client.get(f"/api/posts/{post['id']}")
        assert missing.status_code == 404
        assert missing.json() == {"success": False, "message": "Post not found"}

    def test_create_requires_auth(self, client):
        response = client.post("/api/posts", json=POST_BODY)
        assert response.status_code == 401

    def test_create_validation(self, client):
        _, alice = register(client, "alice")
        response = client.post("/api/posts", json={"title": "Hi", "content": "short"}, headers=alice)
        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"title", "content"}

    def test_author_update(self, client):
        _, alice = register(client, "alice")
        post = client.post("/api/posts", json=POST_BODY, headers=alice).json()["data"]

        response = client.put(f"/api/posts/{post['id']}", json={"title": "Brand New Title"}, headers=alice)
        assert response.status_code == 200
        assert response.json()["data"]["slug"] == "brand-new-title"

        invalid = client.put(f"/api/posts/{post['id']}", json={"title": "x"}, headers=alice)
        assert invalid.status_code == 400

    def test_drafts_hidden_from_anonymous_list(self, client, store):
        admin_user, admin = register(client, "admin")
        asyncio.run(store.update(Collections.USERS, admin_user["id"], {"role": Role.ADMIN}))

        client.post("/api/posts", json={**POST_BODY, "status": "draft"}, headers=admin)
        client.post("/api/posts", json={**POST_BODY, "title": "Public Post"}, headers=admin)

        anonymous = client.get("/api/posts", params={"status": "draft"}).json()
        assert [p["title"] for p in anonymous["data"]] == ["Public Post"]

        as_admin = client.get("/api/posts", params={"status": "draft"}, headers=admin).json()
        assert [p["status"] for p in as_admin["data"]] == ["draft"]

    def test_list_pagination_capped(self, client):
        body = client.get("/api/posts", params={"limit": "500", "page": "0"}).json()
        assert body["success"] is True
        assert body["data"] == []
        assert body["pagination"]["limit"] == 100
        assert body["pagination"]["page"] == 1
        assert body["pagination"]["total"] == 0

    def test_get_counts_views(self, client):
        _, alice = register(client, "alice")
        post = client.post("/api/posts", json=POST_BODY, headers=alice).json()["data"]

        client.get(f"/api/posts/{post['id']}")
        second = client.get(f"/api/posts/{post['id']}").json()["data"]
        assert second["views"] == 2
        assert second["content"] == POST_BODY["content"]

    def test_like_and_comment(self, client):
        _, alice = register(client, "alice")
        bob_user, bob = register(client, "bob")
        post = client.post("/api/posts", json=POST_BODY, headers=alice).json()["data"]

        liked = client.post(f"/api/posts/{post['id']}/like", headers=bob).json()["data"]
        assert liked == {"liked_by": [bob_user["id"]], "like_count": 1, "liked": True}
        unliked = client.post(f"/api/posts/{post['id']}/like", headers=bob).json()["data"]
        assert unliked["liked"] is False

        commented = client.post(
            f"/api/posts/{post['id']}/comments", json={"content": "Nice post"}, headers=bob
        ).json()["data"]
        assert commented["comment_count"] == 1
        assert commented["comments"][0]["content"] == "Nice post"

        empty = client.post(f"/api/posts/{post['id']}/comments", json={"content": "  "}, headers=bob)
        assert empty.status_code == 400

    def test_like_requires_auth(self, client):
        _, alice = register(client, "alice")
        post = client.post("/api/posts", json=POST_BODY, headers=alice).json()["data"]
        assert client.post(f"/api/posts/{post['id']}/like").status_code == 401


# =============================================================================
# Users
# =============================================================================


class TestUserEndpoints:
    def test_list_requires_admin(self, client, seed_user, auth_header):
        alice = seed_user("alice")
        assert client.get("/api/users").status_code == 401
        assert client.get("/api/users", headers=auth_header(alice)).status_code == 403

    def test_admin_lists_and_promotes(self, client, seed_user, auth_header):
        admin = seed_user("admin", role=Role.ADMIN)
        alice = seed_user("alice")

        listed = client.get("/api/users", headers=auth_header(admin)).json()
        assert {u["username"] for u in listed["data"]} == {"admin", "alice"}
        assert listed["pagination"]["total"] == 2

        promoted = client.put(
            f"/api/users/{alice.id}", json={"role": "admin"}, headers=auth_header(admin)
        )
        assert promoted.status_code == 200
        assert promoted.json()["data"]["role"] == "admin"

        # The old token picks up the new role on the next request
        assert client.get("/api/users", headers=auth_header(alice)).status_code == 200

    def test_profile_self_or_admin(self, client, seed_user, auth_header):
        alice = seed_user("alice")
        bob = seed_user("bob")
        assert client.get(f"/api/users/{alice.id}", headers=auth_header(alice)).status_code == 200
        assert client.get(f"/api/users/{alice.id}", headers=auth_header(bob)).status_code == 403

    def test_public_author_feed(self, client):
        alice_user, alice = register(client, "alice")
        client.post("/api/posts", json=POST_BODY, headers=alice)

        feed = client.get(f"/api/users/{alice_user['id']}/posts").json()
        assert [p["title"] for p in feed["data"]] == ["Hello World"]
        assert client.get("/api/users/user_missing/posts").status_code == 404

    def test_admin_delete_cascades(self, client, seed_user, auth_header):
        admin = seed_user("admin", role=Role.ADMIN)
        alice_user, alice = register(client, "alice")
        post = client.post("/api/posts", json=POST_BODY, headers=alice).json()["data"]

        response = client.delete(f"/api/users/{alice_user['id']}", headers=auth_header(admin))
        assert response.status_code == 200
        assert client.get(f"/api/posts/{post['id']}").status_code == 404

        own = client.delete(f"/api/users/{admin.id}", headers=auth_header(admin))
        assert own.status_code == 400
