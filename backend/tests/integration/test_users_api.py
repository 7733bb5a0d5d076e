"""Integration tests for admin user management and the user directory"""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from xdocs.models import Document, DownloadRequest, User

pytestmark = pytest.mark.integration


class TestListUsers:

    def test_admin_lists_users_newest_first(self, client_for, admin, alice, bob):
        response = client_for(admin).get("/users")

        assert response.status_code == 200
        names = [u["username"] for u in response.json()]
        assert set(names) == {"root", "alice", "bob"}
        assert "passwordHash" not in response.json()[0]

    def test_non_admin_forbidden(self, client_for, alice):
        response = client_for(alice).get("/users")

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_pending_users_oldest_first(self, client_for, admin, make_user, db_session):
        first = make_user("first", status="pending", note="hi")
        second = make_user("second", status="pending")
        make_user("active-one")
        first.created_at = datetime.now(timezone.utc) - timedelta(days=1)
        db_session.commit()

        response = client_for(admin).get("/users/pending")

        assert response.status_code == 200
        body = response.json()
        assert [u["username"] for u in body] == ["first", "second"]
        assert body[0]["note"] == "hi"
        assert set(body[0]) == {"id", "username", "note", "createdAt"}
        assert body[1]["id"] == str(second.id)


class TestCreateUser:

    def test_admin_creates_active_user(self, client_for, admin, client):
        response = client_for(admin).post(
            "/users",
            json={"username": "dave", "email": "dave@example.com", "password": "pw", "role": "user"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "active"
        assert body["email"] == "dave@example.com"
        assert client.post("/auth/login", json={"email": "dave", "password": "pw"}).status_code == 200

    def test_invalid_role_rejected(self, client_for, admin):
        response = client_for(admin).post(
            "/users", json={"username": "x", "password": "pw", "role": "superuser"}
        )
        assert response.status_code == 400

    def test_duplicate_email_conflicts(self, client_for, admin, alice):
        response = client_for(admin).post(
            "/users",
            json={"username": "alice2", "email": "alice@example.com", "password": "pw", "role": "user"},
        )

        assert response.status_code == 409
        assert response.json()["message"] == "email exists"

    def test_duplicate_username_conflicts(self, client_for, admin, alice):
        response = client_for(admin).post(
            "/users", json={"username": "alice", "password": "pw", "role": "user"}
        )

        assert response.status_code == 409
        assert response.json()["message"] == "username exists"

    def test_users_without_email_do_not_collide(self, client_for, admin):
        as_admin = client_for(admin)
        for name in ("e1", "e2"):
            response = as_admin.post(
                "/users", json={"username": name, "email": "", "password": "pw", "role": "user"}
            )
            assert response.status_code == 201
            assert response.json()["email"] is None

    def test_non_admin_cannot_create(self, client_for, alice):
        response = client_for(alice).post(
            "/users", json={"username": "x", "password": "pw", "role": "admin"}
        )
        assert response.status_code == 403


class TestApproveDisable:

    def test_approve_admin_row_is_not_found(self, client_for, admin, make_user):
        other_admin = make_user("boss", role="admin")

        response = client_for(admin).post(f"/users/{other_admin.id}/disable")

        assert response.status_code == 404

    def test_unknown_user_is_not_found(self, client_for, admin):
        assert client_for(admin).post(f"/users/{uuid4()}/approve").status_code == 404

    def test_approve_sets_active(self, client_for, admin, make_user, db_session):
        user = make_user("newbie", status="pending")

        assert client_for(admin).post(f"/users/{user.id}/approve").status_code == 204

        db_session.expire_all()
        assert db_session.get(User, user.id).status == "active"


class TestDeleteUser:

    def test_delete_cascades_documents_requests_and_blobs(
        self, client_for, admin, alice, bob, upload, blob_store, db_session
    ):
        as_alice, as_bob = client_for(alice), client_for(bob)
        doc_id = upload(as_alice, "a.txt", b"alice data").json()["id"]
        bob_doc_id = upload(as_bob, "b.txt", b"bob data").json()["id"]
        request = as_bob.post(
            f"/documents/{doc_id}/download-requests",
            json={"applicant_name": "b", "applicant_company": "co", "applicant_contact": "x@y"},
        )
        assert request.status_code == 201
        rel_path = db_session.get(Document, UUID(doc_id)).storage_rel_path

        response = client_for(admin).delete(f"/users/{alice.id}")

        assert response.status_code == 204
        db_session.expire_all()
        assert db_session.get(User, alice.id) is None
        assert db_session.query(Document).count() == 1
        assert db_session.query(DownloadRequest).count() == 0
        assert (blob_store.root / rel_path).exists() is False
        assert client_for(admin).get("/documents").json()[0]["id"] == bob_doc_id

    def test_delete_approver_keeps_request(self, client_for, admin, alice, bob, make_user, upload, db_session):
        reviewer = make_user("reviewer", role="admin")
        doc_id = upload(client_for(alice), "a.txt", b"x").json()["id"]
        req_id = client_for(bob).post(
            f"/documents/{doc_id}/download-requests",
            json={"applicant_name": "b", "applicant_company": "co", "applicant_contact": "x@y"},
        ).json()["id"]
        assert client_for(reviewer).post(f"/download-requests/{req_id}/approve").status_code == 204

        assert client_for(admin).delete(f"/users/{reviewer.id}").status_code == 204

        mine = client_for(bob).get("/download-requests/mine").json()
        assert mine[0]["status"] == "approved"
        assert mine[0]["approverId"] is None

    def test_delete_unknown_user(self, client_for, admin):
        assert client_for(admin).delete(f"/users/{uuid4()}").status_code == 404


class TestAccountEndpoints:

    def test_me_returns_live_record(self, client_for, alice):
        response = client_for(alice).get("/me")

        assert response.status_code == 200
        assert response.json()["id"] == str(alice.id)
        assert response.json()["email"] == "alice@example.com"

    def test_user_directory_open_to_any_user(self, client_for, alice, bob):
        response = client_for(alice).get("/user-directory")

        assert response.status_code == 200
        entries = response.json()
        assert {e["username"] for e in entries} == {"alice", "bob"}
        assert set(entries[0]) == {"id", "username", "email"}
