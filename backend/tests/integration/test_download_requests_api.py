"""Integration tests for the download release workflow"""

import threading
from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from xdocs.auth.dependencies import AuthedPrincipal
from xdocs.auth.roles import UserRole
from xdocs.download_requests import service as request_service
from xdocs.errors import ConflictError
from xdocs.models import Base, Document, DownloadRequest, User
from xdocs.models.base import as_utc, utcnow

pytestmark = pytest.mark.integration

APPLICATION = {"applicant_name": "b", "applicant_company": "co", "applicant_contact": "x@y"}


@pytest.fixture
def public_doc(client_for, alice, upload):
    return upload(client_for(alice), "d1.txt", b"release me", permission="public").json()["id"]


def apply(test_client, doc_id, **overrides):
    return test_client.post(f"/documents/{doc_id}/download-requests", json={**APPLICATION, **overrides})


class TestDownloadGate:

    def test_request_approve_download(self, client_for, alice, bob, public_doc):
        as_bob = client_for(bob)

        gated = as_bob.get(f"/documents/{public_doc}/download")
        assert gated.status_code == 403
        assert gated.json()["error"] == "approval_required"

        created = apply(as_bob, public_doc)
        assert created.status_code == 201
        assert created.json()["status"] == "pending"

        duplicate = apply(as_bob, public_doc)
        assert duplicate.status_code == 409

        request_id = created.json()["id"]
        assert client_for(alice).post(f"/download-requests/{request_id}/approve").status_code == 204

        downloaded = as_bob.get(f"/documents/{public_doc}/download")
        assert downloaded.status_code == 200
        assert downloaded.content == b"release me"

    def test_approval_expires_after_ttl(self, client_for, alice, bob, public_doc, clock, ttl_hours):
        ttl_hours(1)
        as_bob = client_for(bob)
        request_id = apply(as_bob, public_doc).json()["id"]
        client_for(alice).post(f"/download-requests/{request_id}/approve")
        assert as_bob.get(f"/documents/{public_doc}/download").status_code == 200

        clock.advance(hours=2)

        expired = as_bob.get(f"/documents/{public_doc}/download")
        assert expired.status_code == 403
        assert expired.json()["error"] == "approval_required"

        mine = as_bob.get("/download-requests/mine").json()
        assert mine[0]["status"] == "approved"

        assert apply(as_bob, public_doc).status_code == 201

    def test_preauthorized_skips_workflow(self, client_for, alice, bob, carol, upload):
        as_alice = client_for(alice)
        doc_id = upload(as_alice, "d3.txt", b"x", permission="specific", allowed_users=[bob.id]).json()["id"]

        patched = as_alice.patch(f"/documents/{doc_id}", json={"download_preauthorized": True})
        assert patched.status_code == 200

        assert client_for(bob).get(f"/documents/{doc_id}/download").status_code == 200
        outsider = client_for(carol).get(f"/documents/{doc_id}/download")
        assert outsider.status_code == 403
        assert outsider.json()["error"] == "forbidden"


class TestCreateRequest:

    @pytest.mark.parametrize("field", ["applicant_name", "applicant_company", "applicant_contact"])
    def test_blank_applicant_field_rejected(self, client_for, bob, public_doc, field):
        response = apply(client_for(bob), public_doc, **{field: "   "})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"

    def test_fields_are_trimmed(self, client_for, bob, public_doc):
        body = apply(client_for(bob), public_doc, applicant_name="  Bob  ", message="please").json()

        assert body["applicantName"] == "Bob"
        assert body["message"] == "please"
        assert body["documentName"] == "d1.txt"
        assert body["ownerName"] == "alice"
        assert body["requesterName"] == "bob"
        assert body["approverId"] is None
        assert body["expiresAt"] is None

    def test_owner_needs_no_request(self, client_for, alice, public_doc):
        response = apply(client_for(alice), public_doc)

        assert response.status_code == 400
        assert response.json()["message"] == "no need to request"

    def test_admin_needs_no_request(self, client_for, admin, public_doc):
        response = apply(client_for(admin), public_doc)

        assert response.status_code == 400
        assert response.json()["message"] == "no need to request"

    def test_preauthorized_document_rejected(self, client_for, alice, bob, public_doc):
        client_for(alice).patch(f"/documents/{public_doc}", json={"download_preauthorized": True})

        response = apply(client_for(bob), public_doc)

        assert response.status_code == 400
        assert response.json()["message"] == "download preauthorized"

    def test_inaccessible_document_forbidden(self, client_for, alice, bob, upload):
        doc_id = upload(client_for(alice), "p.txt", b"x", permission="private").json()["id"]

        assert apply(client_for(bob), doc_id).status_code == 403

    def test_unknown_document(self, client_for, bob):
        assert apply(client_for(bob), uuid4()).status_code == 404

    def test_reapply_after_rejection(self, client_for, alice, bob, public_doc):
        as_bob = client_for(bob)
        request_id = apply(as_bob, public_doc).json()["id"]
        client_for(alice).post(f"/download-requests/{request_id}/reject")

        assert apply(as_bob, public_doc).status_code == 201


class TestDecisions:

    def test_admin_may_decide_any_request(self, client_for, admin, bob, public_doc):
        request_id = apply(client_for(bob), public_doc).json()["id"]

        assert client_for(admin).post(f"/download-requests/{request_id}/approve").status_code == 204

    def test_non_owner_cannot_decide(self, client_for, bob, carol, public_doc):
        request_id = apply(client_for(bob), public_doc).json()["id"]

        assert client_for(carol).post(f"/download-requests/{request_id}/approve").status_code == 404
        assert client_for(carol).post(f"/download-requests/{request_id}/reject").status_code == 404

    def test_requester_cannot_approve_own_request(self, client_for, bob, public_doc):
        request_id = apply(client_for(bob), public_doc).json()["id"]

        assert client_for(bob).post(f"/download-requests/{request_id}/approve").status_code == 404

    def test_second_decision_fails_and_keeps_first(self, client_for, alice, bob, public_doc):
        as_alice = client_for(alice)
        request_id = apply(client_for(bob), public_doc).json()["id"]

        assert as_alice.post(f"/download-requests/{request_id}/approve").status_code == 204
        assert as_alice.post(f"/download-requests/{request_id}/reject").status_code == 404

        mine = client_for(bob).get("/download-requests/mine").json()
        assert mine[0]["status"] == "approved"

    def test_unknown_request(self, client_for, admin):
        assert client_for(admin).post(f"/download-requests/{uuid4()}/reject").status_code == 404

    def test_decision_timestamps(self, client_for, alice, bob, carol, public_doc, clock, db_session, ttl_hours):
        ttl_hours(48)
        approved_id = apply(client_for(bob), public_doc).json()["id"]
        rejected_id = apply(client_for(carol), public_doc).json()["id"]

        client_for(alice).post(f"/download-requests/{approved_id}/approve")
        client_for(alice).post(f"/download-requests/{rejected_id}/reject")

        db_session.expire_all()
        approved = db_session.get(DownloadRequest, UUID(approved_id))
        rejected = db_session.get(DownloadRequest, UUID(rejected_id))

        assert approved.status == "approved"
        assert approved.approver_id == alice.id
        assert approved.approved_at is not None and approved.rejected_at is None
        assert as_utc(approved.expires_at) == clock.now + timedelta(hours=48)

        assert rejected.status == "rejected"
        assert rejected.rejected_at is not None and rejected.approved_at is None
        assert rejected.expires_at is None


class TestListings:

    def test_mine_newest_first(self, client_for, alice, bob, upload, clock):
        as_alice = client_for(alice)
        first = upload(as_alice, "a.txt", b"a").json()["id"]
        second = upload(as_alice, "b.txt", b"b").json()["id"]
        as_bob = client_for(bob)
        apply(as_bob, first)
        clock.advance(minutes=1)
        apply(as_bob, second)

        mine = as_bob.get("/download-requests/mine").json()

        assert [r["documentId"] for r in mine] == [second, first]

    def test_pending_scoped_to_owned_documents(self, client_for, alice, bob, carol, admin, upload, clock):
        alice_doc = upload(client_for(alice), "a.txt", b"a").json()["id"]
        carol_doc = upload(client_for(carol), "c.txt", b"c").json()["id"]
        as_bob = client_for(bob)
        first = apply(as_bob, alice_doc).json()["id"]
        clock.advance(minutes=1)
        apply(as_bob, carol_doc)
        clock.advance(minutes=1)
        third = apply(client_for(carol), alice_doc).json()["id"]

        alice_queue = [r["id"] for r in client_for(alice).get("/download-requests/pending").json()]
        admin_queue = client_for(admin).get("/download-requests/pending").json()
        bob_queue = client_for(bob).get("/download-requests/pending").json()

        assert alice_queue == [first, third]
        assert len(admin_queue) == 3
        assert bob_queue == []

    def test_decided_requests_leave_queue(self, client_for, alice, bob, public_doc):
        request_id = apply(client_for(bob), public_doc).json()["id"]
        client_for(alice).post(f"/download-requests/{request_id}/approve")

        assert client_for(alice).get("/download-requests/pending").json() == []


class TestConcurrentCreators:
    """Two sessions racing to file the same application"""

    @pytest.fixture
    def file_db(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'race.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        yield sessionmaker(bind=engine)
        engine.dispose()

    def test_only_one_pending_request_survives(self, file_db):
        with file_db() as session:
            owner = User(username="owner", role="user", status="active", note="", password_hash="x")
            requester = User(username="req", role="user", status="active", note="", password_hash="x")
            session.add_all([owner, requester])
            session.flush()
            doc = Document(name="d.txt", owner_id=owner.id, permission="public",
                           storage_rel_path="d/d.txt")
            session.add(doc)
            session.commit()
            doc_id, principal = doc.id, AuthedPrincipal(id=requester.id, role=UserRole.USER)

        barrier = threading.Barrier(2)
        outcomes = []

        def create():
            with file_db() as session:
                barrier.wait()
                try:
                    request_service.create_request(
                        session, doc_id, principal, "b", "co", "x@y", None, now=utcnow()
                    )
                    outcomes.append("created")
                except ConflictError:
                    outcomes.append("conflict")

        threads = [threading.Thread(target=create) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["conflict", "created"]
        with file_db() as session:
            pending = session.scalar(
                select(func.count()).select_from(DownloadRequest).where(
                    DownloadRequest.document_id == doc_id,
                    DownloadRequest.status == "pending",
                )
            )
        assert pending == 1
