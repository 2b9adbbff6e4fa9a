"""Integration tests for the student documents API

Tests the HTTP surface end to end with in-memory ports:
- Multipart upload and validation errors
- Review decisions and role checks
- Owner vs reviewer views
- Listings and deletion
"""

import io
import json

import pytest
from fastapi.testclient import TestClient

from config import Settings, get_settings
from dependencies import get_directory, get_repository, get_storage
from main import app

BASE = "/api/v1/student-documents"
LESSON_ID = "55555555-5555-4555-8555-555555555555"
PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n%%EOF\n"


@pytest.fixture
def client(storage, repository, directory):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_directory] = lambda: directory
    app.dependency_overrides[get_settings] = lambda: Settings(MAX_UPLOAD_SIZE_BYTES=64 * 1024)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def translations_json(translations):
    return json.dumps(
        [{"locale": t.locale, "title": t.title, "description": t.description} for t in translations]
    )


def _upload(client, actor_id, translations_json, content=PDF_BYTES, name="Resumo Aula 1.pdf",
            mime="application/pdf", protection_level="WATERMARK", student_id=None):
    data = {
        "protection_level": protection_level,
        "lesson_id": LESSON_ID,
        "translations": translations_json,
    }
    if student_id is not None:
        data["student_id"] = str(student_id)
    return client.post(
        BASE,
        headers={"X-Actor-Id": str(actor_id)},
        files={"file": (name, io.BytesIO(content), mime)},
        data=data,
    )


class TestUploadAPI:
    """Tests for POST /api/v1/student-documents"""

    def test_upload_pdf(self, client, storage, student_id, translations_json):
        response = _upload(client, student_id, translations_json)

        assert response.status_code == 201
        data = response.json()
        assert data["review_status"] == "PENDING_REVIEW"
        assert data["protection_level"] == "WATERMARK"
        assert data["original_file_name"] == "Resumo Aula 1.pdf"
        assert data["document_type"] == "PDF"
        assert {t["locale"] for t in data["translations"]} == {"pt", "es", "it"}
        assert "review_notes" not in data
        assert "owner_id" not in data
        assert len(storage.blobs) == 1
        assert data["file_url"].startswith("https://cdn.test/documents/")

    def test_missing_actor_header(self, client, translations_json):
        response = client.post(
            BASE,
            files={"file": ("a.pdf", io.BytesIO(PDF_BYTES), "application/pdf")},
            data={"protection_level": "NONE", "lesson_id": LESSON_ID, "translations": translations_json},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_oversized_file(self, client, storage, student_id, translations_json):
        response = _upload(client, student_id, translations_json, content=b"%PDF" + b"0" * (65 * 1024))

        assert response.status_code == 413
        assert response.json()["error"] == "FILE_TOO_LARGE"
        assert storage.put_calls == []

    def test_docx_with_protection(self, client, storage, student_id, translations_json):
        """Test only PDFs may carry a protection level"""
        response = _upload(
            client, student_id, translations_json,
            content=b"PK\x03\x04 body", name="notes.docx",
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            protection_level="FULL",
        )

        assert response.status_code == 400
        assert response.json()["error"] == "UNSUPPORTED_TYPE_FOR_PROTECTION"
        assert storage.put_calls == []

    def test_malformed_translations(self, client, student_id):
        response = _upload(client, student_id, "not json")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "INVALID_TRANSLATIONS"
        assert body["details"]["errors"]

    def test_translations_with_wrong_shape(self, client, student_id):
        response = _upload(client, student_id, '[{"locale": "pt"}]')

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_TRANSLATIONS"

    def test_admin_uploads_for_student(self, client, storage, admin_id, student_id, translations_json):
        response = _upload(client, admin_id, translations_json, student_id=student_id)

        assert response.status_code == 201
        assert [key.split("/")[1] for key in storage.blobs] == [str(student_id)]
        mine = client.get(f"{BASE}/mine", headers={"X-Actor-Id": str(student_id)})
        assert [d["id"] for d in mine.json()] == [response.json()["id"]]

    @pytest.mark.parametrize("actor", ["other_student_id", "reviewer_id"])
    def test_only_admin_uploads_for_others(self, request, client, storage, student_id, translations_json, actor):
        actor_id = request.getfixturevalue(actor)

        response = _upload(client, actor_id, translations_json, student_id=student_id)

        assert response.status_code == 403
        assert storage.blobs == {}

    def test_persist_failure_removes_blob(self, client, storage, repository, student_id, translations_json):
        repository.fail_create = True

        response = _upload(client, student_id, translations_json)

        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "PERSIST_FAILED"
        assert storage.blobs == {}
        assert len(storage.delete_calls) == 1


class TestReviewAPI:
    """Tests for PATCH /api/v1/student-documents/{id}/review"""

    @pytest.fixture
    def document_id(self, client, student_id, translations_json):
        return _upload(client, student_id, translations_json).json()["id"]

    def test_approve(self, client, document_id, reviewer_id):
        response = client.patch(
            f"{BASE}/{document_id}/review",
            headers={"X-Actor-Id": str(reviewer_id)},
            json={"review_status": "APPROVED", "review_notes": "Bom resumo"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["changed"] is True
        assert data["previous_status"] == "PENDING_REVIEW"
        assert data["document"]["review_status"] == "APPROVED"
        assert data["document"]["reviewed_by"] == str(reviewer_id)
        assert data["document"]["review_notes"] == "Bom resumo"

    def test_reject_requires_reason(self, client, document_id, reviewer_id):
        response = client.patch(
            f"{BASE}/{document_id}/review",
            headers={"X-Actor-Id": str(reviewer_id)},
            json={"review_status": "REJECTED"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "REASON_REQUIRED"

    def test_student_cannot_review(self, client, document_id, student_id):
        response = client.patch(
            f"{BASE}/{document_id}/review",
            headers={"X-Actor-Id": str(student_id)},
            json={"review_status": "APPROVED"},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "ACCESS_DENIED"

    def test_terminal_state(self, client, document_id, reviewer_id):
        headers = {"X-Actor-Id": str(reviewer_id)}
        client.patch(f"{BASE}/{document_id}/review", headers=headers, json={"review_status": "APPROVED"})

        response = client.patch(
            f"{BASE}/{document_id}/review",
            headers=headers,
            json={"review_status": "REJECTED", "rejection_reason": "Mudei de ideia"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_TRANSITION"


class TestReadAndDeleteAPI:
    """Tests for GET and DELETE endpoints"""

    @pytest.fixture
    def document_id(self, client, student_id, reviewer_id, translations_json):
        document_id = _upload(client, student_id, translations_json).json()["id"]
        client.patch(
            f"{BASE}/{document_id}/review",
            headers={"X-Actor-Id": str(reviewer_id)},
            json={
                "review_status": "NEEDS_REPLACEMENT",
                "rejection_reason": "Páginas em falta",
                "review_notes": "Nota interna",
            },
        )
        return document_id

    def test_owner_view_hides_review_notes(self, client, document_id, student_id):
        response = client.get(f"{BASE}/{document_id}", headers={"X-Actor-Id": str(student_id)})

        assert response.status_code == 200
        data = response.json()
        assert data["rejection_reason"] == "Páginas em falta"
        assert "review_notes" not in data
        assert "reviewed_by" not in data

    def test_reviewer_view(self, client, document_id, reviewer_id, student_id):
        response = client.get(f"{BASE}/{document_id}", headers={"X-Actor-Id": str(reviewer_id)})

        assert response.status_code == 200
        data = response.json()
        assert data["review_notes"] == "Nota interna"
        assert data["owner_id"] == str(student_id)

    def test_other_student_gets_404(self, client, document_id, other_student_id):
        response = client.get(f"{BASE}/{document_id}", headers={"X-Actor-Id": str(other_student_id)})

        assert response.status_code == 404
        assert response.json()["error"] == "DOCUMENT_NOT_FOUND"

    def test_review_queue(self, client, document_id, reviewer_id, student_id):
        response = client.get(
            BASE,
            headers={"X-Actor-Id": str(reviewer_id)},
            params={"review_status": "NEEDS_REPLACEMENT"},
        )

        assert response.status_code == 200
        assert [d["id"] for d in response.json()] == [document_id]

        forbidden = client.get(BASE, headers={"X-Actor-Id": str(student_id)})
        assert forbidden.status_code == 403

    def test_my_documents(self, client, document_id, student_id, other_student_id):
        mine = client.get(f"{BASE}/mine", headers={"X-Actor-Id": str(student_id)})
        theirs = client.get(f"{BASE}/mine", headers={"X-Actor-Id": str(other_student_id)})

        assert [d["id"] for d in mine.json()] == [document_id]
        assert "review_notes" not in mine.json()[0]
        assert theirs.json() == []

    def test_admin_deletes(self, client, storage, document_id, admin_id):
        response = client.delete(f"{BASE}/{document_id}", headers={"X-Actor-Id": str(admin_id)})

        assert response.status_code == 204
        assert storage.blobs == {}
        missing = client.get(f"{BASE}/{document_id}", headers={"X-Actor-Id": str(admin_id)})
        assert missing.status_code == 404

    def test_student_cannot_delete(self, client, document_id, student_id):
        response = client.delete(f"{BASE}/{document_id}", headers={"X-Actor-Id": str(student_id)})

        assert response.status_code == 403


class TestObservabilityAPI:
    """Tests for /metrics and /ready"""

    def test_metrics_after_upload(self, client, student_id, translations_json):
        _upload(client, student_id, translations_json)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "studydocs_documents_ingested_total" in response.text

    def test_ready(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_request_id_echoed(self, client, student_id):
        response = client.get(
            f"{BASE}/mine",
            headers={"X-Actor-Id": str(student_id), "X-Request-ID": "req-123"},
        )

        assert response.headers["X-Request-ID"] == "req-123"
