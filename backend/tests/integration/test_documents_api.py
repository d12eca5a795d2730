"""Integration tests for the documents API

Tests the complete lifecycle through HTTP:
- Multipart upload with validation and malware scan
- Local storage and database record creation
- Listing, streamed download and deletion
- Error envelopes for every failure category
"""

import io
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from database import get_db
from dependencies import get_document_store
from documents.router import download_document
from domain.documents.models import DocumentDownload
from domain.documents.ports import ScanServiceError
from fixtures.documents import TEST_MAX_FILE_SIZE, InMemoryContentStore
from main import app
from models.document import Document
from models.notification import Notification

DOCUMENTS_URL = "/api/v1/documents"

PDF = "application/pdf"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


def pdf(name="report.pdf", content=b"%PDF-1.4\n%\xE2\xE3\xCF\xD3\n"):
    return ("files", (name, content, PDF))


@pytest.fixture
def headers(owner, auth_headers):
    return auth_headers(owner.user)


def upload(client, headers, *files):
    return client.post(DOCUMENTS_URL, files=list(files), headers=headers)


class TestUploadAPI:
    """POST /api/v1/documents"""

    def test_upload_multiple_types(self, client: TestClient, headers, db_session: Session, owner, storage_root):
        response = upload(
            client, headers,
            pdf("report.pdf"),
            ("files", ("figures.xlsx", b"PK\x03\x04xlsx", XLSX)),
            ("files", ("deck.pptx", b"PK\x03\x04pptx", PPTX)),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Files uploaded successfully"
        assert [d["name"] for d in body["data"]] == ["report.pdf", "figures.xlsx", "deck.pptx"]
        assert body["data"][1]["mime_type"] == XLSX
        assert body["data"][1]["size_bytes"] == len(b"PK\x03\x04xlsx")
        # Storage locations are never exposed
        assert all("storage_path" not in d for d in body["data"])

        documents = db_session.scalars(select(Document)).all()
        assert len(documents) == 3
        for document in documents:
            assert document.company_id == owner.company.id
            assert (storage_root / document.storage_path).is_file()

    def test_upload_creates_notifications(self, client: TestClient, headers, db_session: Session, owner):
        upload(client, headers, pdf("a.pdf"))

        messages = db_session.scalars(
            select(Notification.message).where(Notification.user_id == owner.user.id)
        ).all()
        assert messages == ['Document "a.pdf" uploaded and scanned successfully']

    def test_filename_is_sanitized(self, client: TestClient, headers):
        response = upload(client, headers, pdf("../../Q3 report (final).pdf"))

        assert response.status_code == 201
        assert response.json()["data"][0]["name"] == "Q3_report_final_.pdf"

    def test_invalid_type_rejects_whole_batch(self, client: TestClient, headers, db_session: Session, scan_service):
        response = upload(
            client, headers,
            pdf("ok.pdf"),
            ("files", ("notes.txt", b"hello", "text/plain")),
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "validation_error",
            "message": "File validation failed",
            "details": ["File 2: Invalid file type. Only PDF, Excel, and PowerPoint files are allowed."],
        }
        assert scan_service.calls == []
        assert db_session.scalars(select(Document)).all() == []

    def test_file_too_large(self, client: TestClient, headers):
        response = upload(client, headers, pdf("big.pdf", b"x" * (TEST_MAX_FILE_SIZE + 1)))

        assert response.status_code == 400
        assert response.json()["details"] == ["File 1: File too large. Maximum size is 1KB."]

    def test_file_at_size_limit_accepted(self, client: TestClient, headers):
        response = upload(client, headers, pdf("exact.pdf", b"x" * TEST_MAX_FILE_SIZE))

        assert response.status_code == 201

    def test_too_many_files(self, client: TestClient, headers, storage_root):
        response = upload(client, headers, *[pdf(f"{i}.pdf") for i in range(4)])

        assert response.status_code == 400
        assert response.json()["details"] == ["File 4: Too many files. Maximum 3 files allowed per upload"]
        assert not any(path.is_file() for path in storage_root.rglob("*"))

    def test_no_file_parts(self, client: TestClient, headers):
        body = b'--B\r\nContent-Disposition: form-data; name="note"\r\n\r\nhello\r\n--B--\r\n'

        response = client.post(
            DOCUMENTS_URL,
            content=body,
            headers={**headers, "Content-Type": "multipart/form-data; boundary=B"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "no_files_uploaded"
        assert response.json()["details"] == ["Please select at least one file to upload"]

    def test_non_multipart_body(self, client: TestClient, headers):
        response = client.post(DOCUMENTS_URL, json={"files": []}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_infected_file_rejects_batch(self, client: TestClient, headers, scan_service, db_session: Session):
        scan_service.infected = {"eicar.pdf"}

        response = upload(client, headers, pdf("clean.pdf"), pdf("eicar.pdf"))

        assert response.status_code == 400
        assert response.json() == {
            "error": "virus_scan_failed",
            "message": "Virus scan failed",
            "details": ["Infected files detected: eicar.pdf"],
        }
        assert db_session.scalars(select(Document)).all() == []

    def test_scan_service_unavailable(self, client: TestClient, headers, scan_service, db_session: Session):
        scan_service.error = ScanServiceError("connection refused")

        response = upload(client, headers, pdf())

        assert response.status_code == 500
        assert response.json() == {
            "error": "scan_service_unavailable",
            "message": "Virus scan service unavailable",
            "details": ["Unable to scan files for security threats"],
        }
        assert db_session.scalars(select(Document)).all() == []

    def test_partial_failure_reports_stored_files(self, client: TestClient, headers):
        store = InMemoryContentStore()
        store.fail_writes_for = {2}
        app.dependency_overrides[get_document_store] = lambda: store

        response = upload(client, headers, pdf("a.pdf"), pdf("b.pdf"), pdf("c.pdf"))

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "partial_upload_failure"
        assert body["details"] == ["Failed to save b.pdf"]
        assert [d["name"] for d in body["uploaded"]] == ["a.pdf", "c.pdf"]

        listed = client.get(DOCUMENTS_URL, headers=headers).json()["data"]
        assert sorted(d["name"] for d in listed) == ["a.pdf", "c.pdf"]

    def test_partial_failure_body_survives_session_close(self, client: TestClient, headers, db_session: Session):
        """Records from earlier commits are expired; get_db closes the session before handlers run"""
        store = InMemoryContentStore()
        store.fail_writes_for = {2}
        app.dependency_overrides[get_document_store] = lambda: store

        request_sessions = sessionmaker(autocommit=False, autoflush=False, bind=db_session.get_bind())

        def closing_get_db():
            session = request_sessions()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = closing_get_db

        response = upload(client, headers, pdf("a.pdf"), pdf("b.pdf"), pdf("c.pdf"))

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "partial_upload_failure"
        assert [d["name"] for d in body["uploaded"]] == ["a.pdf", "c.pdf"]
        assert all(d["size_bytes"] > 0 for d in body["uploaded"])

    def test_user_without_company(self, client: TestClient, user_without_company, auth_headers):
        response = upload(client, auth_headers(user_without_company), pdf())

        assert response.status_code == 404
        assert response.json()["error"] == "company_not_found"


class TestListAPI:
    """GET /api/v1/documents"""

    def test_empty(self, client: TestClient, headers):
        response = client.get(DOCUMENTS_URL, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"data": []}

    def test_newest_first(self, client: TestClient, headers):
        upload(client, headers, pdf("first.pdf"))
        upload(client, headers, pdf("second.pdf"))

        response = client.get(DOCUMENTS_URL, headers=headers)

        assert [d["name"] for d in response.json()["data"]] == ["second.pdf", "first.pdf"]


class TestDownloadAPI:
    """GET /api/v1/documents/download/{id}"""

    def test_download_round_trip(self, client: TestClient, headers):
        content = b"%PDF-1.4\n" + bytes(range(256)) * 3
        document = upload(client, headers, pdf("report.pdf", content)).json()["data"][0]

        response = client.get(f"{DOCUMENTS_URL}/download/{document['id']}", headers=headers)

        assert response.status_code == 200
        assert response.content == content
        assert response.headers["content-type"] == PDF
        assert response.headers["content-disposition"] == 'attachment; filename="report.pdf"'
        assert response.headers["content-length"] == str(len(content))

    def test_invalid_id(self, client: TestClient, headers):
        response = client.get(f"{DOCUMENTS_URL}/download/not-a-uuid", headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_document_id"

    def test_unknown_id(self, client: TestClient, headers):
        response = client.get(f"{DOCUMENTS_URL}/download/{uuid4()}", headers=headers)

        assert response.status_code == 404
        assert response.json()["error"] == "document_not_found"

    def test_missing_bytes(self, client: TestClient, headers, storage_root, db_session: Session):
        document = upload(client, headers, pdf()).json()["data"][0]
        record = db_session.scalars(select(Document)).one()
        (storage_root / record.storage_path).unlink()

        response = client.get(f"{DOCUMENTS_URL}/download/{document['id']}", headers=headers)

        assert response.status_code == 500
        assert response.json() == {
            "error": "file_access_error",
            "message": "File access error",
            "details": ["Unable to access the requested file"],
        }


    def test_download_closes_stream(self, client: TestClient, headers):
        store = InMemoryContentStore()
        app.dependency_overrides[get_document_store] = lambda: store
        document = upload(client, headers, pdf()).json()["data"][0]

        client.get(f"{DOCUMENTS_URL}/download/{document['id']}", headers=headers)

        [stream] = store.opened
        assert stream.closed

    @pytest.mark.asyncio
    async def test_unsent_download_still_closes_stream(self, owner):
        """A response that is never iterated closes its handle in the background task"""
        stream = io.BytesIO(b"%PDF-1.4")
        record = SimpleNamespace(mime_type=PDF, name="a.pdf", size_bytes=8)

        class OpenedDownloadService:
            async def open_download(self, user_id, document_id):
                return DocumentDownload(record=record, stream=stream)

        response = await download_document(str(uuid4()), owner.user, OpenedDownloadService())
        await response.background()

        assert stream.closed


class TestDeleteAPI:
    """DELETE /api/v1/documents/{id}"""

    def test_delete(self, client: TestClient, headers, storage_root, db_session: Session):
        document = upload(client, headers, pdf("gone.pdf")).json()["data"][0]
        stored_path = storage_root / db_session.scalars(select(Document)).one().storage_path

        response = client.delete(f"{DOCUMENTS_URL}/{document['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == {
            "message": "Document deleted successfully",
            "data": {"id": document["id"], "name": "gone.pdf"},
        }
        assert not stored_path.exists()
        assert client.get(f"{DOCUMENTS_URL}/download/{document['id']}", headers=headers).status_code == 404
        assert client.delete(f"{DOCUMENTS_URL}/{document['id']}", headers=headers).status_code == 404

    def test_delete_with_missing_bytes(self, client: TestClient, headers, storage_root, db_session: Session):
        document = upload(client, headers, pdf()).json()["data"][0]
        (storage_root / db_session.scalars(select(Document)).one().storage_path).unlink()

        response = client.delete(f"{DOCUMENTS_URL}/{document['id']}", headers=headers)

        assert response.status_code == 200
        assert client.get(DOCUMENTS_URL, headers=headers).json() == {"data": []}

    def test_delete_notifies(self, client: TestClient, headers, db_session: Session, owner):
        document = upload(client, headers, pdf("gone.pdf")).json()["data"][0]

        client.delete(f"{DOCUMENTS_URL}/{document['id']}", headers=headers)

        messages = db_session.scalars(
            select(Notification.message).where(Notification.user_id == owner.user.id)
        ).all()
        assert 'Document "gone.pdf" has been successfully deleted' in messages

    def test_invalid_id(self, client: TestClient, headers):
        response = client.delete(f"{DOCUMENTS_URL}/12345", headers=headers)

        assert response.status_code == 400


class TestAuthentication:
    """Bearer token handling"""

    @pytest.mark.parametrize("method,path", [
        ("post", DOCUMENTS_URL),
        ("get", DOCUMENTS_URL),
        ("get", f"{DOCUMENTS_URL}/download/{uuid4()}"),
        ("delete", f"{DOCUMENTS_URL}/{uuid4()}"),
    ])
    def test_missing_token(self, client: TestClient, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token(self, client: TestClient):
        response = client.get(DOCUMENTS_URL, headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401

    def test_disabled_user(self, client: TestClient, owner, auth_headers, db_session: Session):
        owner.user.status = "DISABLED"
        db_session.commit()

        response = client.get(DOCUMENTS_URL, headers=auth_headers(owner.user))

        assert response.status_code == 403


class TestObservabilityEndpoints:

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert set(body["components"]) == {"database", "content_store"}

    def test_metrics(self, client: TestClient, headers):
        upload(client, headers, pdf())

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "docvault_uploads_total" in response.text

    def test_health_degraded_when_store_unreachable(self, client: TestClient):
        store = InMemoryContentStore()
        store.fail_health = True
        app.dependency_overrides[get_document_store] = lambda: store

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["components"]["content_store"]["status"] == "degraded"

    def test_request_id_echoed(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-abc.123"})

        assert response.headers["x-request-id"] == "req-abc.123"
