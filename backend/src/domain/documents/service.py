"""Document lifecycle service - upload, list, download and delete orchestration.

The service only talks to ports (content store, scan service, metadata store,
company directory, notification sink), so every collaborator is passed in
explicitly and can be replaced by a test double.

Consistency rules:
- Bytes are written before the metadata record is created.
- Bytes are deleted before the metadata record is deleted.
- Validation and scan failures abort the batch before anything is written.
- Persistence failures of one file do not abort its siblings; files that were
  already stored stay stored and the batch is reported as a partial failure.
"""

import logging
from typing import AsyncIterator, List
from uuid import UUID

from observability.metrics import (
    documents_deleted_total,
    documents_stored_total,
    files_rejected_total,
    uploads_total,
)

from .errors import (
    AccessDenied,
    CompanyNotFound,
    DeletionFailed,
    DocumentNotFound,
    InvalidDocumentId,
    NoFilesUploaded,
    PartialUploadFailure,
    ScanInfected,
    ScanUnavailable,
    StoreReadFailure,
    ValidationFailed,
)
from .intake import IncomingPart, collect_candidates
from .models import (
    CompanyRecord,
    DeletedDocument,
    DocumentDownload,
    DocumentRecord,
    UploadCandidate,
)
from .ports.metadata_store_port import CompanyDirectory, DocumentMetadataStore
from .ports.notification_port import NotificationSink
from .ports.object_storage_port import DocumentStorePort, StorageError
from .scanning import ScanCoordinator
from .upload_phase import UploadPhase, UploadTracker
from .validation import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_FILES_PER_UPLOAD,
    generate_storage_name,
    sanitize_filename,
)

logger = logging.getLogger(__name__)

NOTIFICATION_CATEGORY = "document"


class DocumentLifecycleService:
    """Orchestrates the full life of a document for one authenticated user."""

    def __init__(
        self,
        documents: DocumentMetadataStore,
        companies: CompanyDirectory,
        store: DocumentStorePort,
        scanner: ScanCoordinator,
        notifier: NotificationSink,
        max_files: int = DEFAULT_MAX_FILES_PER_UPLOAD,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ):
        self.documents = documents
        self.companies = companies
        self.store = store
        self.scanner = scanner
        self.notifier = notifier
        self.max_files = max_files
        self.max_file_size = max_file_size

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload(self, user_id: UUID, parts: AsyncIterator[IncomingPart]) -> List[DocumentRecord]:
        """Ingest a batch of uploaded files for the user's company.

        Args:
            user_id: Authenticated user
            parts: Incoming file parts, consumed in order

        Returns:
            List[DocumentRecord]: Created records, in upload order

        Raises:
            CompanyNotFound: User owns no company
            ValidationFailed: Any file failed type, size or count checks
            NoFilesUploaded: Stream contained no file parts
            ScanUnavailable: Scanner could not produce verdicts
            ScanInfected: At least one file is infected
            PartialUploadFailure: Some files could not be persisted
        """
        company = self._company_of(user_id)
        tracker = UploadTracker()
        outcome = "error"

        try:
            intake = await collect_candidates(parts, self.max_files, self.max_file_size)

            if intake.rejections:
                for rejection in intake.rejections:
                    files_rejected_total.labels(reason=rejection.reason.value).inc()
                logger.warning(
                    f"Upload rejected: {len(intake.rejections)} file(s) failed validation",
                    extra={"company_id": company.id, "user_id": user_id},
                )
                outcome = "rejected"
                raise ValidationFailed("File validation failed", intake.errors)

            if not intake.candidates:
                outcome = "rejected"
                raise NoFilesUploaded("No files uploaded", ["Please select at least one file to upload"])

            tracker.advance(UploadPhase.VALIDATED)

            try:
                report = await self.scanner.scan(intake.candidates)
            except ScanUnavailable:
                outcome = "scan_unavailable"
                raise

            if not report.all_clean:
                infected = report.infected_descriptions()
                logger.warning(
                    f"Upload rejected: infected files detected: {infected}",
                    extra={"company_id": company.id, "user_id": user_id},
                )
                outcome = "infected"
                raise ScanInfected(
                    "Virus scan failed",
                    [candidate.filename for candidate, _ in report.infected],
                )

            tracker.advance(UploadPhase.SCANNED)

            stored: List[DocumentRecord] = []
            errors: List[str] = []
            for candidate in intake.candidates:
                record = await self._persist(company, candidate, errors)
                if record is not None:
                    stored.append(record)

            if errors:
                logger.error(
                    f"Partial upload failure: {len(stored)} stored, {len(errors)} failed",
                    extra={"company_id": company.id, "user_id": user_id},
                )
                outcome = "partial_failure"
                raise PartialUploadFailure("Partial upload failure", errors, stored=stored)

            tracker.advance(UploadPhase.PERSISTED)
        except BaseException:
            failed_after = tracker.fail()
            uploads_total.labels(outcome=outcome).inc()
            logger.warning(
                f"Upload {outcome}: failed after {failed_after.value}",
                extra={
                    "company_id": company.id,
                    "user_id": user_id,
                    "phase": failed_after.value,
                    "outcome": outcome,
                },
            )
            raise

        for record in stored:
            self._notify(user_id, f'Document "{record.name}" uploaded and scanned successfully')

        uploads_total.labels(outcome="success").inc()
        tracker.advance(UploadPhase.RESPONDED)
        logger.info(
            f"Uploaded {len(stored)} document(s)",
            extra={
                "company_id": company.id,
                "user_id": user_id,
                "phase": tracker.phase.value,
                "outcome": "success",
            },
        )
        return stored

    async def _persist(
        self,
        company: CompanyRecord,
        candidate: UploadCandidate,
        errors: List[str],
    ):
        """Write one candidate's bytes, then record it.

        Failures are appended to errors and None is returned.
        """
        safe_name = sanitize_filename(candidate.filename)
        storage_filename = generate_storage_name(safe_name)

        try:
            location = await self.store.write(str(company.id), storage_filename, candidate.content)
        except StorageError as e:
            logger.error(f"Failed to store file {candidate.ordinal} ({safe_name}): {e}", exc_info=True)
            errors.append(f"Failed to save {safe_name}")
            return None

        try:
            record = self.documents.create(
                company_id=company.id,
                name=safe_name,
                mime_type=candidate.mime_type,
                size_bytes=candidate.size_bytes,
                storage_path=location,
            )
        except Exception as e:
            logger.error(f"Failed to record file {candidate.ordinal} ({safe_name}): {e}", exc_info=True)
            errors.append(f"Failed to record {safe_name}")
            await self._discard_unrecorded(location)
            return None

        documents_stored_total.inc()
        return record

    async def _discard_unrecorded(self, location: str) -> None:
        """Remove bytes whose metadata insert failed."""
        try:
            await self.store.delete(location)
        except StorageError as e:
            logger.error(f"Failed to remove unrecorded object {location}: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def list_documents(self, user_id: UUID) -> List[DocumentRecord]:
        """All documents of the user's company, newest first."""
        company = self._company_of(user_id)
        return self.documents.find_many_by_company(company.id)

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    async def open_download(self, user_id: UUID, raw_document_id: str) -> DocumentDownload:
        """Authorize and open a document for streaming.

        Raises:
            InvalidDocumentId: Id is not a UUID
            DocumentNotFound: No such document
            AccessDenied: Document belongs to another company
            StoreReadFailure: Record exists but the bytes cannot be read
        """
        record = self._authorized_document(user_id, raw_document_id)

        try:
            stream = await self.store.open_for_read(record.storage_path)
        except (OSError, StorageError) as e:
            logger.error(
                f"Stored bytes unreadable for document {record.id}: {e}",
                extra={"company_id": record.company_id, "user_id": user_id},
                exc_info=True,
            )
            raise StoreReadFailure("File access error", ["Unable to access the requested file"]) from e

        return DocumentDownload(record=record, stream=stream)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, user_id: UUID, raw_document_id: str) -> DeletedDocument:
        """Delete a document's bytes, then its record.

        A missing object in the store is logged and tolerated; the record is
        still removed.

        Raises:
            InvalidDocumentId, DocumentNotFound, AccessDenied: As for download
            DeletionFailed: Store or metadata store refused the delete
        """
        record = self._authorized_document(user_id, raw_document_id)
        deleted = DeletedDocument(id=record.id, name=record.name)

        try:
            bytes_present = await self.store.delete(record.storage_path)
        except StorageError as e:
            logger.error(f"Failed to delete stored bytes for document {record.id}: {e}", exc_info=True)
            raise DeletionFailed("Deletion failed", ["Unable to delete the stored file"]) from e

        if not bytes_present:
            logger.warning(
                f"Stored bytes already absent for document {record.id} at {record.storage_path}",
                extra={"company_id": record.company_id, "user_id": user_id},
            )

        try:
            self.documents.delete_by_id(record.id)
        except Exception as e:
            logger.error(f"Failed to delete record for document {record.id}: {e}", exc_info=True)
            raise DeletionFailed("Deletion failed", ["Unable to delete the document record"]) from e

        documents_deleted_total.labels(bytes_present=str(bytes_present).lower()).inc()
        self._notify(user_id, f'Document "{deleted.name}" has been successfully deleted')
        logger.info(
            f"Deleted document {deleted.id}",
            extra={"company_id": record.company_id, "user_id": user_id},
        )
        return deleted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _company_of(self, user_id: UUID) -> CompanyRecord:
        company = self.companies.find_by_owner(user_id)
        if company is None:
            logger.warning(f"No company for user {user_id}")
            raise CompanyNotFound("Company not found", ["No company is associated with this user"])
        return company

    def _authorized_document(self, user_id: UUID, raw_document_id: str) -> DocumentRecord:
        """Resolve a document id and check the caller owns its company."""
        try:
            document_id = UUID(str(raw_document_id))
        except ValueError:
            raise InvalidDocumentId("Invalid document ID", [f"'{raw_document_id}' is not a valid document ID"])

        record = self.documents.find_by_id(document_id)
        if record is None:
            raise DocumentNotFound("Document not found")

        company = self.companies.find_by_id(record.company_id)
        if company is None or company.owner_id != user_id:
            logger.warning(
                f"Access denied to document {document_id}",
                extra={"company_id": record.company_id, "user_id": user_id},
            )
            raise AccessDenied("Access denied", ["You do not have access to this document"])

        return record

    def _notify(self, user_id: UUID, message: str) -> None:
        """Best-effort notification; failures are logged only."""
        try:
            self.notifier.send(user_id, NOTIFICATION_CATEGORY, message)
        except Exception as e:
            logger.warning(f"Notification delivery failed for user {user_id}: {e}")
