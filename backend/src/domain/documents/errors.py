"""Error taxonomy for the document lifecycle.

Every failure that can reach a caller is a DocumentError subclass carrying an
HTTP status, a stable machine code, a human message and an optional list of
details. The API layer renders them as JSON; raw internal exceptions are never
surfaced.
"""

from typing import Any, Dict, List, Optional, Sequence


class DocumentError(Exception):
    """Base class for structured, caller-visible failures."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, details: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.message = message
        self.details: List[str] = list(details or [])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationFailed(DocumentError):
    """One or more files were rejected by type, size or count checks."""
    status_code = 400
    code = "validation_error"


class NoFilesUploaded(DocumentError):
    status_code = 400
    code = "no_files_uploaded"


class InvalidDocumentId(DocumentError):
    status_code = 400
    code = "invalid_document_id"


class AuthenticationRequired(DocumentError):
    status_code = 401
    code = "authentication_required"


class AccessDenied(DocumentError):
    """The document belongs to a company the caller does not own."""
    status_code = 403
    code = "access_denied"


class CompanyNotFound(DocumentError):
    status_code = 404
    code = "company_not_found"


class DocumentNotFound(DocumentError):
    status_code = 404
    code = "document_not_found"


class ScanInfected(DocumentError):
    """The scanner flagged at least one file in the batch.

    This is a security rejection, not a server fault, hence 400.
    """
    status_code = 400
    code = "virus_scan_failed"

    def __init__(self, message: str, infected_files: Sequence[str]):
        super().__init__(
            message,
            details=[f"Infected files detected: {', '.join(infected_files)}"],
        )
        self.infected_files = list(infected_files)


class ScanUnavailable(DocumentError):
    """The scanning service could not produce verdicts for the batch."""
    status_code = 500
    code = "scan_service_unavailable"


class PartialUploadFailure(DocumentError):
    """Some files of a batch were stored, others failed during persistence.

    The stored documents stay committed; they are carried here so that the
    caller can tell which files made it.
    """
    status_code = 500
    code = "partial_upload_failure"

    def __init__(self, message: str, details: Sequence[str], stored: Optional[Sequence[Any]] = None):
        super().__init__(message, details=details)
        self.stored = list(stored or [])
        # Serialized summaries of self.stored, filled in while the session is open
        self.uploaded: List[Dict[str, Any]] = []

    def to_dict(self) -> Dict[str, Any]:
        content = super().to_dict()
        content["uploaded"] = self.uploaded
        return content


class StoreReadFailure(DocumentError):
    """A metadata record exists but its bytes cannot be read."""
    status_code = 500
    code = "file_access_error"


class DeletionFailed(DocumentError):
    status_code = 500
    code = "deletion_failed"
