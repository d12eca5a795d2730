"""Documents domain module - upload intake, scanning, storage and lifecycle"""

from .errors import (
    DocumentError,
    ValidationFailed,
    NoFilesUploaded,
    InvalidDocumentId,
    AuthenticationRequired,
    AccessDenied,
    CompanyNotFound,
    DocumentNotFound,
    ScanInfected,
    ScanUnavailable,
    PartialUploadFailure,
    StoreReadFailure,
    DeletionFailed,
)
from .models import (
    UploadCandidate,
    ScanVerdict,
    Rejection,
    RejectionReason,
    IntakeResult,
    DocumentDownload,
    DeletedDocument,
)
from .upload_phase import UploadPhase, UploadTracker, can_transition, ALLOWED_TRANSITIONS
from .validation import (
    classify_type,
    classify_size,
    sanitize_filename,
    generate_storage_name,
    SUPPORTED_MIME_TYPES,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_FILES_PER_UPLOAD,
)
from .intake import IncomingPart, collect_candidates
from .scanning import ScanCoordinator, ScanReport
from .service import DocumentLifecycleService

__all__ = [
    "DocumentError",
    "ValidationFailed",
    "NoFilesUploaded",
    "InvalidDocumentId",
    "AuthenticationRequired",
    "AccessDenied",
    "CompanyNotFound",
    "DocumentNotFound",
    "ScanInfected",
    "ScanUnavailable",
    "PartialUploadFailure",
    "StoreReadFailure",
    "DeletionFailed",
    "UploadCandidate",
    "ScanVerdict",
    "Rejection",
    "RejectionReason",
    "IntakeResult",
    "DocumentDownload",
    "DeletedDocument",
    "UploadPhase",
    "UploadTracker",
    "can_transition",
    "ALLOWED_TRANSITIONS",
    "classify_type",
    "classify_size",
    "sanitize_filename",
    "generate_storage_name",
    "SUPPORTED_MIME_TYPES",
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_MAX_FILES_PER_UPLOAD",
    "IncomingPart",
    "collect_candidates",
    "ScanCoordinator",
    "ScanReport",
    "DocumentLifecycleService",
]
