"""Domain models for document ingestion.

These are plain dataclasses that live for the duration of one request. The
durable record is the SQLAlchemy Document model; the service only relies on the
DocumentRecord/CompanyRecord protocols below so that tests can substitute
in-memory doubles.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import BinaryIO, List, Protocol, Tuple
from uuid import UUID


class DocumentRecord(Protocol):
    """Durable metadata describing one stored file."""
    id: UUID
    company_id: UUID
    name: str
    mime_type: str
    size_bytes: int
    storage_path: str
    created_at: datetime


class CompanyRecord(Protocol):
    id: UUID
    owner_id: UUID


@dataclass
class UploadCandidate:
    """An in-memory file that passed intake checks and awaits scanning.

    Attributes:
        content: Raw file bytes
        mime_type: Declared (normalized) media type
        filename: Original filename, or a placeholder when none was sent
        ordinal: 1-based position of the part in the multipart stream
    """
    content: bytes
    mime_type: str
    filename: str
    ordinal: int

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class RejectionReason(str, Enum):
    """Why Stream Intake refused a part."""
    TOO_MANY_FILES = "too_many_files"
    INVALID_TYPE = "invalid_type"
    TOO_LARGE = "too_large"


@dataclass(frozen=True)
class Rejection:
    ordinal: int
    reason: RejectionReason
    message: str


@dataclass
class IntakeResult:
    """Outcome of consuming one multipart stream.

    A non-empty rejection list means the whole batch must be refused.
    """
    candidates: List[UploadCandidate] = field(default_factory=list)
    rejections: List[Rejection] = field(default_factory=list)

    @property
    def errors(self) -> List[str]:
        return [rejection.message for rejection in self.rejections]


@dataclass(frozen=True)
class ScanVerdict:
    """Scanner determination for one candidate.

    threats is empty when clean is True.
    """
    clean: bool
    threats: Tuple[str, ...] = ()

    @classmethod
    def infected(cls, *threats: str) -> "ScanVerdict":
        return cls(clean=False, threats=tuple(threats) or ("Unknown threat",))


@dataclass
class DocumentDownload:
    """An authorized, opened document ready to be streamed."""
    record: DocumentRecord
    stream: BinaryIO


@dataclass(frozen=True)
class DeletedDocument:
    id: UUID
    name: str
