"""Metadata Store Port - Domain interface for document and company records."""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from ..models import CompanyRecord, DocumentRecord


class DocumentMetadataStore(ABC):
    """Persistent store for DocumentRecords.

    Each mutating call is its own transaction: once create() returns, the
    record is durable.
    """

    @abstractmethod
    def create(
        self,
        company_id: UUID,
        name: str,
        mime_type: str,
        size_bytes: int,
        storage_path: str,
    ) -> DocumentRecord:
        pass

    @abstractmethod
    def find_by_id(self, document_id: UUID) -> Optional[DocumentRecord]:
        pass

    @abstractmethod
    def find_many_by_company(self, company_id: UUID) -> List[DocumentRecord]:
        """Return the company's documents, newest first."""
        pass

    @abstractmethod
    def delete_by_id(self, document_id: UUID) -> None:
        pass


class CompanyDirectory(ABC):
    """Resolves companies (document namespaces) and their owners."""

    @abstractmethod
    def find_by_owner(self, user_id: UUID) -> Optional[CompanyRecord]:
        pass

    @abstractmethod
    def find_by_id(self, company_id: UUID) -> Optional[CompanyRecord]:
        pass
