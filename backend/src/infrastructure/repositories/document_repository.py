"""Document and company repositories for database operations"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.company import Company
from models.document import Document
from domain.documents.ports.metadata_store_port import CompanyDirectory, DocumentMetadataStore

logger = logging.getLogger(__name__)


class SqlDocumentRepository(DocumentMetadataStore):
    """Repository for document table operations.

    Every mutating call commits its own transaction so that a record which
    create() returned is durable, independent of sibling files in the batch.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def create(
        self,
        company_id: UUID,
        name: str,
        mime_type: str,
        size_bytes: int,
        storage_path: str,
    ) -> Document:
        document = Document(
            company_id=company_id,
            name=name,
            mime_type=mime_type,
            size_bytes=size_bytes,
            storage_path=storage_path,
        )

        try:
            self.db.add(document)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        self.db.refresh(document)
        return document

    def find_by_id(self, document_id: UUID) -> Optional[Document]:
        return self.db.get(Document, document_id)

    def find_many_by_company(self, company_id: UUID) -> List[Document]:
        """Get all documents of a company, newest first.

        Args:
            company_id: Company ID (namespace isolation)

        Returns:
            List of Document models
        """
        query = (
            select(Document)
            .where(Document.company_id == company_id)
            .order_by(Document.created_at.desc(), Document.id.desc())
        )
        return list(self.db.execute(query).scalars().all())

    def delete_by_id(self, document_id: UUID) -> None:
        try:
            self.db.execute(delete(Document).where(Document.id == document_id))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


class SqlCompanyDirectory(CompanyDirectory):
    """Resolves companies from the company table."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_owner(self, user_id: UUID) -> Optional[Company]:
        query = select(Company).where(Company.owner_id == user_id)
        return self.db.execute(query).scalars().first()

    def find_by_id(self, company_id: UUID) -> Optional[Company]:
        return self.db.get(Company, company_id)
