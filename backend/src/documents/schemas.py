"""Document API request/response schemas"""

from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DocumentSummary(BaseModel):
    """Public view of a stored document (the storage path is never exposed)"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="UUID of the document")
    name: str = Field(..., description="Sanitized original filename")
    mime_type: str = Field(..., description="Declared media type")
    size_bytes: int = Field(..., description="File size in bytes")
    created_at: datetime = Field(..., description="Upload timestamp")


class UploadResponse(BaseModel):
    """Response for a fully successful upload"""
    message: str = Field("Files uploaded successfully")
    data: List[DocumentSummary] = Field(..., description="Created documents, in upload order")


class DocumentListResponse(BaseModel):
    data: List[DocumentSummary] = Field(..., description="Documents of the caller's company, newest first")


class DeletedDocumentData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class DeleteResponse(BaseModel):
    message: str = Field("Document deleted successfully")
    data: DeletedDocumentData


class ErrorResponse(BaseModel):
    """Structured error body returned for every failure"""
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable summary")
    details: List[str] = Field(default_factory=list, description="Per-file or per-field details")


class PartialUploadErrorResponse(ErrorResponse):
    uploaded: List[DocumentSummary] = Field(
        default_factory=list,
        description="Documents that were stored before other files failed",
    )
