"""Document API endpoints for DocVault

Provides upload, list, download and delete for the caller's company.
Every failure is raised as a DocumentError and rendered by the application's
exception handler as {"error", "message", "details"}.
"""

import logging
from typing import BinaryIO, Iterator

from fastapi import APIRouter, Request, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from auth.dependencies import CurrentUser
from dependencies import DocumentServiceDep
from domain.documents.errors import PartialUploadFailure, ValidationFailed
from infrastructure.ingest.multipart_stream import MultipartFileStream, MultipartFormError
from .schemas import (
    DeletedDocumentData,
    DeleteResponse,
    DocumentListResponse,
    DocumentSummary,
    ErrorResponse,
    PartialUploadErrorResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _iter_stream(stream: BinaryIO, chunk_size: int = DOWNLOAD_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield a stored object in chunks and always close it."""
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed, no files, or infected files"},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse, "description": "User has no company"},
        500: {"model": PartialUploadErrorResponse, "description": "Scan unavailable or partial failure"},
    },
)
async def upload_documents(
    request: Request,
    current_user: CurrentUser,
    service: DocumentServiceDep,
):
    """Upload one or more documents.

    Accepts multipart/form-data; every part carrying a filename is a file.
    Supported file types: PDF, Excel (.xls, .xlsx), PowerPoint (.ppt, .pptx).

    The body is parsed as a stream: files are checked one by one as they
    arrive, excess files beyond the batch limit are drained without being
    buffered, and nothing is stored unless the whole batch passes validation
    and the malware scan.

    Example:
        curl -X POST https://docvault.example.com/api/v1/documents \\
             -H "Authorization: Bearer $TOKEN" \\
             -F "files=@deck.pptx" \\
             -F "files=@figures.xlsx"
    """
    try:
        parts = MultipartFileStream(request.stream(), request.headers.get("content-type"))
        records = await service.upload(current_user.id, parts)
    except MultipartFormError as e:
        logger.warning(f"Malformed upload body from user {current_user.id}: {e}")
        raise ValidationFailed("File validation failed", [str(e)])
    except PartialUploadFailure as e:
        # Serialize while the request session is still open; the records
        # expire once get_db closes it.
        e.uploaded = [
            DocumentSummary.model_validate(record).model_dump(mode="json")
            for record in e.stored
        ]
        raise

    return UploadResponse(
        message="Files uploaded successfully",
        data=[DocumentSummary.model_validate(record) for record in records],
    )


@router.get("", response_model=DocumentListResponse)
def list_documents(current_user: CurrentUser, service: DocumentServiceDep):
    """List the documents of the caller's company, newest first."""
    records = service.list_documents(current_user.id)
    return DocumentListResponse(data=[DocumentSummary.model_validate(record) for record in records])


@router.get(
    "/download/{document_id}",
    response_class=StreamingResponse,
    responses={
        200: {"description": "Raw document bytes"},
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse, "description": "Stored bytes unreadable"},
    },
)
async def download_document(document_id: str, current_user: CurrentUser, service: DocumentServiceDep):
    """Stream a document back with its original name and media type."""
    download = await service.open_download(current_user.id, document_id)
    record = download.record

    return StreamingResponse(
        _iter_stream(download.stream),
        media_type=record.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{record.name}"',
            "Content-Length": str(record.size_bytes),
        },
        # Closes the handle even if the body is never iterated
        background=BackgroundTask(download.stream.close),
    )


@router.delete(
    "/{document_id}",
    response_model=DeleteResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def delete_document(document_id: str, current_user: CurrentUser, service: DocumentServiceDep):
    """Delete a document's stored bytes and its record."""
    deleted = await service.delete(current_user.id, document_id)
    return DeleteResponse(
        message="Document deleted successfully",
        data=DeletedDocumentData(id=deleted.id, name=deleted.name),
    )
