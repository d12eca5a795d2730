"""Global FastAPI dependencies wiring the document lifecycle to its adapters.

Long-lived adapters (content store, scan client) are built once from settings
and cached; repositories and the notification sink are bound to the request's
database session. Tests replace any of these through app.dependency_overrides.
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from config import Settings, get_settings
from database import get_db
from domain.documents.ports.object_storage_port import DocumentStorePort
from domain.documents.ports.scan_service_port import ScanServicePort
from domain.documents.scanning import ScanCoordinator
from domain.documents.service import DocumentLifecycleService
from infrastructure.notifications.notification_sink import DatabaseNotificationSink
from infrastructure.repositories.document_repository import SqlCompanyDirectory, SqlDocumentRepository
from infrastructure.scanning.http_scan_client import HttpScanClient
from infrastructure.storage.local_storage_adapter import LocalStorageAdapter
from infrastructure.storage.s3_storage_adapter import S3StorageAdapter
from infrastructure.storage.storage_config import load_storage_config, validate_storage_backend

logger = logging.getLogger(__name__)


def build_document_store(settings: Settings) -> DocumentStorePort:
    """Create the content store selected by STORAGE_BACKEND.

    Raises:
        ValueError: If the backend or its configuration is invalid
    """
    backend = validate_storage_backend(settings.STORAGE_BACKEND)
    if backend == "s3":
        config = load_storage_config(settings)
        return S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )
    return LocalStorageAdapter(settings.UPLOAD_DIR)


@lru_cache()
def get_document_store() -> DocumentStorePort:
    """Cached content store for the process."""
    return build_document_store(get_settings())


@lru_cache()
def get_scan_service() -> ScanServicePort:
    settings = get_settings()
    return HttpScanClient(
        base_url=settings.SCAN_SERVICE_URL,
        timeout_seconds=settings.SCAN_SERVICE_TIMEOUT_SECONDS,
        api_key=settings.SCAN_SERVICE_API_KEY,
    )


def get_document_service(
    db: Session = Depends(get_db),
    store: DocumentStorePort = Depends(get_document_store),
    scanner: ScanServicePort = Depends(get_scan_service),
    settings: Settings = Depends(get_settings),
) -> DocumentLifecycleService:
    """Per-request lifecycle service bound to the request's session."""
    return DocumentLifecycleService(
        documents=SqlDocumentRepository(db),
        companies=SqlCompanyDirectory(db),
        store=store,
        scanner=ScanCoordinator(scanner),
        notifier=DatabaseNotificationSink(db),
        max_files=settings.MAX_FILES_PER_UPLOAD,
        max_file_size=settings.MAX_UPLOAD_SIZE_BYTES,
    )


DocumentServiceDep = Annotated[DocumentLifecycleService, Depends(get_document_service)]
