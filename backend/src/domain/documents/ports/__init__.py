"""Ports (hexagonal interfaces) for the documents domain."""

from .object_storage_port import DocumentStorePort, StorageError
from .scan_service_port import ScanServicePort, ScanServiceError
from .metadata_store_port import DocumentMetadataStore, CompanyDirectory
from .notification_port import NotificationSink

__all__ = [
    "DocumentStorePort",
    "StorageError",
    "ScanServicePort",
    "ScanServiceError",
    "DocumentMetadataStore",
    "CompanyDirectory",
    "NotificationSink",
]
