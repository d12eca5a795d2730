"""Document Store Port - Domain interface for the durable content store.

This port defines the contract for writing, reading and deleting document bytes.
Adapters implement it for the local filesystem or S3-compatible object storage.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from typing import BinaryIO


class StorageError(Exception):
    """Base exception for content store operations."""
    pass


class DocumentStorePort(ABC):
    """Port interface for the company-scoped content store.

    Key Design Principles:
    - Every stored object lives under exactly one namespace (company id)
    - A reader never observes a partially written object at its final location
    - No authorization happens here; callers check ownership first
    - Deletion is idempotent (deleting a missing object returns False)

    Example Usage:
        store = LocalStorageAdapter(root_dir="uploads")

        location = await store.write(
            namespace=str(company_id),
            storage_filename="1760780000000_9f86d081884c7d65.pdf",
            content=pdf_bytes,
        )

        stream = await store.open_for_read(location)
    """

    @abstractmethod
    async def write(self, namespace: str, storage_filename: str, content: bytes) -> str:
        """Durably store bytes under a namespace.

        Creates the namespace if it does not exist yet. The object only becomes
        visible at its final location once it has been written completely.

        Args:
            namespace: Company identifier the object is scoped to
            storage_filename: Collision-resistant generated name
            content: Full file payload

        Returns:
            str: Location of the stored object, recorded in document metadata

        Raises:
            StorageError: If the object could not be written; nothing is left
                behind at the final location
        """
        pass

    @abstractmethod
    async def open_for_read(self, location: str) -> BinaryIO:
        """Open a stored object for streaming.

        Args:
            location: Location returned by write()

        Returns:
            BinaryIO: Readable stream (caller must close when done)

        Raises:
            FileNotFoundError: If the object doesn't exist
            StorageError: If the object cannot be accessed
        """
        pass

    @abstractmethod
    async def delete(self, location: str) -> bool:
        """Delete a stored object.

        Args:
            location: Location returned by write()

        Returns:
            bool: True if the object existed and was removed, False if it was
                already absent

        Raises:
            StorageError: If deletion fails for any other reason
        """
        pass

    async def health_check(self) -> None:
        """Check that the store can currently accept writes.

        Raises:
            StorageError: If the store is unreachable or read-only
        """
        pass
