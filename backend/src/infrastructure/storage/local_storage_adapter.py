"""Local Storage Adapter - filesystem implementation of DocumentStorePort.

Layout: ``{root_dir}/{company_id}/{storage_filename}``. Stored locations are
relative to root_dir so the tree can be moved without rewriting metadata.

Writes go to a temporary file inside the namespace directory, are fsynced and
size-checked, then renamed into place with os.replace. A crash or cancellation
mid-write leaves at most a hidden ``.upload-*`` temp file, never a truncated
file at the final path.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import BinaryIO, Union

from domain.documents.ports.object_storage_port import DocumentStorePort, StorageError

logger = logging.getLogger(__name__)

_NAMESPACE_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')
_TEMP_PREFIX = ".upload-"


class LocalStorageAdapter(DocumentStorePort):
    """Filesystem content store rooted at a single directory."""

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir).resolve()
        self.root_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized local storage adapter: root={self.root_dir}")

    async def write(self, namespace: str, storage_filename: str, content: bytes) -> str:
        if not _NAMESPACE_PATTERN.match(namespace or ""):
            raise StorageError(f"Invalid namespace: {namespace!r}")
        if not storage_filename or os.path.basename(storage_filename) != storage_filename \
                or storage_filename.startswith("."):
            raise StorageError(f"Invalid storage filename: {storage_filename!r}")

        namespace_dir = self.root_dir / namespace
        final_path = namespace_dir / storage_filename

        try:
            namespace_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create namespace directory {namespace_dir}: {e}")
            raise StorageError(f"Failed to create namespace directory: {e}")

        if final_path.exists():
            raise StorageError(f"Refusing to overwrite existing object: {namespace}/{storage_filename}")

        fd, temp_name = tempfile.mkstemp(prefix=_TEMP_PREFIX, dir=namespace_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            written = os.path.getsize(temp_name)
            if written != len(content):
                raise StorageError(
                    f"Short write for {storage_filename}: {written} of {len(content)} bytes"
                )

            os.replace(temp_name, final_path)
        except OSError as e:
            _remove_quietly(temp_name)
            logger.error(f"Failed to write {namespace}/{storage_filename}: {e}")
            raise StorageError(f"Failed to write file: {e}")
        except BaseException:
            _remove_quietly(temp_name)
            raise

        location = f"{namespace}/{storage_filename}"
        logger.info(f"Stored file: location={location}, size={len(content)}")
        return location

    async def open_for_read(self, location: str) -> BinaryIO:
        path = self._resolve(location)
        try:
            return open(path, "rb")
        except FileNotFoundError:
            logger.warning(f"File not found: location={location}")
            raise
        except OSError as e:
            logger.error(f"Failed to open {location}: {e}")
            raise StorageError(f"Failed to open file: {e}")

    async def delete(self, location: str) -> bool:
        path = self._resolve(location)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info(f"File not found for deletion: location={location}")
            return False
        except OSError as e:
            logger.error(f"Failed to delete {location}: {e}")
            raise StorageError(f"Failed to delete file: {e}")

        logger.info(f"Deleted file: location={location}")
        return True

    async def health_check(self) -> None:
        if not os.access(self.root_dir, os.W_OK):
            raise StorageError(f"Storage root not writable: {self.root_dir}")

    def _resolve(self, location: str) -> Path:
        """Map a stored location to a path, refusing anything outside root_dir."""
        path = (self.root_dir / location).resolve()
        if self.root_dir not in path.parents:
            raise StorageError(f"Location escapes storage root: {location!r}")
        return path


def _remove_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
