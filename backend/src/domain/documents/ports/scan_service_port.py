"""Scan Service Port - Domain interface for the external malware scanner."""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from ..models import ScanVerdict


class ScanServiceError(Exception):
    """The scanner could not be reached or returned an unusable answer."""
    pass


class ScanServicePort(ABC):
    """Port interface for batch malware scanning.

    One call covers a whole upload batch. Verdicts are returned in the same
    order as the submitted files; callers correlate by position, never by
    filename (filenames may repeat within a batch).
    """

    @abstractmethod
    async def scan_batch(self, files: Sequence[Tuple[bytes, str]]) -> List[ScanVerdict]:
        """Scan a batch of (content, filename) pairs.

        Returns:
            List[ScanVerdict]: One verdict per file, positionally aligned

        Raises:
            ScanServiceError: On connectivity, timeout or protocol failures
        """
        pass
