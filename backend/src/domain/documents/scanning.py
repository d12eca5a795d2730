"""Scan Coordinator - one scanner call per upload batch.

Verdicts are correlated with candidates by position. Any failure to obtain a
complete, aligned set of verdicts fails the batch closed as ScanUnavailable;
an unscanned file is never persisted.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from observability.metrics import scan_duration_seconds

from .errors import ScanUnavailable
from .models import ScanVerdict, UploadCandidate
from .ports.scan_service_port import ScanServicePort

logger = logging.getLogger(__name__)

SCAN_UNAVAILABLE_MESSAGE = "Virus scan service unavailable"
SCAN_UNAVAILABLE_DETAIL = "Unable to scan files for security threats"


@dataclass
class ScanReport:
    """Verdicts for a batch, aligned with the submitted candidates."""
    verdicts: List[ScanVerdict] = field(default_factory=list)
    infected: List[Tuple[UploadCandidate, ScanVerdict]] = field(default_factory=list)

    @property
    def all_clean(self) -> bool:
        return not self.infected

    def infected_descriptions(self) -> List[str]:
        """Human readable "<filename> (<threat>, ...)" entries."""
        return [
            f"{candidate.filename} ({', '.join(verdict.threats)})"
            for candidate, verdict in self.infected
        ]


class ScanCoordinator:
    """Submits a batch to the scan service and interprets the verdicts."""

    def __init__(self, scanner: ScanServicePort):
        self.scanner = scanner

    async def scan(self, candidates: Sequence[UploadCandidate]) -> ScanReport:
        """Scan all candidates in a single call.

        Raises:
            ScanUnavailable: Scanner failed, timed out or returned a verdict
                list that does not line up with the batch
        """
        started = time.monotonic()
        try:
            verdicts = await self.scanner.scan_batch(
                [(candidate.content, candidate.filename) for candidate in candidates]
            )
        except Exception as e:
            logger.error(f"Scan service call failed for batch of {len(candidates)}: {e}", exc_info=True)
            raise ScanUnavailable(SCAN_UNAVAILABLE_MESSAGE, [SCAN_UNAVAILABLE_DETAIL]) from e
        finally:
            scan_duration_seconds.observe(time.monotonic() - started)

        if len(verdicts) != len(candidates):
            logger.error(
                f"Scan service returned {len(verdicts)} verdicts for {len(candidates)} files"
            )
            raise ScanUnavailable(SCAN_UNAVAILABLE_MESSAGE, [SCAN_UNAVAILABLE_DETAIL])

        report = ScanReport(verdicts=list(verdicts))
        for candidate, verdict in zip(candidates, verdicts):
            if not verdict.clean:
                report.infected.append((candidate, verdict))

        return report
