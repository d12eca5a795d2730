"""UploadPhase state machine for the upload request lifecycle

State flow:
INTAKE → VALIDATED → SCANNED → PERSISTED → RESPONDED
Any non-terminal phase can move to FAILED.
"""

from enum import Enum
from typing import Dict, List


class UploadPhase(str, Enum):
    """Phase of one upload request"""
    INTAKE = "INTAKE"          # Consuming the multipart stream
    VALIDATED = "VALIDATED"    # Batch passed type/size/count checks
    SCANNED = "SCANNED"        # Scanner reported every file clean
    PERSISTED = "PERSISTED"    # Every file written and recorded
    RESPONDED = "RESPONDED"    # Success returned (terminal)
    FAILED = "FAILED"          # Request aborted (terminal)


ALLOWED_TRANSITIONS: Dict[UploadPhase, List[UploadPhase]] = {
    UploadPhase.INTAKE: [UploadPhase.VALIDATED, UploadPhase.FAILED],
    UploadPhase.VALIDATED: [UploadPhase.SCANNED, UploadPhase.FAILED],
    UploadPhase.SCANNED: [UploadPhase.PERSISTED, UploadPhase.FAILED],
    UploadPhase.PERSISTED: [UploadPhase.RESPONDED, UploadPhase.FAILED],
    UploadPhase.RESPONDED: [],
    UploadPhase.FAILED: [],
}


def can_transition(from_phase: UploadPhase, to_phase: UploadPhase) -> bool:
    """Validate if phase transition is allowed

    Example:
        >>> can_transition(UploadPhase.INTAKE, UploadPhase.VALIDATED)
        True
        >>> can_transition(UploadPhase.INTAKE, UploadPhase.PERSISTED)
        False
    """
    return to_phase in ALLOWED_TRANSITIONS.get(from_phase, [])


def is_terminal(phase: UploadPhase) -> bool:
    return not ALLOWED_TRANSITIONS.get(phase)


class UploadTracker:
    """Tracks the phase of one upload request and rejects illegal jumps."""

    def __init__(self) -> None:
        self.phase = UploadPhase.INTAKE

    def advance(self, to_phase: UploadPhase) -> UploadPhase:
        if not can_transition(self.phase, to_phase):
            raise ValueError(f"Illegal upload phase transition: {self.phase.value} -> {to_phase.value}")
        self.phase = to_phase
        return self.phase

    def fail(self) -> UploadPhase:
        """Mark the request failed and return the phase it failed after."""
        failed_after = self.phase
        if not is_terminal(self.phase):
            self.phase = UploadPhase.FAILED
        return failed_after
