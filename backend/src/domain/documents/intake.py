"""Stream Intake - turns an incoming stream of file parts into upload candidates.

Parts share one underlying transport stream, so they are consumed strictly in
order, one at a time. Each await on a part is a suspension point; a cancelled
request stops intake at the next one.
"""

import logging
from typing import AsyncIterator, Optional, Protocol, Tuple

from .models import IntakeResult, Rejection, RejectionReason, UploadCandidate
from .validation import (
    Classification,
    classify_size,
    classify_type,
    file_too_large_message,
    invalid_type_message,
    normalize_mime_type,
    too_many_files_message,
)

logger = logging.getLogger(__name__)


class IncomingPart(Protocol):
    """One file part of a multipart upload."""

    filename: Optional[str]
    content_type: Optional[str]

    async def read(self, max_bytes: int) -> Tuple[bytes, int]:
        """Consume the whole part, keeping at most max_bytes in memory.

        Returns:
            Tuple of (retained bytes, total size of the part)
        """
        ...

    async def drain(self) -> None:
        """Consume and discard the rest of the part."""
        ...


async def collect_candidates(
    parts: AsyncIterator[IncomingPart],
    max_files: int,
    max_file_size: int,
) -> IntakeResult:
    """Consume every part of an upload stream and classify it.

    Policy per part (1-based ordinal):
    1. Beyond max_files: record one error, drain this and every remaining
       part without buffering, stop.
    2. Declared type not allowed: record an error, drain, continue.
    3. Payload larger than max_file_size: record an error, discard, continue.
    4. Otherwise: keep as a candidate.

    Args:
        parts: Async iterator over the incoming file parts
        max_files: Maximum number of files per batch
        max_file_size: Per-file byte ceiling

    Returns:
        IntakeResult: Accepted candidates and rejections. Callers must refuse
        the whole batch if any rejection was recorded.
    """
    result = IntakeResult()
    ordinal = 0

    async for part in parts:
        ordinal += 1

        if ordinal > max_files:
            result.rejections.append(Rejection(
                ordinal=ordinal,
                reason=RejectionReason.TOO_MANY_FILES,
                message=too_many_files_message(ordinal, max_files),
            ))
            await part.drain()
            drained = 0
            async for extra in parts:
                await extra.drain()
                drained += 1
            logger.warning(
                f"Upload exceeded file limit: max_files={max_files}, "
                f"drained_parts={drained + 1}"
            )
            break

        if classify_type(part.content_type) is Classification.REJECTED:
            result.rejections.append(Rejection(
                ordinal=ordinal,
                reason=RejectionReason.INVALID_TYPE,
                message=invalid_type_message(ordinal),
            ))
            logger.info(f"Rejected part {ordinal}: content_type={part.content_type!r}")
            await part.drain()
            continue

        content, size_bytes = await part.read(max_file_size)

        if classify_size(size_bytes, max_file_size) is Classification.REJECTED:
            result.rejections.append(Rejection(
                ordinal=ordinal,
                reason=RejectionReason.TOO_LARGE,
                message=file_too_large_message(ordinal, max_file_size),
            ))
            logger.info(f"Rejected part {ordinal}: size={size_bytes} > {max_file_size}")
            continue

        result.candidates.append(UploadCandidate(
            content=content,
            mime_type=normalize_mime_type(part.content_type),
            filename=part.filename or f"file_{ordinal}",
            ordinal=ordinal,
        ))

    return result
