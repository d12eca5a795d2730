"""File validation utilities for document uploads

Pure functions deciding per-file acceptability (type allow-list, size ceiling)
and deriving safe names from untrusted client input. No I/O.
"""

import os
import re
import secrets
import time
from enum import Enum
from typing import Optional


PDF_MIME_TYPES = frozenset({
    'application/pdf',
})

EXCEL_MIME_TYPES = frozenset({
    'application/vnd.ms-excel',  # .xls
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',  # .xlsx
})

POWERPOINT_MIME_TYPES = frozenset({
    'application/vnd.ms-powerpoint',  # .ppt
    'application/vnd.openxmlformats-officedocument.presentationml.presentation',  # .pptx
})

SUPPORTED_MIME_TYPES = PDF_MIME_TYPES | EXCEL_MIME_TYPES | POWERPOINT_MIME_TYPES

DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024
DEFAULT_MAX_FILES_PER_UPLOAD = 10

# Used when sanitizing leaves nothing usable
PLACEHOLDER_FILENAME = "document"

MAX_FILENAME_LENGTH = 255

_EXTENSION_PATTERN = re.compile(r'^\.[a-z0-9]{1,10}$')


class Classification(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """Strip parameters and case from a declared media type.

    Example:
        >>> normalize_mime_type('Application/PDF; charset=binary')
        'application/pdf'
    """
    if not mime_type:
        return ""
    return mime_type.split(';', 1)[0].strip().lower()


def classify_type(mime_type: Optional[str]) -> Classification:
    """Check a declared media type against the upload allow-list.

    Only PDF, Excel and PowerPoint documents are accepted.

    Example:
        >>> classify_type('application/pdf')
        <Classification.ACCEPTED: 'accepted'>
        >>> classify_type('text/plain')
        <Classification.REJECTED: 'rejected'>
    """
    if normalize_mime_type(mime_type) in SUPPORTED_MIME_TYPES:
        return Classification.ACCEPTED
    return Classification.REJECTED


def classify_size(size_bytes: int, max_size: int = DEFAULT_MAX_FILE_SIZE) -> Classification:
    """Reject payloads strictly larger than the ceiling."""
    if size_bytes > max_size:
        return Classification.REJECTED
    return Classification.ACCEPTED


def format_size_limit(max_size: int) -> str:
    """Render a byte ceiling for user-facing messages.

    Example:
        >>> format_size_limit(50 * 1024 * 1024)
        '50MB'
    """
    mib = 1024 * 1024
    if max_size >= mib and max_size % mib == 0:
        return f"{max_size // mib}MB"
    if max_size >= 1024 and max_size % 1024 == 0:
        return f"{max_size // 1024}KB"
    return f"{max_size} bytes"


def too_many_files_message(ordinal: int, max_files: int) -> str:
    return f"File {ordinal}: Too many files. Maximum {max_files} files allowed per upload"


def invalid_type_message(ordinal: int) -> str:
    return f"File {ordinal}: Invalid file type. Only PDF, Excel, and PowerPoint files are allowed."


def file_too_large_message(ordinal: int, max_size: int) -> str:
    return f"File {ordinal}: File too large. Maximum size is {format_size_limit(max_size)}."


def sanitize_filename(filename: Optional[str]) -> str:
    """Sanitize an untrusted filename for display, storage and HTTP headers.

    The result is deterministic, never empty and never contains directory
    separators, quotes, control characters or non-ASCII characters (it is
    echoed into a Content-Disposition header on download).

    Args:
        filename: Original filename as sent by the client

    Returns:
        Sanitized filename

    Example:
        >>> sanitize_filename('../../etc/passwd')
        'passwd'
        >>> sanitize_filename('Q3 report (final).pdf')
        'Q3_report_final_.pdf'
        >>> sanitize_filename('..')
        'document'
    """
    if not filename:
        return PLACEHOLDER_FILENAME

    # Remove path components, whichever separator the client used
    filename = filename.replace('\\', '/').rsplit('/', 1)[-1]

    # Replace anything outside a conservative ASCII set with underscore
    filename = re.sub(r'[^\w\s.-]', '_', filename, flags=re.ASCII)

    # Collapse whitespace (including control whitespace) and underscores
    filename = re.sub(r'[\s_]+', '_', filename, flags=re.ASCII)

    # No hidden files, no "." / ".." remnants
    filename = filename.strip('. ')

    if not filename.strip('_'):
        return PLACEHOLDER_FILENAME

    if len(filename) > MAX_FILENAME_LENGTH:
        name, ext = os.path.splitext(filename)
        filename = name[:MAX_FILENAME_LENGTH - len(ext)] + ext

    return filename


def generate_storage_name(safe_name: str) -> str:
    """Build a collision-resistant on-disk name for a sanitized filename.

    Combines a millisecond timestamp with 64 random bits and keeps the
    original extension, so two uploads of ``report.pdf`` never collide.

    Example:
        >>> generate_storage_name('report.PDF')  # doctest: +SKIP
        '1760780000000_9f86d081884c7d65.pdf'
    """
    ext = os.path.splitext(safe_name)[1].lower()
    if not _EXTENSION_PATTERN.match(ext):
        ext = ""
    return f"{int(time.time() * 1000)}_{secrets.token_hex(8)}{ext}"
