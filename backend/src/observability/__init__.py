"""Observability module for DocVault.

Provides structured logging, request correlation, metrics and health checks.
"""

from .logging_config import configure_logging
from .metrics import (
    uploads_total,
    files_rejected_total,
    documents_stored_total,
    scan_duration_seconds,
    documents_deleted_total,
)
from .request_context import request_id_var, get_request_id, bind_request_id, reset_request_id
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    # Metrics
    "uploads_total",
    "files_rejected_total",
    "documents_stored_total",
    "scan_duration_seconds",
    "documents_deleted_total",
    # Request context
    "request_id_var",
    "get_request_id",
    "bind_request_id",
    "reset_request_id",
    # Middleware
    "RequestIDMiddleware",
]
