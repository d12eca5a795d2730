"""Prometheus metrics for DocVault.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# Upload metrics
uploads_total = Counter(
    "docvault_uploads_total",
    "Total upload requests by outcome",
    ["outcome"]  # outcome: success|rejected|infected|scan_unavailable|partial_failure|error
)

files_rejected_total = Counter(
    "docvault_files_rejected_total",
    "Files refused during intake",
    ["reason"]  # reason: too_many_files|invalid_type|too_large
)

documents_stored_total = Counter(
    "docvault_documents_stored_total",
    "Documents durably stored (bytes and metadata)",
)

# Scan metrics
scan_duration_seconds = Histogram(
    "docvault_scan_duration_seconds",
    "Time spent waiting for one batch scan in seconds",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0]
)

# Deletion metrics
documents_deleted_total = Counter(
    "docvault_documents_deleted_total",
    "Documents deleted, labelled by whether the bytes were still present",
    ["bytes_present"]  # bytes_present: true|false
)
