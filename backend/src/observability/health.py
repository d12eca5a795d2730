"""Health check utilities for DocVault.

Provides health checks for the metadata database and the content store.
"""

import logging
import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.documents.ports.object_storage_port import DocumentStorePort, StorageError

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def check_database_health(db: Session) -> ComponentHealth:
    """Check metadata database connectivity."""
    try:
        start = time.perf_counter()
        db.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000

        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Database connection OK",
            latency_ms=round(latency_ms, 2)
        )
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message="Database unavailable"
        )


async def check_content_store_health(store: DocumentStorePort) -> ComponentHealth:
    """Check that the content store can accept writes.

    Local: the root directory is writable. S3: the bucket is reachable.
    A failure degrades rather than fails health, since list/delete still work.
    """
    start = time.perf_counter()
    try:
        await store.health_check()
    except StorageError as e:
        logger.error(f"Content store health check failed: {e}")
        return ComponentHealth(status=HealthStatus.DEGRADED, message="Content store unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Content store OK",
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
    )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Determine overall health from component statuses."""
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY

    if any(c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY

    return HealthStatus.DEGRADED
