"""Observability API endpoints.

Provides the Prometheus scrape endpoint and a health check.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from database import get_db
from dependencies import get_document_store
from domain.documents.ports.object_storage_port import DocumentStorePort
from .health import (
    check_content_store_health,
    check_database_health,
    get_overall_health,
    HealthStatus,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Returns health status of the database and the content store",
)
async def health_check(
    db: Session = Depends(get_db),
    store: DocumentStorePort = Depends(get_document_store),
):
    """Return 200 when healthy or degraded, 503 when the database is down."""
    components = {
        "database": check_database_health(db),
        "content_store": await check_content_store_health(store),
    }

    overall_status = get_overall_health(components)

    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        }
    }

    status_code = 200 if overall_status != HealthStatus.UNHEALTHY else 503

    return JSONResponse(content=response_data, status_code=status_code)
