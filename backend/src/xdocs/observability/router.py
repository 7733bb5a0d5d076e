"""Observability API endpoints: liveness and Prometheus metrics."""

from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from ..auth.dependencies import AdminPrincipal

router = APIRouter(tags=["Observability"])


@router.get(
    "/healthz",
    summary="Liveness check",
    description="Answers 200 as long as the process serves requests; does not touch the database",
)
def healthz():
    return {"status": "ok"}


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint (ADMIN only)",
    include_in_schema=False,
)
def metrics(admin: AdminPrincipal):
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
