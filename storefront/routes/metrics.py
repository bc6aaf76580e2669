"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP storefront_queries_total Total number of backend queries (success and failure)
        # TYPE storefront_queries_total counter
        storefront_queries_total{resource="listings",status="success"} 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Expose every storefront metric in the Prometheus text format.

    Returns:
        Response: Metrics with Content-Type text/plain
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
