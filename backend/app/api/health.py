############################################################
#
# etlive - ET Live Data Server
#
# health.py: Health check, status and Prometheus metrics endpoints
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Health check and metrics endpoints."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from backend.app.api.dependencies import get_collector
from backend.app.core.collector import metrics
from backend.app.core.collector.service import CollectorService

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def liveness_probe() -> Dict[str, str]:
    """
    Liveness probe - checks if the application is running.

    Returns 200 if the application is alive.
    """
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/status")
async def collector_status(
    request: Request,
    collector: CollectorService = Depends(get_collector),
) -> Dict[str, Any]:
    """
    Collector status summary.

    Node counts come from the cache only; no node is contacted.
    """
    settings = request.app.state.settings
    online = await collector.cache.count_online()
    total = len(collector.registry)

    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "nodes": {
            "total": total,
            "online": online,
            "offline": total - online,
        },
        "polls_in_flight": len(collector.scheduler.in_flight),
        "poll_interval_seconds": collector.scheduler.interval,
        "shutting_down": collector.coordinator.is_triggered,
    }


@router.get("/metrics")
async def prometheus_metrics(
    request: Request,
    collector: CollectorService = Depends(get_collector),
) -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    if not request.app.state.settings.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics disabled")

    metrics.NODES_ONLINE.set(await collector.cache.count_online())
    metrics.POLLS_IN_FLIGHT.set(len(collector.scheduler.in_flight))

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
