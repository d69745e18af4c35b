############################################################
#
# etlive - ET Live Data Server
#
# dependencies.py: FastAPI dependencies shared by the routers
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""FastAPI dependencies."""

from fastapi import HTTPException, Request, status

from backend.app.core.collector.service import CollectorService


def get_collector(request: Request) -> CollectorService:
    """The collector owned by the running application."""
    collector = getattr(request.app.state, "collector", None)
    if collector is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Collector not started",
        )
    return collector
