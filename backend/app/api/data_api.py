############################################################
#
# etlive - ET Live Data Server
#
# data_api.py: Latest node data endpoints for the front end
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Latest-data endpoints.

An unknown node and a node with nothing cached are both answered with 418.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.api.dependencies import get_collector
from backend.app.core.collector.exceptions import NoDataError, NodeNotFoundError
from backend.app.core.collector.models import AllDataResponse, NodeEntry
from backend.app.core.collector.read_api import get_all_entries, get_node_entry
from backend.app.core.collector.service import CollectorService

router = APIRouter(tags=["data"])

NO_DATA_STATUS = status.HTTP_418_IM_A_TEAPOT


@router.get("/all", response_model=AllDataResponse)
async def all_data(
    collector: CollectorService = Depends(get_collector),
) -> AllDataResponse:
    """Every configured node with its latest measurement, sorted by node id."""
    nodes = await get_all_entries(collector.registry, collector.cache)
    if not nodes:
        raise HTTPException(status_code=NO_DATA_STATUS, detail="No nodes")
    return AllDataResponse(data=nodes)


@router.get("/{node}", response_model=NodeEntry)
async def node_data(
    node: str,
    collector: CollectorService = Depends(get_collector),
) -> NodeEntry:
    """Latest measurement for one node (id is case-insensitive)."""
    try:
        return await get_node_entry(collector.registry, collector.cache, node)
    except (NodeNotFoundError, NoDataError) as e:
        raise HTTPException(status_code=NO_DATA_STATUS, detail=str(e))
