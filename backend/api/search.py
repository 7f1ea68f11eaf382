"""
Search and graph statistics API

Endpoints:
- GET /search        - ?query=...&version_id=&tags=a,b&limit=&offset=
- GET /graph/stats   - node and edge counts by type
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_graphdb_service, get_search_service
from models.api.search import GraphStatsResponse, SearchQuery, SearchResponse, SearchResult
from services.graphdb_service import GraphDBService
from services.search_service import SearchService

router = APIRouter(tags=["Search"])


@router.get("/search", response_model=SearchResponse)
async def search(
    query: Annotated[SearchQuery, Query()],
    service: Annotated[SearchService, Depends(get_search_service)],
):
    results, total = await service.search(query)
    return SearchResponse(
        results=[SearchResult(**row) for row in results],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/graph/stats", response_model=GraphStatsResponse)
async def graph_stats(graph: Annotated[GraphDBService, Depends(get_graphdb_service)]):
    return GraphStatsResponse(**await graph.get_graph_stats())
