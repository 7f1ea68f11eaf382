"""
Search Service - keyword search over document metadata
"""
import logging
from typing import Any, Dict, List, Tuple

from models.api.search import SearchQuery
from services.graphdb_service import GraphDBService

logger = logging.getLogger(__name__)


class SearchService:

    def __init__(self, graph: GraphDBService):
        self.graph = graph

    async def search(self, query: SearchQuery) -> Tuple[List[Dict[str, Any]], int]:
        results, total = await self.graph.search_documents(
            query.query,
            version_id=query.version_id,
            tags=query.tags,
            limit=query.limit,
            offset=query.offset,
        )
        logger.debug(f"🔍 Search {query.query!r}: {total} hits")
        return results, total
