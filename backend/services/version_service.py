"""
Version Service - documentation releases and their page navigation
"""
import logging
from typing import List, Tuple

from models.api.version import VersionCreate, VersionQuery, VersionUpdate
from models.domain.graph_nodes import NavigationItem, Version, build_navigation_tree
from services.graphdb_service import GraphDBService
from utils.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class VersionService:

    def __init__(self, graph: GraphDBService):
        self.graph = graph

    async def create(self, request: VersionCreate) -> Version:
        """
        Raises:
            ConflictError: the version label is taken
        """
        await self._ensure_label_free(request.version)
        version = Version.new(
            version=request.version,
            name=request.name,
            description=request.description,
            is_public=request.is_public,
            is_main=request.is_main,
        )
        version = await self.graph.create_version_node(version)
        logger.info(f"🏷️  Version created: {version.id} ({version.version})")
        return version

    async def get(self, version_id: str) -> Version:
        version = await self.graph.get_version_node(version_id)
        if version is None:
            raise NotFoundError("Version", version_id)
        return version

    async def update(self, version_id: str, patch: VersionUpdate) -> Version:
        # description may be cleared with an explicit null
        updates = {
            k: v for k, v in patch.model_dump(exclude_unset=True).items()
            if v is not None or k == 'description'
        }
        if updates.get('version') is not None:
            await self._ensure_label_free(updates['version'], version_id)
        version = await self.graph.update_version_node(version_id, updates)
        if version is None:
            raise NotFoundError("Version", version_id)
        logger.info(f"✏️  Version updated: {version_id} {sorted(updates)}")
        return version

    async def delete(self, version_id: str) -> None:
        if not await self.graph.delete_version_node(version_id):
            raise NotFoundError("Version", version_id)
        logger.info(f"🗑️  Version deleted: {version_id}")

    async def list(self, query: VersionQuery) -> Tuple[List[Version], int]:
        return await self.graph.list_version_nodes(is_public=query.is_public, limit=query.limit, offset=query.offset)

    async def get_navigation(self, version_id: str) -> List[NavigationItem]:
        """Tree of the version's visible pages"""
        await self.get(version_id)
        rows = await self.graph.get_navigation_rows(version_id)
        return build_navigation_tree(rows)

    async def _ensure_label_free(self, label: str, version_id: str = None) -> None:
        existing = await self.graph.find_version_by_label(label)
        if existing is not None and existing.id != version_id:
            raise ConflictError(f"Version {label} already exists", {'version_id': existing.id})
