"""
Tag Service - tag CRUD and tagging of documents, concepts and pages

Tag names are unique. Documents created with a tags list share these
nodes, matched by name.
"""
import logging
from typing import Any, Dict, List, Tuple

from models.api.tag import TagCreate, TagQuery, TagUpdate
from models.domain.graph_nodes import Tag
from services.graphdb_service import GraphDBService
from utils.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class TagService:

    def __init__(self, graph: GraphDBService):
        self.graph = graph

    async def create(self, request: TagCreate) -> Tag:
        """
        Raises:
            ConflictError: a tag with this name exists
        """
        tag = Tag.new(name=request.name, color=request.color, description=request.description)
        await self._ensure_name_free(tag.name)
        tag = await self.graph.create_tag_node(tag)
        logger.info(f"🏷️  Tag created: {tag.id} ({tag.name})")
        return tag

    async def get(self, tag_id: str) -> Tag:
        tag = await self.graph.get_tag_node(tag_id)
        if tag is None:
            raise NotFoundError("Tag", tag_id)
        return tag

    async def update(self, tag_id: str, patch: TagUpdate) -> Tag:
        updates = patch.model_dump(exclude_unset=True)
        if updates.get('name') is not None:
            await self._ensure_name_free(updates['name'], tag_id)
        elif 'name' in updates:
            del updates['name']

        tag = await self.graph.update_tag_node(tag_id, updates)
        if tag is None:
            raise NotFoundError("Tag", tag_id)
        logger.info(f"✏️  Tag updated: {tag_id} {sorted(updates)}")
        return tag

    async def delete(self, tag_id: str) -> None:
        if not await self.graph.delete_tag_node(tag_id):
            raise NotFoundError("Tag", tag_id)
        logger.info(f"🗑️  Tag deleted: {tag_id}")

    async def list(self, query: TagQuery) -> Tuple[List[Tag], int]:
        return await self.graph.list_tag_nodes(search=query.search, limit=query.limit, offset=query.offset)

    async def get_tagged(self, tag_id: str) -> List[Dict[str, Any]]:
        """Documents, concepts and pages carrying the tag"""
        await self.get(tag_id)
        return await self.graph.get_tagged_nodes(tag_id)

    # =========================================================================
    # TAGGING
    # =========================================================================

    async def add(self, label: str, node_id: str, tag_id: str) -> None:
        """
        Tag a Document, Concept or Page.

        Raises:
            NotFoundError: tag or tagged node missing
        """
        await self.get(tag_id)
        if not await self.graph.tag_node(label, node_id, tag_id):
            raise NotFoundError(label, node_id)
        logger.info(f"🏷️  {label} {node_id} tagged {tag_id}")

    async def remove(self, label: str, node_id: str, tag_id: str) -> None:
        if not await self.graph.untag_node(label, node_id, tag_id):
            raise NotFoundError("HAS_TAG relationship", f"{node_id}->{tag_id}")
        logger.info(f"✂️  {label} {node_id} untagged {tag_id}")

    async def tags_of(self, label: str, node_id: str) -> List[Tag]:
        return await self.graph.get_node_tags(label, node_id)

    async def _ensure_name_free(self, name: str, tag_id: str = None) -> None:
        existing = await self.graph.find_tag_by_name(name)
        if existing is not None and existing.id != tag_id:
            raise ConflictError(f"Tag {name} already exists", {'tag_id': existing.id})
