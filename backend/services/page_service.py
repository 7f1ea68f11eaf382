"""
Page Service - site pages inside a version

A page belongs to exactly one version, may sit under a parent page of the
same version, and displays documents.
"""
import logging
from typing import List, Optional, Tuple

from models.api.page import PageCreate, PageQuery, PageUpdate
from models.domain.graph_nodes import Page
from services.graphdb_service import GraphDBService
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class PageService:

    def __init__(self, graph: GraphDBService):
        self.graph = graph

    async def create(self, request: PageCreate) -> Page:
        """
        Raises:
            NotFoundError: version or parent page missing
            ValidationError: parent page lives in another version
        """
        if await self.graph.get_version_node(request.version_id) is None:
            raise NotFoundError("Version", request.version_id)
        await self._check_parent(request.parent_page_id, request.version_id)

        page = Page.new(
            slug=request.slug,
            title=request.title,
            version_id=request.version_id,
            parent_page_id=request.parent_page_id,
            order=request.order,
            visible=request.visible,
        )
        page = await self.graph.create_page_node(page)
        logger.info(f"📑 Page created: {page.id} ({page.slug}) in version {page.version_id}")
        return page

    async def get(self, page_id: str) -> Page:
        page = await self.graph.get_page_node(page_id)
        if page is None:
            raise NotFoundError("Page", page_id)
        return page

    async def update(self, page_id: str, patch: PageUpdate) -> Page:
        page = await self.get(page_id)
        updates = patch.model_dump(exclude_unset=True)

        reparent = 'parent_page_id' in updates
        parent_page_id = updates.pop('parent_page_id', None)
        if reparent:
            if parent_page_id == page_id:
                raise ValidationError("A page cannot be its own parent")
            await self._check_parent(parent_page_id, page.version_id)
            await self.graph.set_page_parent(page_id, parent_page_id)

        page = await self.graph.update_page_node(page_id, {k: v for k, v in updates.items() if v is not None})
        if page is None:
            raise NotFoundError("Page", page_id)
        logger.info(f"✏️  Page updated: {page_id} {sorted(patch.model_dump(exclude_unset=True))}")
        return page

    async def delete(self, page_id: str) -> None:
        if not await self.graph.delete_page_node(page_id):
            raise NotFoundError("Page", page_id)
        logger.info(f"🗑️  Page deleted: {page_id}")

    async def list(self, query: PageQuery) -> Tuple[List[Page], int]:
        return await self.graph.list_page_nodes(
            version_id=query.version_id,
            visible=query.visible,
            limit=query.limit,
            offset=query.offset,
        )

    async def link_document(self, page_id: str, document_id: str) -> None:
        await self.get(page_id)
        if await self.graph.get_document_node(document_id) is None:
            raise NotFoundError("Document", document_id)
        if not await self.graph.link_page_to_document(page_id, document_id):
            raise NotFoundError("Page or document", f"{page_id} / {document_id}")
        logger.info(f"🔗 Page {page_id} displays document {document_id}")

    async def unlink_document(self, page_id: str, document_id: str) -> None:
        if not await self.graph.unlink_page_from_document(page_id, document_id):
            raise NotFoundError("DISPLAYS relationship", f"{page_id}->{document_id}")
        logger.info(f"✂️  Page {page_id} no longer displays document {document_id}")

    async def _check_parent(self, parent_page_id: Optional[str], version_id: Optional[str]) -> None:
        if parent_page_id is None:
            return
        parent = await self.graph.get_page_node(parent_page_id)
        if parent is None:
            raise NotFoundError("Parent page", parent_page_id)
        if version_id is not None and parent.version_id != version_id:
            raise ValidationError(
                "Parent page belongs to another version",
                {'parent_version_id': parent.version_id, 'version_id': version_id},
            )
