"""
Document Service

Presents one document abstraction over three stores:
- graph database: metadata, tags, relationships (GraphDBService)
- PostgreSQL: content text (DocumentContentRepository)
- object storage: copy of large content under documents/{id} (StorageAdapter, optional)

Writes fan out store by store. There is no two-phase commit: when a later
store fails after an earlier one succeeded, nothing is rolled back and a
PartialWriteError names what was written so the caller can reconcile.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from models.api.document import DocumentCreate, DocumentQuery, DocumentUpdate
from models.domain.document import Document, DocumentNode, is_valid_status_transition
from models.domain.document_content import DocumentContent
from models.domain.graph_nodes import Concept, Page, Version
from models.domain.relationships import DocumentLink, RelationType
from repositories.document_content_repository import DocumentContentRepository
from services.graphdb_service import GraphDBService
from services.storage_adapter import StorageAdapter
from utils.errors import (
    InvalidStatusTransitionError,
    NotFoundError,
    PartialWriteError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GRAPHDB = "graphdb"
POSTGRESQL = "postgresql"
STORAGE = "storage"


class DocumentService:
    """Orchestrates document CRUD across the graph, relational and object stores"""

    def __init__(
        self,
        graph: GraphDBService,
        contents: DocumentContentRepository,
        storage: Optional[StorageAdapter] = None,
        blob_threshold: int = 256 * 1024
    ):
        self.graph = graph
        self.contents = contents
        self.storage = storage
        self.blob_threshold = blob_threshold

    # =========================================================================
    # CRUD
    # =========================================================================

    async def create(self, request: DocumentCreate) -> Document:
        """
        Create a document.

        1. Metadata node in the graph (status draft)
        2. Content row in PostgreSQL
        3. Blob in object storage when the content is large
        """
        node = DocumentNode.new(
            type=request.type,
            title=request.title,
            lang=request.lang,
            author=request.author,
            version_id=request.version_id,
            tags=request.tags,
        )
        logger.info(f"📄 Creating document {node.id}: {node.title!r} ({node.type.value})")

        node = await self.graph.create_document_node(node)
        written = [GRAPHDB]

        try:
            content = await self.contents.create(DocumentContent.create(node.id, request.content))
        except Exception as e:
            logger.error(f"❌ Content write failed for document {node.id}, metadata left in graph: {e}")
            raise PartialWriteError(node.id, written, POSTGRESQL, e) from e
        written.append(POSTGRESQL)

        await self._sync_blob(content, written)

        logger.info(f"✅ Document created: {node.id}")
        return Document(node=node, content=content.content)

    async def get(self, document_id: str) -> Document:
        """
        Get a document with its content.

        Raises:
            NotFoundError: no metadata node
        """
        node = await self._require_node(document_id)
        content = await self.contents.get_by_document_id(document_id)

        if content is None:
            logger.warning(f"⚠️  Document {document_id} has no content row (orphaned metadata)")
            return Document(node=node, content="")

        return Document(node=node, content=content.content)

    async def update(self, document_id: str, patch: DocumentUpdate) -> Document:
        """
        Patch title/status in the graph and content in PostgreSQL.

        Raises:
            NotFoundError: unknown document
            InvalidStatusTransitionError: status change not allowed by the workflow
        """
        node = await self._require_node(document_id)
        logger.info(f"✏️  Updating document {document_id}: {sorted(patch.model_dump(exclude_none=True))}")

        if patch.status is not None and patch.status != node.status:
            if not is_valid_status_transition(node.status, patch.status):
                raise InvalidStatusTransitionError(node.status.value, patch.status.value)

        updates: Dict[str, Any] = {}
        if patch.title is not None:
            updates['title'] = patch.title
        if patch.status is not None:
            updates['status'] = patch.status.value

        written: List[str] = []
        # A content-only edit still bumps the node's updated_at
        if updates or patch.content is not None:
            node = await self.graph.update_document_node(document_id, updates) or node
            written.append(GRAPHDB)

        if patch.content is None:
            content = await self.contents.get_by_document_id(document_id)
            return Document(node=node, content=content.content if content else "")

        try:
            content = await self.contents.update(document_id, patch.content)
            if content is None:
                # First content write for orphaned metadata
                content = await self.contents.create(DocumentContent.create(document_id, patch.content))
        except Exception as e:
            logger.error(f"❌ Content update failed for document {document_id}: {e}")
            raise PartialWriteError(document_id, written, POSTGRESQL, e) from e
        written.append(POSTGRESQL)

        await self._sync_blob(content, written, replacing=True)

        logger.info(f"✅ Document updated: {document_id}")
        return Document(node=node, content=content.content)

    async def delete(self, document_id: str) -> None:
        """
        Delete content row, blob, then metadata node.

        Content removal is idempotent, so a retry after a partial delete
        only has to finish the remaining stores. A blob that cannot be
        removed is logged and left behind.
        """
        node = await self._require_node(document_id)
        logger.info(f"🗑️  Deleting document {document_id}")

        await self.contents.delete(document_id)
        written = [POSTGRESQL]
        if self.storage is not None and await self._drop_blob(node.storage_key):
            written.append(STORAGE)

        try:
            await self.graph.delete_document_node(document_id)
        except Exception as e:
            logger.error(f"❌ Metadata delete failed for document {document_id}, content already removed: {e}")
            raise PartialWriteError(document_id, written, GRAPHDB, e) from e

        logger.info(f"✅ Document deleted: {document_id}")

    async def list(self, query: DocumentQuery) -> Tuple[List[Document], int]:
        """
        List documents with optional filters.

        Returns:
            (documents on this page, total matching)
        """
        nodes, total = await self.graph.list_document_nodes(
            status=query.status.value if query.status else None,
            type=query.type.value if query.type else None,
            lang=query.lang,
            limit=query.limit,
            offset=query.offset,
        )
        return await self._with_contents(nodes), total

    # =========================================================================
    # RELATIONSHIPS
    # =========================================================================

    async def link(self, source_id: str, target_id: str) -> None:
        await self._relate(source_id, target_id, RelationType.LINKS_TO)

    async def unlink(self, source_id: str, target_id: str) -> None:
        await self._unrelate(source_id, target_id, RelationType.LINKS_TO)

    async def get_links(self, document_id: str) -> List[Document]:
        """Documents this document links to"""
        await self._require_node(document_id)
        nodes = await self.graph.get_related_documents(document_id, RelationType.LINKS_TO)
        return await self._with_contents(nodes)

    async def get_backlinks(self, document_id: str) -> List[Document]:
        """Documents linking to this document"""
        await self._require_node(document_id)
        nodes = await self.graph.get_related_documents(document_id, RelationType.LINKS_TO, incoming=True)
        return await self._with_contents(nodes)

    async def create_working_copy(self, copy_id: str, original_id: str) -> None:
        """Mark copy_id as an editable working copy of original_id"""
        await self._relate(copy_id, original_id, RelationType.WORKING_COPY_OF)

    async def remove_working_copy(self, copy_id: str, original_id: str) -> None:
        await self._unrelate(copy_id, original_id, RelationType.WORKING_COPY_OF)

    async def get_original(self, copy_id: str) -> Optional[Document]:
        """The document copy_id is a working copy of, if any"""
        await self._require_node(copy_id)
        nodes = await self.graph.get_related_documents(copy_id, RelationType.WORKING_COPY_OF)
        if not nodes:
            return None
        return (await self._with_contents(nodes[:1]))[0]

    async def get_working_copies(self, original_id: str) -> List[Document]:
        await self._require_node(original_id)
        nodes = await self.graph.get_related_documents(original_id, RelationType.WORKING_COPY_OF, incoming=True)
        return await self._with_contents(nodes)

    async def attach_concept(self, document_id: str, concept_id: str) -> None:
        await self._require_node(document_id)
        if not await self.graph.attach_concept(document_id, concept_id):
            raise NotFoundError("Concept", concept_id)

    async def detach_concept(self, document_id: str, concept_id: str) -> None:
        await self._require_node(document_id)
        if not await self.graph.detach_concept(document_id, concept_id):
            raise NotFoundError("Concept relationship", f"{document_id}->{concept_id}")

    async def get_context(self, document_id: str) -> Dict[str, Any]:
        """
        Graph neighbourhood of a document.

        Returns:
            {'tags': [str], 'concepts': [Concept], 'version': Optional[Version], 'pages': [Page]}
        """
        context = await self.graph.get_document_context(document_id)
        if context is None:
            raise NotFoundError("Document", document_id)

        version = context.get('version')
        return {
            'tags': sorted(t for t in context.get('tags') or [] if t),
            'concepts': [Concept.from_record(c) for c in context.get('concepts') or [] if c.get('id')],
            'version': Version.from_record(version) if version and version.get('id') else None,
            'pages': [
                Page(id=str(p['id']), slug=p.get('slug') or '', title=p.get('title') or '')
                for p in context.get('pages') or [] if p.get('id')
            ],
        }

    async def get_content_url(self, document_id: str, expires_in: int = 3600) -> str:
        """
        Presigned URL of the document's content blob.

        Raises:
            NotFoundError: unknown document, or no blob was stored for it
        """
        node = await self._require_node(document_id)
        if self.storage is None or not await self.storage.exists(node.storage_key):
            raise NotFoundError("Content blob", document_id)
        return await self.storage.presign(node.storage_key, expires_in=expires_in)

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _require_node(self, document_id: str) -> DocumentNode:
        node = await self.graph.get_document_node(document_id)
        if node is None:
            logger.debug(f"Document not found: {document_id}")
            raise NotFoundError("Document", document_id)
        return node

    async def _relate(self, source_id: str, target_id: str, rel_type: RelationType) -> None:
        try:
            link = DocumentLink(source_id=source_id, target_id=target_id, relationship_type=rel_type)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        await self._require_node(link.source_id)
        await self._require_node(link.target_id)

        created = await self.graph.create_document_relationship(link.source_id, link.target_id, rel_type)
        if not created:
            # Either side disappeared between the check and the write
            raise NotFoundError("Document", f"{source_id} or {target_id}")
        logger.info(f"🔗 {source_id} -[{rel_type.value}]-> {target_id}")

    async def _unrelate(self, source_id: str, target_id: str, rel_type: RelationType) -> None:
        removed = await self.graph.delete_document_relationship(source_id, target_id, rel_type)
        if not removed:
            raise NotFoundError(f"{rel_type.value} relationship", f"{source_id}->{target_id}")
        logger.info(f"✂️  {source_id} -[{rel_type.value}]-> {target_id} removed")

    async def _with_contents(self, nodes: List[DocumentNode]) -> List[Document]:
        """Fetch content rows for several nodes concurrently"""
        rows = await asyncio.gather(*(self.contents.get_by_document_id(n.id) for n in nodes))
        return [Document(node=n, content=row.content if row else "") for n, row in zip(nodes, rows)]

    async def _sync_blob(self, content: DocumentContent, written: List[str], replacing: bool = False) -> None:
        """
        Mirror large content into object storage.

        Only an upload failure is a partial write. When content that
        replaces an earlier version falls under the threshold, a stale blob
        is removed if one exists; failing to remove it is only logged, since
        PostgreSQL already holds the current content.
        """
        if self.storage is None:
            return
        if content.size_bytes >= self.blob_threshold:
            try:
                await self.storage.upload(content.storage_key, content.content)
            except Exception as e:
                logger.error(f"❌ Blob upload failed for {content.storage_key}: {e}")
                raise PartialWriteError(content.document_id, written, STORAGE, e) from e
            return
        if replacing:
            await self._drop_blob(content.storage_key)

    async def _drop_blob(self, storage_key: str) -> bool:
        """Remove a blob if present. Returns False when storage could not be reached."""
        try:
            if await self.storage.exists(storage_key):
                await self.storage.delete(storage_key)
            return True
        except Exception as e:
            logger.warning(f"⚠️  Could not remove blob {storage_key}, left for cleanup: {e}")
            return False
