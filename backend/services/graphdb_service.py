"""
Graph Metadata Service - Documentation graph operations

The graph database is the source of truth for document METADATA.
PostgreSQL only stores content text (see DocumentContentRepository).

Node Types:
- Document: {id, type, status, title, lang, storage_key, summary, author, version_id}
- Tag: {id, name, color, description} - name is unique
- Concept: {id, term, description, lang}
- Version: {id, version, name, description, is_public, is_main}
- Page: {id, slug, title, order, visible}
- Attachment: {id, filename, mime_type, size_bytes, storage_key, checksum, attachment_type}

Relationships:
- (Document)-[:HAS_TAG]->(Tag), also from Concept and Page
- (Document)-[:USES_CONCEPT]->(Concept)
- (Document)-[:BELONGS_TO]->(Version)
- (Document)-[:LINKS_TO]->(Document)
- (Document)-[:WORKING_COPY_OF]->(Document)
- (Document)-[:HAS_ATTACHMENT]->(Attachment)
- (Page)-[:DISPLAYS]->(Document)
- (Page)-[:IN_VERSION]->(Version)
- (Page)-[:CHILD_OF]->(Page)
- (Concept)-[:SUBTYPE_OF|PART_OF|SYNONYM_OF]->(Concept)

Every node carries created_at/updated_at set by the database.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from neo4j import AsyncGraphDatabase, AsyncDriver

from config.database import GraphDBConfig
from models.domain.attachment import Attachment
from models.domain.document import DocumentNode
from models.domain.graph_nodes import Concept, Page, Tag, Version
from models.domain.relationships import (
    CONCEPT_TO_CONCEPT,
    DOCUMENT_TO_DOCUMENT,
    TAGGABLE_LABELS,
    RelationType,
)

logger = logging.getLogger(__name__)

# Node map projection used by every document read
DOCUMENT_RETURN = """
    OPTIONAL MATCH (d)-[:HAS_TAG]->(t:Tag)
    WITH d, collect(t.name) AS tags
    RETURN d {.*, tags: tags} AS document
"""

# Pages read back with their version and parent edges as properties
PAGE_RETURN = """
    OPTIONAL MATCH (p)-[:IN_VERSION]->(v:Version)
    OPTIONAL MATCH (p)-[:CHILD_OF]->(parent:Page)
    WITH p, head(collect(DISTINCT v.id)) AS version_id, head(collect(DISTINCT parent.id)) AS parent_page_id
    RETURN p {.*, version_id: version_id, parent_page_id: parent_page_id} AS page
"""

ATTACHMENT_RETURN = """
    OPTIONAL MATCH (d:Document)-[:HAS_ATTACHMENT]->(a)
    WITH a, head(collect(d.id)) AS document_id
    RETURN a {.*, document_id: document_id} AS attachment
"""

SEARCH_WHERE = """
    WHERE (toLower(d.title) CONTAINS $q OR toLower(coalesce(d.summary, '')) CONTAINS $q)
      AND ($version_id IS NULL
           OR d.version_id = $version_id
           OR EXISTS { (d)-[:BELONGS_TO]->(:Version {id: $version_id}) })
      AND ALL(name IN $tags WHERE EXISTS { (d)-[:HAS_TAG]->(:Tag {name: name}) })
"""


class GraphDBService:
    """Service for graph database operations"""

    def __init__(self, config: GraphDBConfig):
        self.config = config
        self.driver: Optional[AsyncDriver] = None

    async def connect(self):
        """Establish connection to the graph database"""
        if not self.driver:
            self.driver = AsyncGraphDatabase.driver(
                self.config.uri,
                auth=(self.config.user, self.config.password),
                max_connection_pool_size=self.config.max_pool_size,
                connection_timeout=self.config.connection_timeout,
                connection_acquisition_timeout=self.config.connection_timeout,
            )
            try:
                await self.driver.verify_connectivity()
            except Exception:
                await self.driver.close()
                self.driver = None
                raise
            logger.info(f"✅ Connected to GraphDB at {self.config.uri}")

    async def close(self):
        """Close graph database connection"""
        if self.driver:
            await self.driver.close()
            self.driver = None
            logger.info("🔌 Closed GraphDB connection")

    async def get_status(self) -> Dict[str, Any]:
        """
        Point-in-time connectivity check.

        Returns:
            {'connected': bool, 'error': Optional[str]}
        """
        if not self.driver:
            return {'connected': False, 'error': 'Driver not initialized'}
        try:
            async with self.driver.session() as session:
                result = await session.run("RETURN 1 AS ok")
                await result.consume()
            return {'connected': True}
        except Exception as e:
            return {'connected': False, 'error': str(e) or type(e).__name__}

    async def _execute_write(self, query: str, parameters: Dict = None):
        """Execute write query, returning the first record"""
        async with self.driver.session() as session:
            result = await session.run(query, parameters or {})
            return await result.single()

    async def _execute_read(self, query: str, parameters: Dict = None) -> List[Dict]:
        """Execute read query"""
        async with self.driver.session() as session:
            result = await session.run(query, parameters or {})
            return await result.data()

    # ===== Document Operations =====

    async def create_document_node(self, node: DocumentNode) -> DocumentNode:
        """
        Create Document node with its tag and version edges.

        Tags are MERGEd by name so documents share Tag nodes; a tag seen
        for the first time gets an id and timestamps.
        A version edge is only created when the Version node exists.
        """
        query = """
        CREATE (d:Document)
        SET d = $props,
            d.created_at = datetime(),
            d.updated_at = datetime()
        WITH d
        FOREACH (name IN $tags |
            MERGE (t:Tag {name: name})
            ON CREATE SET t.id = randomUUID(), t.created_at = datetime(), t.updated_at = datetime()
            MERGE (d)-[:HAS_TAG]->(t)
        )
        WITH d
        OPTIONAL MATCH (v:Version {id: $version_id})
        FOREACH (_ IN CASE WHEN v IS NULL THEN [] ELSE [1] END |
            MERGE (d)-[:BELONGS_TO]->(v)
        )
        WITH d
        """ + DOCUMENT_RETURN

        props = {k: v for k, v in node.to_properties().items() if v is not None}
        record = await self._execute_write(query, {
            'props': props,
            'tags': node.tags,
            'version_id': node.version_id,
        })
        logger.debug(f"📦 Document node created: {node.id} ({node.type.value})")
        return DocumentNode.from_record(record['document'])

    async def get_document_node(self, document_id: str) -> Optional[DocumentNode]:
        """Get Document node by id"""
        query = "MATCH (d:Document {id: $id})" + DOCUMENT_RETURN
        results = await self._execute_read(query, {'id': document_id})
        return DocumentNode.from_record(results[0]['document']) if results else None

    async def update_document_node(self, document_id: str, updates: Dict[str, Any]) -> Optional[DocumentNode]:
        """
        Patch Document properties and bump updated_at.

        Args:
            document_id: Document id
            updates: property -> value (title, status, summary)

        Returns:
            Updated node, or None if it does not exist
        """
        query = """
        MATCH (d:Document {id: $id})
        SET d += $updates, d.updated_at = datetime()
        WITH d
        """ + DOCUMENT_RETURN
        record = await self._execute_write(query, {'id': document_id, 'updates': updates})
        return DocumentNode.from_record(record['document']) if record else None

    async def delete_document_node(self, document_id: str) -> bool:
        """Delete Document node and all its edges. Tags stay."""
        query = """
        MATCH (d:Document {id: $id})
        DETACH DELETE d
        RETURN count(*) AS deleted
        """
        record = await self._execute_write(query, {'id': document_id})
        return bool(record and record['deleted'])

    async def list_document_nodes(
        self,
        status: Optional[str] = None,
        type: Optional[str] = None,
        lang: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[DocumentNode], int]:
        """
        List documents, newest first.

        Returns:
            (page of nodes, total matching count)
        """
        where = """
        WHERE ($status IS NULL OR d.status = $status)
          AND ($type IS NULL OR d.type = $type)
          AND ($lang IS NULL OR d.lang = $lang)
        """
        params = {'status': status, 'type': type, 'lang': lang}

        count_rows = await self._execute_read(
            "MATCH (d:Document)" + where + "RETURN count(d) AS total", params
        )
        total = count_rows[0]['total'] if count_rows else 0

        query = "MATCH (d:Document)" + where + """
        WITH d ORDER BY d.created_at DESC SKIP $offset LIMIT $limit
        """ + DOCUMENT_RETURN + "ORDER BY document.created_at DESC"
        rows = await self._execute_read(query, {**params, 'limit': limit, 'offset': offset})
        return [DocumentNode.from_record(r['document']) for r in rows], total

    # ===== Document Relationships =====

    @staticmethod
    def _document_rel(rel_type: RelationType) -> str:
        rel_type = RelationType(rel_type)
        if rel_type not in DOCUMENT_TO_DOCUMENT:
            raise ValueError(f"{rel_type.value} is not a document-to-document relationship")
        return rel_type.value

    async def create_document_relationship(self, source_id: str, target_id: str, rel_type: RelationType) -> bool:
        """
        MERGE a document-to-document edge.

        Returns:
            False when either document is missing
        """
        query = f"""
        MATCH (s:Document {{id: $source_id}})
        MATCH (t:Document {{id: $target_id}})
        MERGE (s)-[r:{self._document_rel(rel_type)}]->(t)
        ON CREATE SET r.created_at = datetime()
        RETURN count(r) AS created
        """
        record = await self._execute_write(query, {'source_id': source_id, 'target_id': target_id})
        return bool(record and record['created'])

    async def delete_document_relationship(self, source_id: str, target_id: str, rel_type: RelationType) -> bool:
        query = f"""
        MATCH (:Document {{id: $source_id}})-[r:{self._document_rel(rel_type)}]->(:Document {{id: $target_id}})
        DELETE r
        RETURN count(*) AS deleted
        """
        record = await self._execute_write(query, {'source_id': source_id, 'target_id': target_id})
        return bool(record and record['deleted'])

    async def get_related_documents(
        self,
        document_id: str,
        rel_type: RelationType,
        incoming: bool = False
    ) -> List[DocumentNode]:
        """
        Documents on the other end of an edge.

        incoming=False follows (this)-[rel]->(other),
        incoming=True follows (other)-[rel]->(this).
        """
        rel = self._document_rel(rel_type)
        pattern = f"(:Document {{id: $id}})<-[:{rel}]-(d:Document)" if incoming \
            else f"(:Document {{id: $id}})-[:{rel}]->(d:Document)"
        query = f"MATCH {pattern} WITH d" + DOCUMENT_RETURN + "ORDER BY document.title"
        rows = await self._execute_read(query, {'id': document_id})
        return [DocumentNode.from_record(r['document']) for r in rows]

    # ===== Concepts, Versions, Pages =====

    async def attach_concept(self, document_id: str, concept_id: str) -> bool:
        query = """
        MATCH (d:Document {id: $document_id})
        MATCH (c:Concept {id: $concept_id})
        MERGE (d)-[r:USES_CONCEPT]->(c)
        RETURN count(r) AS created
        """
        record = await self._execute_write(query, {'document_id': document_id, 'concept_id': concept_id})
        return bool(record and record['created'])

    async def detach_concept(self, document_id: str, concept_id: str) -> bool:
        query = """
        MATCH (:Document {id: $document_id})-[r:USES_CONCEPT]->(:Concept {id: $concept_id})
        DELETE r
        RETURN count(*) AS deleted
        """
        record = await self._execute_write(query, {'document_id': document_id, 'concept_id': concept_id})
        return bool(record and record['deleted'])

    async def get_document_context(self, document_id: str) -> Optional[Dict[str, Any]]:
        """
        Tags, concepts, version and pages around a document.

        Returns:
            None when the document does not exist
        """
        query = """
        MATCH (d:Document {id: $id})
        OPTIONAL MATCH (d)-[:HAS_TAG]->(t:Tag)
        WITH d, collect(DISTINCT t.name) AS tags
        OPTIONAL MATCH (d)-[:USES_CONCEPT]->(c:Concept)
        WITH d, tags, collect(DISTINCT c {.id, .term, .description}) AS concepts
        OPTIONAL MATCH (d)-[:BELONGS_TO]->(v:Version)
        WITH d, tags, concepts, head(collect(v {.id, .name})) AS version
        OPTIONAL MATCH (p:Page)-[:DISPLAYS]->(d)
        RETURN tags, concepts, version,
               collect(DISTINCT p {.id, .slug, .title}) AS pages
        """
        rows = await self._execute_read(query, {'id': document_id})
        return rows[0] if rows else None

    # ===== Generic node helpers =====

    async def _create_node(self, label: str, props: Dict[str, Any]) -> Dict[str, Any]:
        query = f"""
        CREATE (n:{label})
        SET n = $props,
            n.created_at = datetime(),
            n.updated_at = datetime()
        RETURN n {{.*}} AS node
        """
        record = await self._execute_write(query, {'props': {k: v for k, v in props.items() if v is not None}})
        logger.debug(f"📦 {label} node created: {props.get('id')}")
        return record['node']

    async def _get_node(self, label: str, node_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._execute_read(f"MATCH (n:{label} {{id: $id}}) RETURN n {{.*}} AS node", {'id': node_id})
        return rows[0]['node'] if rows else None

    async def _update_node(self, label: str, node_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """SET n += $updates; a None value removes the property"""
        query = f"""
        MATCH (n:{label} {{id: $id}})
        SET n += $updates, n.updated_at = datetime()
        RETURN n {{.*}} AS node
        """
        record = await self._execute_write(query, {'id': node_id, 'updates': updates})
        return record['node'] if record else None

    async def _delete_node(self, label: str, node_id: str) -> bool:
        query = f"""
        MATCH (n:{label} {{id: $id}})
        DETACH DELETE n
        RETURN count(*) AS deleted
        """
        record = await self._execute_write(query, {'id': node_id})
        return bool(record and record['deleted'])

    async def _list_nodes(
        self,
        label: str,
        where: str,
        params: Dict[str, Any],
        order_by: str,
        limit: int,
        offset: int
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Page of n {.*} maps plus the total matching count"""
        count_rows = await self._execute_read(f"MATCH (n:{label}) {where} RETURN count(n) AS total", params)
        total = count_rows[0]['total'] if count_rows else 0

        query = f"MATCH (n:{label}) {where} RETURN n {{.*}} AS node ORDER BY {order_by} SKIP $offset LIMIT $limit"
        rows = await self._execute_read(query, {**params, 'limit': limit, 'offset': offset})
        return [r['node'] for r in rows], total

    # ===== Concept Operations =====

    async def create_concept_node(self, concept: Concept) -> Concept:
        return Concept.from_record(await self._create_node("Concept", concept.to_properties()))

    async def get_concept_node(self, concept_id: str) -> Optional[Concept]:
        record = await self._get_node("Concept", concept_id)
        return Concept.from_record(record) if record else None

    async def update_concept_node(self, concept_id: str, updates: Dict[str, Any]) -> Optional[Concept]:
        record = await self._update_node("Concept", concept_id, updates)
        return Concept.from_record(record) if record else None

    async def delete_concept_node(self, concept_id: str) -> bool:
        """Delete a concept; documents using it lose the USES_CONCEPT edge"""
        return await self._delete_node("Concept", concept_id)

    async def list_concept_nodes(
        self,
        lang: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Concept], int]:
        records, total = await self._list_nodes(
            "Concept", "WHERE ($lang IS NULL OR n.lang = $lang)", {'lang': lang},
            "n.term", limit, offset,
        )
        return [Concept.from_record(r) for r in records], total

    async def get_documents_using_concept(self, concept_id: str) -> List[DocumentNode]:
        """Documents with a USES_CONCEPT edge to the concept (impact of changing it)"""
        query = "MATCH (:Concept {id: $id})<-[:USES_CONCEPT]-(d:Document) WITH d" \
            + DOCUMENT_RETURN + "ORDER BY document.title"
        rows = await self._execute_read(query, {'id': concept_id})
        return [DocumentNode.from_record(r['document']) for r in rows]

    @staticmethod
    def _concept_rel(rel_type: RelationType) -> str:
        rel_type = RelationType(rel_type)
        if rel_type not in CONCEPT_TO_CONCEPT:
            raise ValueError(f"{rel_type.value} is not a concept-to-concept relationship")
        return rel_type.value

    async def create_concept_relationship(self, source_id: str, target_id: str, rel_type: RelationType) -> bool:
        """
        MERGE (source)-[rel]->(target) between two concepts.

        SYNONYM_OF is stored once and matched in both directions, so an
        existing edge the other way round is reused.
        """
        rel = self._concept_rel(rel_type)
        if rel == RelationType.SYNONYM_OF.value:
            query = """
            MATCH (s:Concept {id: $source_id})
            MATCH (t:Concept {id: $target_id})
            OPTIONAL MATCH (s)-[existing:SYNONYM_OF]-(t)
            FOREACH (_ IN CASE WHEN existing IS NULL THEN [1] ELSE [] END |
                CREATE (s)-[:SYNONYM_OF {created_at: datetime()}]->(t)
            )
            RETURN count(s) AS created
            """
        else:
            query = f"""
            MATCH (s:Concept {{id: $source_id}})
            MATCH (t:Concept {{id: $target_id}})
            MERGE (s)-[r:{rel}]->(t)
            ON CREATE SET r.created_at = datetime()
            RETURN count(r) AS created
            """
        record = await self._execute_write(query, {'source_id': source_id, 'target_id': target_id})
        return bool(record and record['created'])

    async def delete_concept_relationship(self, source_id: str, target_id: str, rel_type: RelationType) -> bool:
        rel = self._concept_rel(rel_type)
        arrow = "-" if rel == RelationType.SYNONYM_OF.value else "->"
        query = f"""
        MATCH (:Concept {{id: $source_id}})-[r:{rel}]{arrow}(:Concept {{id: $target_id}})
        DELETE r
        RETURN count(*) AS deleted
        """
        record = await self._execute_write(query, {'source_id': source_id, 'target_id': target_id})
        return bool(record and record['deleted'])

    async def get_related_concepts(
        self,
        concept_id: str,
        rel_type: RelationType,
        incoming: bool = False
    ) -> List[Concept]:
        """
        Concepts on the other end of a concept edge.

        SUBTYPE_OF: outgoing are supertypes, incoming are subtypes.
        PART_OF: outgoing are wholes, incoming are parts.
        SYNONYM_OF ignores direction.
        """
        rel = self._concept_rel(rel_type)
        if rel == RelationType.SYNONYM_OF.value:
            pattern = f"(:Concept {{id: $id}})-[:{rel}]-(c:Concept)"
        elif incoming:
            pattern = f"(:Concept {{id: $id}})<-[:{rel}]-(c:Concept)"
        else:
            pattern = f"(:Concept {{id: $id}})-[:{rel}]->(c:Concept)"
        query = f"MATCH {pattern} RETURN DISTINCT c {{.*}} AS concept ORDER BY concept.term"
        rows = await self._execute_read(query, {'id': concept_id})
        return [Concept.from_record(r['concept']) for r in rows]

    # ===== Version Operations =====

    async def create_version_node(self, version: Version) -> Version:
        return Version.from_record(await self._create_node("Version", version.to_properties()))

    async def get_version_node(self, version_id: str) -> Optional[Version]:
        record = await self._get_node("Version", version_id)
        return Version.from_record(record) if record else None

    async def find_version_by_label(self, label: str) -> Optional[Version]:
        """Version by its semantic label, e.g. v1.2.0"""
        rows = await self._execute_read(
            "MATCH (n:Version {version: $version}) RETURN n {.*} AS node LIMIT 1", {'version': label}
        )
        return Version.from_record(rows[0]['node']) if rows else None

    async def update_version_node(self, version_id: str, updates: Dict[str, Any]) -> Optional[Version]:
        record = await self._update_node("Version", version_id, updates)
        return Version.from_record(record) if record else None

    async def delete_version_node(self, version_id: str) -> bool:
        """Delete a version. Its pages stay, detached."""
        return await self._delete_node("Version", version_id)

    async def list_version_nodes(
        self,
        is_public: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Version], int]:
        records, total = await self._list_nodes(
            "Version", "WHERE ($is_public IS NULL OR n.is_public = $is_public)", {'is_public': is_public},
            "n.created_at DESC", limit, offset,
        )
        return [Version.from_record(r) for r in records], total

    async def get_navigation_rows(self, version_id: str) -> List[Dict[str, Any]]:
        """
        Visible pages of a version with their parent and displayed document.

        Returns:
            [{'page': {...}, 'parent_id': str|None, 'document_id': str|None}]
        """
        query = """
        MATCH (:Version {id: $id})<-[:IN_VERSION]-(p:Page)
        WHERE p.visible = true
        OPTIONAL MATCH (p)-[:CHILD_OF]->(parent:Page)
        OPTIONAL MATCH (p)-[:DISPLAYS]->(d:Document)
        WITH p, head(collect(DISTINCT parent.id)) AS parent_id, head(collect(DISTINCT d.id)) AS document_id
        RETURN p {.*} AS page, parent_id, document_id
        ORDER BY page.order, page.title
        """
        return await self._execute_read(query, {'id': version_id})

    # ===== Page Operations =====

    async def create_page_node(self, page: Page) -> Page:
        """
        Create a Page in its version, optionally under a parent page.

        The caller checks that the version and parent exist.
        """
        query = """
        MATCH (v:Version {id: $version_id})
        CREATE (p:Page)
        SET p = $props,
            p.created_at = datetime(),
            p.updated_at = datetime()
        MERGE (p)-[:IN_VERSION]->(v)
        WITH p
        OPTIONAL MATCH (parent:Page {id: $parent_page_id})
        FOREACH (_ IN CASE WHEN parent IS NULL THEN [] ELSE [1] END |
            MERGE (p)-[:CHILD_OF]->(parent)
        )
        WITH p
        """ + PAGE_RETURN
        record = await self._execute_write(query, {
            'props': page.to_properties(),
            'version_id': page.version_id,
            'parent_page_id': page.parent_page_id,
        })
        if record is None:
            raise ValueError(f"Version {page.version_id} does not exist")
        logger.debug(f"📦 Page node created: {page.id} ({page.slug})")
        return Page.from_record(record['page'])

    async def get_page_node(self, page_id: str) -> Optional[Page]:
        rows = await self._execute_read("MATCH (p:Page {id: $id})" + PAGE_RETURN, {'id': page_id})
        return Page.from_record(rows[0]['page']) if rows else None

    async def update_page_node(self, page_id: str, updates: Dict[str, Any]) -> Optional[Page]:
        query = """
        MATCH (p:Page {id: $id})
        SET p += $updates, p.updated_at = datetime()
        WITH p
        """ + PAGE_RETURN
        record = await self._execute_write(query, {'id': page_id, 'updates': updates})
        return Page.from_record(record['page']) if record else None

    async def set_page_parent(self, page_id: str, parent_page_id: Optional[str]) -> None:
        """Replace the page's CHILD_OF edge; None makes it a root page"""
        query = """
        MATCH (p:Page {id: $id})
        OPTIONAL MATCH (p)-[old:CHILD_OF]->(:Page)
        DELETE old
        WITH DISTINCT p
        OPTIONAL MATCH (parent:Page {id: $parent_page_id})
        FOREACH (_ IN CASE WHEN parent IS NULL THEN [] ELSE [1] END |
            MERGE (p)-[:CHILD_OF]->(parent)
        )
        RETURN p.id AS id
        """
        await self._execute_write(query, {'id': page_id, 'parent_page_id': parent_page_id})

    async def delete_page_node(self, page_id: str) -> bool:
        """Delete a page. Child pages become roots; documents stay."""
        return await self._delete_node("Page", page_id)

    async def list_page_nodes(
        self,
        version_id: Optional[str] = None,
        visible: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Page], int]:
        where = """
        WHERE ($version_id IS NULL OR EXISTS { (p)-[:IN_VERSION]->(:Version {id: $version_id}) })
          AND ($visible IS NULL OR p.visible = $visible)
        """
        params = {'version_id': version_id, 'visible': visible}

        count_rows = await self._execute_read("MATCH (p:Page)" + where + "RETURN count(p) AS total", params)
        total = count_rows[0]['total'] if count_rows else 0

        query = "MATCH (p:Page)" + where + """
        WITH p ORDER BY p.order, p.title SKIP $offset LIMIT $limit
        """ + PAGE_RETURN + "ORDER BY page.order, page.title"
        rows = await self._execute_read(query, {**params, 'limit': limit, 'offset': offset})
        return [Page.from_record(r['page']) for r in rows], total

    async def link_page_to_document(self, page_id: str, document_id: str) -> bool:
        """MERGE (Page)-[:DISPLAYS]->(Document). False when either is missing."""
        query = """
        MATCH (p:Page {id: $page_id})
        MATCH (d:Document {id: $document_id})
        MERGE (p)-[r:DISPLAYS]->(d)
        ON CREATE SET r.created_at = datetime()
        RETURN count(r) AS created
        """
        record = await self._execute_write(query, {'page_id': page_id, 'document_id': document_id})
        return bool(record and record['created'])

    async def unlink_page_from_document(self, page_id: str, document_id: str) -> bool:
        query = """
        MATCH (:Page {id: $page_id})-[r:DISPLAYS]->(:Document {id: $document_id})
        DELETE r
        RETURN count(*) AS deleted
        """
        record = await self._execute_write(query, {'page_id': page_id, 'document_id': document_id})
        return bool(record and record['deleted'])

    # ===== Tag Operations =====

    async def create_tag_node(self, tag: Tag) -> Tag:
        return Tag.from_record(await self._create_node("Tag", tag.to_properties()))

    async def get_tag_node(self, tag_id: str) -> Optional[Tag]:
        record = await self._get_node("Tag", tag_id)
        return Tag.from_record(record) if record else None

    async def find_tag_by_name(self, name: str) -> Optional[Tag]:
        rows = await self._execute_read("MATCH (n:Tag {name: $name}) RETURN n {.*} AS node LIMIT 1", {'name': name})
        return Tag.from_record(rows[0]['node']) if rows else None

    async def update_tag_node(self, tag_id: str, updates: Dict[str, Any]) -> Optional[Tag]:
        record = await self._update_node("Tag", tag_id, updates)
        return Tag.from_record(record) if record else None

    async def delete_tag_node(self, tag_id: str) -> bool:
        """Delete a tag and every HAS_TAG edge pointing at it"""
        return await self._delete_node("Tag", tag_id)

    async def list_tag_nodes(
        self,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Tag], int]:
        records, total = await self._list_nodes(
            "Tag", "WHERE ($search IS NULL OR n.name CONTAINS toLower($search))", {'search': search},
            "n.name", limit, offset,
        )
        return [Tag.from_record(r) for r in records], total

    @staticmethod
    def _taggable(label: str) -> str:
        if label not in TAGGABLE_LABELS:
            raise ValueError(f"{label} nodes cannot be tagged")
        return label

    async def tag_node(self, label: str, node_id: str, tag_id: str) -> bool:
        """MERGE (node)-[:HAS_TAG]->(tag). False when either is missing."""
        query = f"""
        MATCH (n:{self._taggable(label)} {{id: $node_id}})
        MATCH (t:Tag {{id: $tag_id}})
        MERGE (n)-[r:HAS_TAG]->(t)
        ON CREATE SET r.created_at = datetime()
        RETURN count(r) AS created
        """
        record = await self._execute_write(query, {'node_id': node_id, 'tag_id': tag_id})
        return bool(record and record['created'])

    async def untag_node(self, label: str, node_id: str, tag_id: str) -> bool:
        query = f"""
        MATCH (:{self._taggable(label)} {{id: $node_id}})-[r:HAS_TAG]->(:Tag {{id: $tag_id}})
        DELETE r
        RETURN count(*) AS deleted
        """
        record = await self._execute_write(query, {'node_id': node_id, 'tag_id': tag_id})
        return bool(record and record['deleted'])

    async def get_node_tags(self, label: str, node_id: str) -> List[Tag]:
        query = f"MATCH (:{self._taggable(label)} {{id: $id}})-[:HAS_TAG]->(t:Tag) RETURN t {{.*}} AS tag ORDER BY tag.name"
        rows = await self._execute_read(query, {'id': node_id})
        return [Tag.from_record(r['tag']) for r in rows]

    async def get_tagged_nodes(self, tag_id: str) -> List[Dict[str, Any]]:
        """
        Everything carrying the tag.

        Returns:
            [{'label': 'Document'|'Concept'|'Page', 'id': str, 'name': str}]
        """
        query = """
        MATCH (:Tag {id: $id})<-[:HAS_TAG]-(n)
        WITH n, [l IN labels(n) WHERE l IN $labels][0] AS label
        WHERE label IS NOT NULL
        RETURN label, n.id AS id, coalesce(n.title, n.term, n.id) AS name
        ORDER BY label, name
        """
        return await self._execute_read(query, {'id': tag_id, 'labels': list(TAGGABLE_LABELS)})

    # ===== Attachment Operations =====

    async def create_attachment_node(self, attachment: Attachment) -> Attachment:
        """Create the Attachment node, linked from its document when that exists"""
        query = """
        CREATE (a:Attachment)
        SET a = $props,
            a.created_at = datetime(),
            a.updated_at = datetime()
        WITH a
        OPTIONAL MATCH (d:Document {id: $document_id})
        FOREACH (_ IN CASE WHEN d IS NULL THEN [] ELSE [1] END |
            MERGE (d)-[:HAS_ATTACHMENT]->(a)
        )
        WITH a
        """ + ATTACHMENT_RETURN
        record = await self._execute_write(query, {
            'props': attachment.to_properties(),
            'document_id': attachment.document_id,
        })
        logger.debug(f"📦 Attachment node created: {attachment.id} ({attachment.filename})")
        return Attachment.from_record(record['attachment'])

    async def get_attachment_node(self, attachment_id: str) -> Optional[Attachment]:
        rows = await self._execute_read("MATCH (a:Attachment {id: $id})" + ATTACHMENT_RETURN, {'id': attachment_id})
        return Attachment.from_record(rows[0]['attachment']) if rows else None

    async def delete_attachment_node(self, attachment_id: str) -> bool:
        return await self._delete_node("Attachment", attachment_id)

    async def list_attachment_nodes(
        self,
        document_id: Optional[str] = None,
        attachment_type: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Attachment], int]:
        """Attachments, newest first"""
        where = """
        WHERE ($document_id IS NULL OR EXISTS { (:Document {id: $document_id})-[:HAS_ATTACHMENT]->(a) })
          AND ($attachment_type IS NULL OR a.attachment_type = $attachment_type)
        """
        params = {'document_id': document_id, 'attachment_type': attachment_type}

        count_rows = await self._execute_read("MATCH (a:Attachment)" + where + "RETURN count(a) AS total", params)
        total = count_rows[0]['total'] if count_rows else 0

        query = "MATCH (a:Attachment)" + where + """
        WITH a ORDER BY a.created_at DESC SKIP $offset LIMIT $limit
        """ + ATTACHMENT_RETURN + "ORDER BY attachment.created_at DESC"
        rows = await self._execute_read(query, {**params, 'limit': limit, 'offset': offset})
        return [Attachment.from_record(r['attachment']) for r in rows], total

    # ===== Search and Statistics =====

    async def search_documents(
        self,
        query: str,
        version_id: Optional[str] = None,
        tags: Optional[List[str]] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Case-insensitive substring search over document title and summary.

        A title hit scores 2, a summary hit 1. Each result names the first
        page displaying the document, if any.

        Returns:
            ([{document_id, page_id, title, summary, type, relevance_score, matched_fields}], total)
        """
        params = {'q': query.lower(), 'version_id': version_id, 'tags': list(tags or [])}

        count_rows = await self._execute_read(
            "MATCH (d:Document)" + SEARCH_WHERE + "RETURN count(d) AS total", params
        )
        total = count_rows[0]['total'] if count_rows else 0

        cypher = "MATCH (d:Document)" + SEARCH_WHERE + """
        WITH d,
             toLower(d.title) CONTAINS $q AS in_title,
             toLower(coalesce(d.summary, '')) CONTAINS $q AS in_summary
        OPTIONAL MATCH (p:Page)-[:DISPLAYS]->(d)
        WITH d, in_title, in_summary, head(collect(p.id)) AS page_id
        RETURN d.id AS document_id,
               page_id,
               d.title AS title,
               d.summary AS summary,
               d.type AS type,
               (CASE WHEN in_title THEN 2.0 ELSE 0.0 END)
                 + (CASE WHEN in_summary THEN 1.0 ELSE 0.0 END) AS relevance_score,
               [f IN [CASE WHEN in_title THEN 'title' END, CASE WHEN in_summary THEN 'summary' END]
                 WHERE f IS NOT NULL] AS matched_fields
        ORDER BY relevance_score DESC, title
        SKIP $offset LIMIT $limit
        """
        rows = await self._execute_read(cypher, {**params, 'limit': limit, 'offset': offset})
        return rows, total

    async def get_graph_stats(self) -> Dict[str, Any]:
        """
        Node and edge counts, overall and per label/type.

        Returns:
            {'total_nodes', 'total_edges', 'nodes_by_type': {label: n}, 'edges_by_type': {type: n}}
        """
        node_rows = await self._execute_read(
            "MATCH (n) RETURN coalesce(labels(n)[0], 'Unlabeled') AS type, count(*) AS count"
        )
        edge_rows = await self._execute_read(
            "MATCH ()-[r]->() RETURN type(r) AS type, count(*) AS count"
        )
        nodes_by_type = {r['type']: r['count'] for r in node_rows}
        edges_by_type = {r['type']: r['count'] for r in edge_rows}
        return {
            'total_nodes': sum(nodes_by_type.values()),
            'total_edges': sum(edges_by_type.values()),
            'nodes_by_type': nodes_by_type,
            'edges_by_type': edges_by_type,
        }
