"""
Concept Service - glossary terms and the taxonomy between them

Concept relations:
- SUBTYPE_OF: child -> parent (supertypes / subtypes)
- PART_OF:    part -> whole (whole-of / parts)
- SYNONYM_OF: same meaning, same language, no direction
"""
import logging
from typing import List, Tuple

from models.api.concept import ConceptCreate, ConceptQuery, ConceptUpdate
from models.domain.document import DocumentNode
from models.domain.graph_nodes import Concept
from models.domain.relationships import RelationType
from services.graphdb_service import GraphDBService
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ConceptService:
    """Concept CRUD and concept-to-concept relations"""

    def __init__(self, graph: GraphDBService):
        self.graph = graph

    async def create(self, request: ConceptCreate) -> Concept:
        concept = Concept.new(term=request.term, description=request.description, lang=request.lang)
        concept = await self.graph.create_concept_node(concept)
        logger.info(f"💡 Concept created: {concept.id} ({concept.term!r}, {concept.lang})")
        return concept

    async def get(self, concept_id: str) -> Concept:
        concept = await self.graph.get_concept_node(concept_id)
        if concept is None:
            raise NotFoundError("Concept", concept_id)
        return concept

    async def update(self, concept_id: str, patch: ConceptUpdate) -> Concept:
        updates = patch.model_dump(exclude_none=True)
        concept = await self.graph.update_concept_node(concept_id, updates)
        if concept is None:
            raise NotFoundError("Concept", concept_id)
        logger.info(f"✏️  Concept updated: {concept_id} {sorted(updates)}")
        return concept

    async def delete(self, concept_id: str) -> None:
        if not await self.graph.delete_concept_node(concept_id):
            raise NotFoundError("Concept", concept_id)
        logger.info(f"🗑️  Concept deleted: {concept_id}")

    async def list(self, query: ConceptQuery) -> Tuple[List[Concept], int]:
        return await self.graph.list_concept_nodes(lang=query.lang, limit=query.limit, offset=query.offset)

    async def get_documents(self, concept_id: str) -> List[DocumentNode]:
        """Documents that would be affected by changing this concept"""
        await self.get(concept_id)
        return await self.graph.get_documents_using_concept(concept_id)

    # =========================================================================
    # RELATIONS
    # =========================================================================

    async def relate(self, source_id: str, target_id: str, relation: RelationType) -> None:
        """
        Add (source)-[relation]->(target).

        Raises:
            ValidationError: self relation, or synonyms in different languages
            NotFoundError: either concept is missing
        """
        if source_id == target_id:
            raise ValidationError("A concept cannot be related to itself")

        source = await self.get(source_id)
        target = await self.get(target_id)
        if relation == RelationType.SYNONYM_OF and source.lang != target.lang:
            raise ValidationError(
                "Synonyms must share a language",
                {'source_lang': source.lang, 'target_lang': target.lang},
            )

        if not await self.graph.create_concept_relationship(source_id, target_id, relation):
            raise NotFoundError("Concept", f"{source_id} or {target_id}")
        logger.info(f"🔗 {source_id} -[{relation.value}]-> {target_id}")

    async def unrelate(self, source_id: str, target_id: str, relation: RelationType) -> None:
        if not await self.graph.delete_concept_relationship(source_id, target_id, relation):
            raise NotFoundError(f"{relation.value} relationship", f"{source_id}->{target_id}")
        logger.info(f"✂️  {source_id} -[{relation.value}]-> {target_id} removed")

    async def related(self, concept_id: str, relation: RelationType, incoming: bool = False) -> List[Concept]:
        await self.get(concept_id)
        return await self.graph.get_related_concepts(concept_id, relation, incoming=incoming)
