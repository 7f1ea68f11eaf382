"""
Concepts API
============

Glossary concepts and the taxonomy between them. Mounted under API_V1_PREFIX.

Endpoints:
- POST   /concepts                               - create (201)
- GET    /concepts                               - list (lang filter + paginate)
- GET    /concepts/{id}                          - get
- PUT    /concepts/{id}                          - partial update
- DELETE /concepts/{id}                          - delete (204)
- GET    /concepts/{id}/documents                - documents using the concept
- POST   /concepts/{id}/supertypes               - {concept_id}: this SUBTYPE_OF concept_id
- GET    /concepts/{id}/supertypes | /subtypes
- DELETE /concepts/{id}/supertypes/{parent_id}
- POST   /concepts/{id}/whole-of                 - {concept_id}: this PART_OF concept_id
- GET    /concepts/{id}/whole-of | /parts
- DELETE /concepts/{id}/whole-of/{whole_id}
- POST   /concepts/{id}/synonyms                 - {concept_id}, same language only
- GET    /concepts/{id}/synonyms
- DELETE /concepts/{id}/synonyms/{synonym_id}
"""
import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query, Response, status

from api.dependencies import get_concept_service
from models.api.concept import (
    ConceptCreate,
    ConceptDocumentsResponse,
    ConceptLinkCreate,
    ConceptListResponse,
    ConceptQuery,
    ConceptResponse,
    ConceptUpdate,
    RelatedConceptsResponse,
)
from models.domain.graph_nodes import Concept
from models.domain.relationships import RelationType
from services.concept_service import ConceptService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/concepts", tags=["Concepts"])

Service = Annotated[ConceptService, Depends(get_concept_service)]


def _related(concepts: List[Concept]) -> RelatedConceptsResponse:
    return RelatedConceptsResponse(items=[ConceptResponse.from_concept(c) for c in concepts], total=len(concepts))


@router.post("", response_model=ConceptResponse, status_code=status.HTTP_201_CREATED)
async def create_concept(body: ConceptCreate, service: Service):
    return ConceptResponse.from_concept(await service.create(body))


@router.get("", response_model=ConceptListResponse)
async def list_concepts(query: Annotated[ConceptQuery, Query()], service: Service):
    concepts, total = await service.list(query)
    return ConceptListResponse(
        items=[ConceptResponse.from_concept(c) for c in concepts],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/{concept_id}", response_model=ConceptResponse)
async def get_concept(concept_id: str, service: Service):
    return ConceptResponse.from_concept(await service.get(concept_id))


@router.put("/{concept_id}", response_model=ConceptResponse)
async def update_concept(concept_id: str, body: ConceptUpdate, service: Service):
    return ConceptResponse.from_concept(await service.update(concept_id, body))


@router.delete("/{concept_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_concept(concept_id: str, service: Service):
    await service.delete(concept_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{concept_id}/documents", response_model=ConceptDocumentsResponse)
async def get_concept_documents(concept_id: str, service: Service):
    return ConceptDocumentsResponse.build(concept_id, await service.get_documents(concept_id))


# ============================================================================
# SUBTYPE_OF
# ============================================================================

@router.post("/{concept_id}/supertypes", status_code=status.HTTP_201_CREATED)
async def add_supertype(concept_id: str, body: ConceptLinkCreate, service: Service):
    await service.relate(concept_id, body.concept_id, RelationType.SUBTYPE_OF)
    return {"message": "Concept linked as subtype"}


@router.get("/{concept_id}/supertypes", response_model=RelatedConceptsResponse)
async def get_supertypes(concept_id: str, service: Service):
    return _related(await service.related(concept_id, RelationType.SUBTYPE_OF))


@router.get("/{concept_id}/subtypes", response_model=RelatedConceptsResponse)
async def get_subtypes(concept_id: str, service: Service):
    return _related(await service.related(concept_id, RelationType.SUBTYPE_OF, incoming=True))


@router.delete("/{concept_id}/supertypes/{parent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_supertype(concept_id: str, parent_id: str, service: Service):
    await service.unrelate(concept_id, parent_id, RelationType.SUBTYPE_OF)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# PART_OF
# ============================================================================

@router.post("/{concept_id}/whole-of", status_code=status.HTTP_201_CREATED)
async def add_whole(concept_id: str, body: ConceptLinkCreate, service: Service):
    await service.relate(concept_id, body.concept_id, RelationType.PART_OF)
    return {"message": "Concept linked as part"}


@router.get("/{concept_id}/whole-of", response_model=RelatedConceptsResponse)
async def get_wholes(concept_id: str, service: Service):
    return _related(await service.related(concept_id, RelationType.PART_OF))


@router.get("/{concept_id}/parts", response_model=RelatedConceptsResponse)
async def get_parts(concept_id: str, service: Service):
    return _related(await service.related(concept_id, RelationType.PART_OF, incoming=True))


@router.delete("/{concept_id}/whole-of/{whole_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_whole(concept_id: str, whole_id: str, service: Service):
    await service.unrelate(concept_id, whole_id, RelationType.PART_OF)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# SYNONYM_OF
# ============================================================================

@router.post("/{concept_id}/synonyms", status_code=status.HTTP_201_CREATED)
async def add_synonym(concept_id: str, body: ConceptLinkCreate, service: Service):
    await service.relate(concept_id, body.concept_id, RelationType.SYNONYM_OF)
    return {"message": "Concepts linked as synonyms"}


@router.get("/{concept_id}/synonyms", response_model=RelatedConceptsResponse)
async def get_synonyms(concept_id: str, service: Service):
    return _related(await service.related(concept_id, RelationType.SYNONYM_OF))


@router.delete("/{concept_id}/synonyms/{synonym_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_synonym(concept_id: str, synonym_id: str, service: Service):
    await service.unrelate(concept_id, synonym_id, RelationType.SYNONYM_OF)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
