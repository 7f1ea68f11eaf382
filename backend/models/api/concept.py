"""
Pydantic models for Concept endpoints
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from models.api.document import LANG_PATTERN
from models.domain.document import DocumentNode
from models.domain.graph_nodes import Concept


class ConceptCreate(BaseModel):
    term: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=5000)
    lang: str = Field(..., pattern=LANG_PATTERN)


class ConceptUpdate(BaseModel):
    term: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)


class ConceptQuery(BaseModel):
    lang: Optional[str] = Field(None, pattern=LANG_PATTERN)
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class ConceptLinkCreate(BaseModel):
    """Body for supertype, whole-of and synonym links"""
    concept_id: str = Field(..., min_length=1)


class ConceptResponse(BaseModel):
    id: str
    term: str
    description: Optional[str] = None
    lang: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_concept(cls, concept: Concept) -> 'ConceptResponse':
        return cls(
            id=concept.id,
            term=concept.term,
            description=concept.description,
            lang=concept.lang,
            created_at=concept.created_at.isoformat() if concept.created_at else None,
            updated_at=concept.updated_at.isoformat() if concept.updated_at else None,
        )


class ConceptListResponse(BaseModel):
    items: List[ConceptResponse]
    total: int
    limit: int
    offset: int


class RelatedConceptsResponse(BaseModel):
    items: List[ConceptResponse]
    total: int


class ConceptDocument(BaseModel):
    id: str
    title: str
    type: str
    status: str
    lang: str


class ConceptDocumentsResponse(BaseModel):
    """Documents using a concept"""
    concept_id: str
    items: List[ConceptDocument]
    total: int

    @classmethod
    def build(cls, concept_id: str, nodes: List[DocumentNode]) -> 'ConceptDocumentsResponse':
        items = [
            ConceptDocument(id=n.id, title=n.title, type=n.type.value, status=n.status.value, lang=n.lang)
            for n in nodes
        ]
        return cls(concept_id=concept_id, items=items, total=len(items))
