"""
Pydantic models for Document endpoints
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from models.domain.document import Document, DocumentStatus, DocumentType
from models.domain.graph_nodes import Concept, Page, Version, normalize_tag_name

LANG_PATTERN = r'^[a-z]{2}$'


class DocumentCreate(BaseModel):
    """Request model for creating a document"""
    title: str = Field(..., min_length=1, max_length=255)
    type: DocumentType
    content: str = Field(..., min_length=1)
    lang: str = Field(..., pattern=LANG_PATTERN, description="ISO 639-1 code, e.g. 'en'")
    tags: Optional[List[str]] = None
    author: Optional[str] = None
    version_id: Optional[str] = None

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v):
        """Lowercase, drop blanks and duplicates, keep first-seen order"""
        if v is None:
            return v
        names = [normalize_tag_name(tag) for tag in v if tag.strip()]
        return list(dict.fromkeys(names))


class DocumentUpdate(BaseModel):
    """Request model for a partial update"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    status: Optional[DocumentStatus] = None


class DocumentResponse(BaseModel):
    """Document with its content"""
    id: str
    type: DocumentType
    status: DocumentStatus
    title: str
    lang: str
    content: str
    summary: Optional[str] = None
    author: Optional[str] = None
    version_id: Optional[str] = None
    tags: List[str] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_document(cls, document: Document) -> 'DocumentResponse':
        node = document.node
        return cls(
            id=node.id,
            type=node.type,
            status=node.status,
            title=node.title,
            lang=node.lang,
            content=document.content,
            summary=node.summary,
            author=node.author,
            version_id=node.version_id,
            tags=node.tags,
            created_at=node.created_at.isoformat() if node.created_at else None,
            updated_at=node.updated_at.isoformat() if node.updated_at else None,
        )


class DocumentListResponse(BaseModel):
    items: List[DocumentResponse]
    total: int
    limit: int
    offset: int


class DocumentQuery(BaseModel):
    """Query parameters for listing documents"""
    status: Optional[DocumentStatus] = None
    type: Optional[DocumentType] = None
    lang: Optional[str] = Field(None, pattern=LANG_PATTERN)
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class LinkCreate(BaseModel):
    target_id: str = Field(..., min_length=1)


class WorkingCopyCreate(BaseModel):
    original_id: str = Field(..., min_length=1)


class ConceptAttach(BaseModel):
    concept_id: str = Field(..., min_length=1)


class RelatedDocumentsResponse(BaseModel):
    items: List[DocumentResponse]
    total: int


class OriginalDocumentResponse(BaseModel):
    original: Optional[DocumentResponse] = None


class ContentUrlResponse(BaseModel):
    url: str
    expires_in: int


class ContextConcept(BaseModel):
    id: str
    term: str
    description: Optional[str] = None


class ContextVersion(BaseModel):
    id: str
    name: str


class ContextPage(BaseModel):
    id: str
    slug: str
    title: str = ""


class DocumentContextResponse(BaseModel):
    """Graph neighbourhood of a document"""
    document_id: str
    tags: List[str]
    concepts: List[ContextConcept]
    version: Optional[ContextVersion] = None
    pages: List[ContextPage]

    @classmethod
    def build(
        cls,
        document_id: str,
        tags: List[str],
        concepts: List[Concept],
        version: Optional[Version],
        pages: List[Page],
    ) -> 'DocumentContextResponse':
        return cls(
            document_id=document_id,
            tags=tags,
            concepts=[ContextConcept(id=c.id, term=c.term, description=c.description) for c in concepts],
            version=ContextVersion(id=version.id, name=version.name) if version else None,
            pages=[ContextPage(id=p.id, slug=p.slug, title=p.title) for p in pages],
        )
