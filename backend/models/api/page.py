"""
Pydantic models for Page endpoints
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from models.domain.graph_nodes import Page

SLUG_PATTERN = r'^[a-z0-9-]+$'


class PageCreate(BaseModel):
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    title: str = Field(..., min_length=1, max_length=255)
    version_id: str = Field(..., min_length=1)
    parent_page_id: Optional[str] = None
    order: int = Field(0, ge=0)
    visible: bool = False


class PageUpdate(BaseModel):
    """parent_page_id: null moves the page to the top level"""
    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    parent_page_id: Optional[str] = None
    order: Optional[int] = Field(None, ge=0)
    visible: Optional[bool] = None


class PageQuery(BaseModel):
    version_id: Optional[str] = None
    visible: Optional[bool] = None
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class PageDocumentLink(BaseModel):
    document_id: str = Field(..., min_length=1)


class PageDocumentResponse(BaseModel):
    page_id: str
    document_id: str


class PageResponse(BaseModel):
    id: str
    slug: str
    title: str
    order: int = 0
    visible: bool = False
    version_id: Optional[str] = None
    parent_page_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_page(cls, page: Page) -> 'PageResponse':
        return cls(
            id=page.id,
            slug=page.slug,
            title=page.title,
            order=page.order,
            visible=page.visible,
            version_id=page.version_id,
            parent_page_id=page.parent_page_id,
            created_at=page.created_at.isoformat() if page.created_at else None,
            updated_at=page.updated_at.isoformat() if page.updated_at else None,
        )


class PageListResponse(BaseModel):
    items: List[PageResponse]
    total: int
    limit: int
    offset: int
