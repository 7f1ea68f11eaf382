"""
Pydantic models for Version endpoints
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from models.domain.graph_nodes import NavigationItem, Version

VERSION_PATTERN = r'^v\d+\.\d+\.\d+$'


class VersionCreate(BaseModel):
    version: str = Field(..., pattern=VERSION_PATTERN, description="Semantic label, e.g. 'v1.2.0'")
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    is_public: bool = False
    is_main: bool = False


class VersionUpdate(BaseModel):
    version: Optional[str] = Field(None, pattern=VERSION_PATTERN)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    is_public: Optional[bool] = None
    is_main: Optional[bool] = None


class VersionQuery(BaseModel):
    is_public: Optional[bool] = None
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class VersionResponse(BaseModel):
    id: str
    version: Optional[str] = None
    name: str
    description: Optional[str] = None
    is_public: bool = False
    is_main: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_version(cls, version: Version) -> 'VersionResponse':
        return cls(
            id=version.id,
            version=version.version,
            name=version.name,
            description=version.description,
            is_public=version.is_public,
            is_main=version.is_main,
            created_at=version.created_at.isoformat() if version.created_at else None,
            updated_at=version.updated_at.isoformat() if version.updated_at else None,
        )


class VersionListResponse(BaseModel):
    items: List[VersionResponse]
    total: int
    limit: int
    offset: int


class NavigationNode(BaseModel):
    id: str
    slug: str
    title: str
    order: int
    document_id: Optional[str] = None
    children: List['NavigationNode'] = []

    @classmethod
    def from_item(cls, item: NavigationItem) -> 'NavigationNode':
        return cls(
            id=item.id,
            slug=item.slug,
            title=item.title,
            order=item.order,
            document_id=item.document_id,
            children=[cls.from_item(child) for child in item.children],
        )


class NavigationResponse(BaseModel):
    version_id: str
    items: List[NavigationNode]
