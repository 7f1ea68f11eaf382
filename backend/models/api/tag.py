"""
Pydantic models for Tag endpoints
"""
import re

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from models.domain.graph_nodes import Tag, normalize_tag_name

TAG_NAME_PATTERN = re.compile(r'^[a-z0-9-]+$')
COLOR_PATTERN = r'^#[0-9a-fA-F]{6}$'


def check_tag_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    name = normalize_tag_name(v)
    if not TAG_NAME_PATTERN.match(name):
        raise ValueError("Tag name may only contain lowercase letters, digits and hyphens")
    return name


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator('name')
    @classmethod
    def normalize_name(cls, v):
        return check_tag_name(v)


class TagUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator('name')
    @classmethod
    def normalize_name(cls, v):
        return check_tag_name(v)


class TagQuery(BaseModel):
    search: Optional[str] = Field(None, min_length=1)
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class TagAssign(BaseModel):
    tag_id: str = Field(..., min_length=1)


class TagResponse(BaseModel):
    id: str
    name: str
    color: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_tag(cls, tag: Tag) -> 'TagResponse':
        return cls(
            id=tag.id,
            name=tag.name,
            color=tag.color,
            description=tag.description,
            created_at=tag.created_at.isoformat() if tag.created_at else None,
            updated_at=tag.updated_at.isoformat() if tag.updated_at else None,
        )


class TagListResponse(BaseModel):
    items: List[TagResponse]
    total: int
    limit: int
    offset: int


class TaggedEntity(BaseModel):
    label: str
    id: str
    name: Optional[str] = None


class TaggedEntitiesResponse(BaseModel):
    tag_id: str
    items: List[TaggedEntity]
    total: int
