"""
Pydantic models for search and graph statistics
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional


class SearchQuery(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    version_id: Optional[str] = None
    tags: Optional[List[str]] = None
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)

    @field_validator('tags', mode='before')
    @classmethod
    def split_tags(cls, v):
        """Accept ?tags=a,b as well as repeated ?tags=a&tags=b"""
        if v is None:
            return v
        if isinstance(v, str):
            v = [v]
        names = [name.strip().lower() for item in v for name in str(item).split(',')]
        return [name for name in names if name] or None


class SearchResult(BaseModel):
    document_id: str
    page_id: Optional[str] = None
    title: str
    summary: Optional[str] = None
    type: str
    relevance_score: float
    matched_fields: List[str]


class SearchResponse(BaseModel):
    results: List[SearchResult]
    total: int
    limit: int
    offset: int


class GraphStatsResponse(BaseModel):
    total_nodes: int
    total_edges: int
    nodes_by_type: Dict[str, int]
    edges_by_type: Dict[str, int]
