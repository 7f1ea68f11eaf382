"""
Document domain model
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from enum import Enum

from utils.datetime_utils import neo4j_datetime_to_python, utc_now
from utils.id_generator import generate_id, generate_storage_key


class DocumentType(str, Enum):
    """Kinds of documentation"""
    API = "api"
    GENERAL = "general"
    TUTORIAL = "tutorial"


class DocumentStatus(str, Enum):
    """
    Workflow states

    Transitions:
    - draft -> in_review (review requested)
    - in_review -> done (approved) | draft (rejected)
    - done -> publish (deployed)
    - publish -> draft (edited again through a working copy)
    """
    DRAFT = "draft"
    IN_REVIEW = "in_review"
    DONE = "done"
    PUBLISH = "publish"


VALID_TRANSITIONS = {
    DocumentStatus.DRAFT: {DocumentStatus.IN_REVIEW},
    DocumentStatus.IN_REVIEW: {DocumentStatus.DONE, DocumentStatus.DRAFT},
    DocumentStatus.DONE: {DocumentStatus.PUBLISH},
    DocumentStatus.PUBLISH: {DocumentStatus.DRAFT},
}


def is_valid_status_transition(current: DocumentStatus, new: DocumentStatus) -> bool:
    return DocumentStatus(new) in VALID_TRANSITIONS.get(DocumentStatus(current), set())


@dataclass
class DocumentNode:
    """
    Document metadata - storage-agnostic representation

    Storage: graph database (:Document node)
    Content lives in the relational store under the same id, see
    DocumentContent.

    ID format: UUID4 string
    """
    id: str
    type: DocumentType
    title: str
    lang: str
    status: DocumentStatus = DocumentStatus.DRAFT
    storage_key: str = ""
    summary: Optional[str] = None
    author: Optional[str] = None
    version_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.id:
            self.id = generate_id()
        self.type = DocumentType(self.type)
        self.status = DocumentStatus(self.status)
        if not self.storage_key:
            self.storage_key = generate_storage_key(self.id)

    @classmethod
    def new(
        cls,
        type: DocumentType,
        title: str,
        lang: str,
        author: Optional[str] = None,
        version_id: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> 'DocumentNode':
        """Fresh draft with a generated id and matching timestamps"""
        now = utc_now()
        return cls(
            id=generate_id(),
            type=type,
            title=title,
            lang=lang,
            author=author,
            version_id=version_id,
            tags=list(tags or []),
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'DocumentNode':
        """Build from a Neo4j node property map"""
        return cls(
            id=str(record['id']),
            type=record['type'],
            status=record.get('status') or DocumentStatus.DRAFT,
            title=str(record['title']),
            lang=str(record['lang']),
            storage_key=record.get('storage_key') or '',
            summary=record.get('summary'),
            author=record.get('author'),
            version_id=record.get('version_id'),
            tags=list(record.get('tags') or []),
            created_at=neo4j_datetime_to_python(record.get('created_at')),
            updated_at=neo4j_datetime_to_python(record.get('updated_at')),
        )

    def to_properties(self) -> Dict[str, Any]:
        """Node properties as written to the graph (tags are edges, not properties)"""
        return {
            'id': self.id,
            'type': self.type.value,
            'status': self.status.value,
            'title': self.title,
            'lang': self.lang,
            'storage_key': self.storage_key,
            'summary': self.summary,
            'author': self.author,
            'version_id': self.version_id,
        }


@dataclass
class Document:
    """Metadata and content combined, as returned to callers"""
    node: DocumentNode
    content: str = ""

    @property
    def id(self) -> str:
        return self.node.id
