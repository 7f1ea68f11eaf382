"""
DocumentContent domain model
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from utils.datetime_utils import utc_now
from utils.id_generator import generate_id, generate_storage_key


@dataclass
class DocumentContent:
    """
    Document content row - storage-agnostic representation

    Storage: PostgreSQL (documents table)

    document_id references the graph Document node id. Neither database
    enforces that reference. storage_key is always documents/{document_id}.
    """
    id: str
    document_id: str
    content: str
    storage_key: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.id:
            self.id = generate_id()
        if not self.storage_key:
            self.storage_key = generate_storage_key(self.document_id)

    @classmethod
    def create(cls, document_id: str, content: str) -> 'DocumentContent':
        """New row for a document's first content write"""
        now = utc_now()
        return cls(
            id=generate_id(),
            document_id=document_id,
            content=content,
            storage_key=generate_storage_key(document_id),
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'DocumentContent':
        return cls(
            id=str(row['id']),
            document_id=row['document_id'],
            content=row['content'],
            storage_key=row['storage_key'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    @property
    def size_bytes(self) -> int:
        return len(self.content.encode('utf-8'))
