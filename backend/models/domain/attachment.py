"""
Attachment domain model

Uploaded files (images, OpenAPI specs, markdown, PDFs) stored as blobs under
attachments/{id}/{filename}. Metadata is an :Attachment node in the graph,
optionally linked from a document with HAS_ATTACHMENT.
"""
import hashlib
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from utils.datetime_utils import neo4j_datetime_to_python, utc_now
from utils.id_generator import generate_attachment_key, generate_id

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

ALLOWED_MIME_TYPES = (
    # Images
    'image/jpeg',
    'image/png',
    'image/gif',
    'image/webp',
    'image/svg+xml',
    # Documents
    'application/pdf',
    'text/plain',
    'text/markdown',
    'text/x-markdown',
    # API specs
    'application/json',
    'application/x-yaml',
    'text/yaml',
    'application/yaml',
    # Archives
    'application/zip',
)

OAS_MIME_TYPES = {'application/json', 'application/x-yaml', 'text/yaml', 'application/yaml'}
MARKDOWN_MIME_TYPES = {'text/markdown', 'text/x-markdown'}


class AttachmentType(str, Enum):
    IMAGE = "image"
    DOCUMENT = "document"
    OAS = "oas"
    MARKDOWN = "markdown"
    OTHER = "other"


def attachment_type_for(mime_type: str) -> AttachmentType:
    """Classify an upload by its MIME type"""
    if mime_type.startswith('image/'):
        return AttachmentType.IMAGE
    if mime_type in OAS_MIME_TYPES:
        return AttachmentType.OAS
    if mime_type in MARKDOWN_MIME_TYPES:
        return AttachmentType.MARKDOWN
    if mime_type.startswith('application/') or mime_type == 'text/plain':
        return AttachmentType.DOCUMENT
    return AttachmentType.OTHER


@dataclass
class Attachment:
    """Uploaded file metadata"""
    id: str
    filename: str
    mime_type: str
    size_bytes: int
    storage_key: str
    checksum: str
    attachment_type: AttachmentType = AttachmentType.OTHER
    document_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.attachment_type = AttachmentType(self.attachment_type)

    @classmethod
    def create(
        cls,
        filename: str,
        mime_type: str,
        data: bytes,
        document_id: Optional[str] = None
    ) -> 'Attachment':
        """New attachment for an upload; checksum is the MD5 hex digest of data"""
        attachment_id = generate_id()
        now = utc_now()
        return cls(
            id=attachment_id,
            filename=filename,
            mime_type=mime_type,
            size_bytes=len(data),
            storage_key=generate_attachment_key(attachment_id, filename),
            checksum=hashlib.md5(data).hexdigest(),
            attachment_type=attachment_type_for(mime_type),
            document_id=document_id,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Attachment':
        return cls(
            id=str(record['id']),
            filename=str(record['filename']),
            mime_type=str(record['mime_type']),
            size_bytes=int(record.get('size_bytes') or 0),
            storage_key=str(record['storage_key']),
            checksum=record.get('checksum') or '',
            attachment_type=record.get('attachment_type') or AttachmentType.OTHER,
            document_id=record.get('document_id'),
            created_at=neo4j_datetime_to_python(record.get('created_at')),
            updated_at=neo4j_datetime_to_python(record.get('updated_at')),
        )

    def to_properties(self) -> Dict[str, Any]:
        """Stored properties; the owning document is an edge"""
        return {
            'id': self.id,
            'filename': self.filename,
            'mime_type': self.mime_type,
            'size_bytes': self.size_bytes,
            'storage_key': self.storage_key,
            'checksum': self.checksum,
            'attachment_type': self.attachment_type.value,
        }
