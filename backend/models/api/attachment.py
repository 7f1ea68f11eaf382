"""
Pydantic models for Attachment endpoints
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from models.domain.attachment import Attachment, AttachmentType


class AttachmentQuery(BaseModel):
    document_id: Optional[str] = None
    attachment_type: Optional[AttachmentType] = None
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class AttachmentResponse(BaseModel):
    id: str
    filename: str
    mime_type: str
    size_bytes: int
    attachment_type: AttachmentType
    checksum: str
    storage_key: str
    document_id: Optional[str] = None
    download_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_attachment(cls, attachment: Attachment, download_url: Optional[str] = None) -> 'AttachmentResponse':
        return cls(
            id=attachment.id,
            filename=attachment.filename,
            mime_type=attachment.mime_type,
            size_bytes=attachment.size_bytes,
            attachment_type=attachment.attachment_type,
            checksum=attachment.checksum,
            storage_key=attachment.storage_key,
            document_id=attachment.document_id,
            download_url=download_url,
            created_at=attachment.created_at.isoformat() if attachment.created_at else None,
            updated_at=attachment.updated_at.isoformat() if attachment.updated_at else None,
        )


class AttachmentListResponse(BaseModel):
    items: List[AttachmentResponse]
    total: int
    limit: int
    offset: int


class ValidationRulesResponse(BaseModel):
    """Upload limits, for clients to check files before sending them"""
    max_file_size: int
    allowed_mime_types: List[str]
