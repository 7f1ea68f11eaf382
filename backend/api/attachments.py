"""
Attachments API
===============

Endpoints:
- POST   /attachments                      - multipart upload: file, document_id? (201)
- GET    /attachments                      - list (document_id, attachment_type filters + paginate)
- GET    /attachments/validation-rules     - size limit and allowed MIME types
- GET    /attachments/{id}                 - metadata, ?include_download_url=true for a presigned URL
- GET    /attachments/{id}/download        - file bytes
- DELETE /attachments/{id}                 - delete (204)
"""
import logging
from typing import Annotated, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from api.dependencies import get_attachment_service
from models.api.attachment import (
    AttachmentListResponse,
    AttachmentQuery,
    AttachmentResponse,
    ValidationRulesResponse,
)
from models.domain.attachment import ALLOWED_MIME_TYPES, MAX_FILE_SIZE
from services.attachment_service import AttachmentService
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attachments", tags=["Attachments"])

Service = Annotated[AttachmentService, Depends(get_attachment_service)]


@router.post("", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
async def upload_attachment(
    service: Service,
    file: UploadFile = File(...),
    document_id: Optional[str] = Form(None),
):
    if not file.filename:
        raise ValidationError("Uploaded file has no name")
    # One byte past the limit is enough to reject the upload
    data = await file.read(MAX_FILE_SIZE + 1)
    mime_type = (file.content_type or "application/octet-stream").split(";")[0].strip()

    attachment = await service.upload(file.filename, mime_type, data, document_id or None)
    logger.info(f"Attachment uploaded via API: {attachment.id}")
    return AttachmentResponse.from_attachment(attachment)


@router.get("", response_model=AttachmentListResponse)
async def list_attachments(query: Annotated[AttachmentQuery, Query()], service: Service):
    attachments, total = await service.list(query)
    return AttachmentListResponse(
        items=[AttachmentResponse.from_attachment(a) for a in attachments],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/validation-rules", response_model=ValidationRulesResponse)
async def get_validation_rules():
    return ValidationRulesResponse(max_file_size=MAX_FILE_SIZE, allowed_mime_types=list(ALLOWED_MIME_TYPES))


@router.get("/{attachment_id}", response_model=AttachmentResponse)
async def get_attachment(attachment_id: str, service: Service, include_download_url: bool = False):
    attachment = await service.get(attachment_id)
    url = await service.get_download_url(attachment) if include_download_url else None
    return AttachmentResponse.from_attachment(attachment, download_url=url)


@router.get("/{attachment_id}/download")
async def download_attachment(attachment_id: str, service: Service):
    attachment, data = await service.download(attachment_id)
    return Response(
        content=data,
        media_type=attachment.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(attachment.filename)}",
            "Content-Length": str(len(data)),
        },
    )


@router.delete("/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attachment(attachment_id: str, service: Service):
    await service.delete(attachment_id)
    logger.info(f"Attachment deleted via API: {attachment_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
