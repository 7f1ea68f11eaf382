"""
Attachment Service - uploaded files in object storage

The blob goes to storage first, then the metadata node to the graph. If
the metadata write fails the blob is removed again, so an upload either
lands in both stores or in neither. On delete, a blob that cannot be
removed is logged and the metadata is deleted anyway.
"""
import logging
from typing import List, Optional, Tuple

from models.api.attachment import AttachmentQuery
from models.domain.attachment import ALLOWED_MIME_TYPES, MAX_FILE_SIZE, Attachment
from services.graphdb_service import GraphDBService
from services.storage_adapter import StorageAdapter
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DOWNLOAD_URL_EXPIRY = 3600


class AttachmentService:

    def __init__(self, graph: GraphDBService, storage: StorageAdapter):
        self.graph = graph
        self.storage = storage

    async def upload(
        self,
        filename: str,
        mime_type: str,
        data: bytes,
        document_id: Optional[str] = None
    ) -> Attachment:
        """
        Store a file and record its metadata.

        Raises:
            ValidationError: empty, too large, or a MIME type that is not allowed
            NotFoundError: document_id given but no such document
        """
        if not data:
            raise ValidationError("File is empty")
        if len(data) > MAX_FILE_SIZE:
            raise ValidationError(
                f"File exceeds the {MAX_FILE_SIZE // (1024 * 1024)}MB limit",
                {'size_bytes': len(data), 'max_size_bytes': MAX_FILE_SIZE},
            )
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(f"File type {mime_type} is not allowed", {'mime_type': mime_type})
        if document_id is not None and await self.graph.get_document_node(document_id) is None:
            raise NotFoundError("Document", document_id)

        attachment = Attachment.create(filename, mime_type, data, document_id)
        logger.info(f"📎 Uploading attachment {attachment.id}: {filename} ({len(data)} bytes)")

        await self.storage.upload(attachment.storage_key, data, content_type=mime_type)
        try:
            attachment = await self.graph.create_attachment_node(attachment)
        except Exception as e:
            logger.error(f"❌ Attachment metadata write failed for {attachment.id}, removing blob: {e}")
            try:
                await self.storage.delete(attachment.storage_key)
            except Exception as cleanup_error:
                logger.warning(f"⚠️  Could not remove orphaned blob {attachment.storage_key}: {cleanup_error}")
            raise

        logger.info(f"✅ Attachment stored: {attachment.id} ({attachment.attachment_type.value})")
        return attachment

    async def get(self, attachment_id: str) -> Attachment:
        attachment = await self.graph.get_attachment_node(attachment_id)
        if attachment is None:
            raise NotFoundError("Attachment", attachment_id)
        return attachment

    async def get_download_url(self, attachment: Attachment, expires_in: int = DOWNLOAD_URL_EXPIRY) -> str:
        return await self.storage.presign(attachment.storage_key, expires_in=expires_in)

    async def download(self, attachment_id: str) -> Tuple[Attachment, bytes]:
        """
        Raises:
            NotFoundError: unknown attachment, or its blob is gone
        """
        attachment = await self.get(attachment_id)
        if not await self.storage.exists(attachment.storage_key):
            logger.warning(f"⚠️  Attachment {attachment_id} has no blob at {attachment.storage_key}")
            raise NotFoundError("Attachment file", attachment_id)
        return attachment, await self.storage.download(attachment.storage_key)

    async def delete(self, attachment_id: str) -> None:
        attachment = await self.get(attachment_id)
        try:
            await self.storage.delete(attachment.storage_key)
        except Exception as e:
            logger.warning(f"⚠️  Could not remove blob {attachment.storage_key}, deleting metadata anyway: {e}")

        if not await self.graph.delete_attachment_node(attachment_id):
            raise NotFoundError("Attachment", attachment_id)
        logger.info(f"🗑️  Attachment deleted: {attachment_id}")

    async def list(self, query: AttachmentQuery) -> Tuple[List[Attachment], int]:
        return await self.graph.list_attachment_nodes(
            document_id=query.document_id,
            attachment_type=query.attachment_type.value if query.attachment_type else None,
            limit=query.limit,
            offset=query.offset,
        )
