"""
Document Content Repository - PostgreSQL content storage

Storage strategy:
- PostgreSQL: content text, one row per document (documents table)
- Graph database: everything else about the document (GraphDBService)

document_id is the graph Document id. The reference is not enforced by
either database; DocumentService keeps the two in step.
"""
import logging
from typing import Any, Dict, Optional
import asyncpg

from models.domain.document_content import DocumentContent

logger = logging.getLogger(__name__)

COLUMNS = "id, document_id, content, storage_key, created_at, updated_at"


class DocumentContentRepository:
    """
    Repository for DocumentContent rows

    Invariants:
    - at most one row per document_id (UNIQUE constraint)
    - storage_key == documents/{document_id}
    """

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    async def get_status(self) -> Dict[str, Any]:
        """
        Point-in-time connectivity check.

        Returns:
            {'connected': bool, 'error': Optional[str]}
        """
        if self.db_pool is None:
            return {'connected': False, 'error': 'Pool not initialized'}
        try:
            async with self.db_pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return {'connected': True}
        except Exception as e:
            return {'connected': False, 'error': str(e) or type(e).__name__}

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_document_id(self, document_id: str) -> Optional[DocumentContent]:
        """
        Retrieve the content row of a document.

        Args:
            document_id: Graph Document id

        Returns:
            DocumentContent or None
        """
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(f"""
                SELECT {COLUMNS}
                FROM documents
                WHERE document_id = $1
                LIMIT 1
            """, document_id)

        return DocumentContent.from_row(row) if row else None

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create(self, content: DocumentContent) -> DocumentContent:
        """
        Insert the content row for a document.

        created_at and updated_at are written from the model so they are
        equal on a fresh row.

        Raises:
            asyncpg.UniqueViolationError: the document already has content
        """
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(f"""
                INSERT INTO documents (id, document_id, content, storage_key, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING {COLUMNS}
            """, content.id, content.document_id, content.content, content.storage_key,
                content.created_at, content.updated_at)

        logger.debug(f"📝 Content stored for document {content.document_id} ({content.size_bytes} bytes)")
        return DocumentContent.from_row(row)

    async def update(self, document_id: str, content: str) -> Optional[DocumentContent]:
        """
        Replace content text and bump updated_at.

        Returns:
            Updated row, or None if the document has no content row
        """
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(f"""
                UPDATE documents
                SET content = $1, updated_at = NOW()
                WHERE document_id = $2
                RETURNING {COLUMNS}
            """, content, document_id)

        return DocumentContent.from_row(row) if row else None

    async def delete(self, document_id: str) -> bool:
        """
        Delete the content row of a document.

        Idempotent: deleting a missing row is not an error.

        Returns:
            True if a row was removed
        """
        async with self.db_pool.acquire() as conn:
            result = await conn.execute("""
                DELETE FROM documents
                WHERE document_id = $1
            """, document_id)

        # asyncpg returns the command tag, e.g. "DELETE 1"
        deleted = result.split()[-1] != '0'
        if not deleted:
            logger.debug(f"No content row to delete for document {document_id}")
        return deleted
