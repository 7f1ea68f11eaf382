"""
Pytest configuration for backend tests.

Stores are replaced by AsyncMocks; nothing here needs a running
database, graph or object store.
"""
import os

# Settings read the environment once; test defaults must be in place first
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.database import GraphDBConfig
from models.domain.document import DocumentNode, DocumentStatus, DocumentType
from models.domain.document_content import DocumentContent
from repositories.document_content_repository import DocumentContentRepository
from services.document_service import DocumentService
from services.graphdb_service import GraphDBService
from services.storage_adapter import StorageAdapter

DOC_ID = "123e4567-e89b-12d3-a456-426614174000"
OTHER_ID = "9b2f0c1e-3d4a-4b5c-8d6e-7f8091a2b3c4"
STAMP = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


def make_node(document_id: str = DOC_ID, **overrides) -> DocumentNode:
    values = dict(
        id=document_id,
        type=DocumentType.GENERAL,
        status=DocumentStatus.DRAFT,
        title="Test Document",
        lang="en",
        created_at=STAMP,
        updated_at=STAMP,
    )
    values.update(overrides)
    return DocumentNode(**values)


def make_content(document_id: str = DOC_ID, content: str = "# Test") -> DocumentContent:
    return DocumentContent(
        id="0d6f1f3e-2a44-4e0b-9d55-2f1c3b4a5d6e",
        document_id=document_id,
        content=content,
        created_at=STAMP,
        updated_at=STAMP,
    )


@pytest.fixture
def graph():
    mock = AsyncMock(spec=GraphDBService)
    mock.get_document_node.return_value = make_node()
    mock.create_document_node.side_effect = lambda node: node
    mock.update_document_node.return_value = make_node()
    mock.delete_document_node.return_value = True
    mock.create_document_relationship.return_value = True
    mock.delete_document_relationship.return_value = True
    mock.get_related_documents.return_value = []
    return mock


@pytest.fixture
def contents():
    mock = AsyncMock(spec=DocumentContentRepository)
    mock.create.side_effect = lambda row: row
    mock.get_by_document_id.return_value = make_content()
    mock.update.side_effect = lambda document_id, text: make_content(document_id, text)
    mock.delete.return_value = True
    return mock


@pytest.fixture
def storage():
    mock = AsyncMock(spec=StorageAdapter)
    mock.upload.side_effect = lambda key, data, *args, **kwargs: key
    mock.exists.return_value = True
    mock.presign.return_value = "http://minio:9000/nallo-files/documents/x?X-Amz-Signature=abc"
    return mock


@pytest.fixture
def service(graph, contents, storage):
    return DocumentService(graph=graph, contents=contents, storage=storage, blob_threshold=1024)


# =============================================================================
# neo4j driver stand-ins
# =============================================================================

@pytest.fixture
def session():
    session = AsyncMock()
    session.run.return_value = AsyncMock()
    return session


@pytest.fixture
def graph_service(session):
    service = GraphDBService(GraphDBConfig(uri="bolt://graph:7687", user="neo4j", password="pw"))
    service.driver = MagicMock()
    service.driver.session.return_value.__aenter__.return_value = session
    return service


def neo4j_result(data=None, single=None) -> AsyncMock:
    """Stand-in for an AsyncResult: .data() rows or .single() record"""
    result = AsyncMock()
    result.data.return_value = data if data is not None else []
    result.single.return_value = single
    return result
