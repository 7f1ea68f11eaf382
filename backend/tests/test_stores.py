"""
Tests for the store adapters with mocked drivers: asyncpg pool,
neo4j driver and boto3 client.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from config.database import GraphDBConfig, StorageConfig
from conftest import DOC_ID, STAMP
from models.domain.document_content import DocumentContent
from models.domain.relationships import RelationType
from repositories.document_content_repository import DocumentContentRepository
from services.graphdb_service import GraphDBService
from services.storage_adapter import StorageAdapter


def client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({'Error': {'Code': code, 'Message': code}}, operation)


# =============================================================================
# DocumentContentRepository
# =============================================================================

@pytest.fixture
def conn():
    return AsyncMock()


@pytest.fixture
def repository(conn):
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = conn
    return DocumentContentRepository(pool)


def content_row(content: str = "# Test") -> dict:
    return {
        'id': '0d6f1f3e-2a44-4e0b-9d55-2f1c3b4a5d6e',
        'document_id': DOC_ID,
        'content': content,
        'storage_key': f'documents/{DOC_ID}',
        'created_at': STAMP,
        'updated_at': STAMP,
    }


@pytest.mark.asyncio
async def test_repository_create_writes_equal_timestamps(repository, conn):
    conn.fetchrow.return_value = content_row()
    row = DocumentContent.create(DOC_ID, "# Test")

    created = await repository.create(row)

    args = conn.fetchrow.await_args.args
    assert args[1:] == (row.id, DOC_ID, "# Test", f"documents/{DOC_ID}", row.created_at, row.created_at)
    assert created.storage_key == f"documents/{DOC_ID}"


@pytest.mark.asyncio
async def test_repository_get_missing(repository, conn):
    conn.fetchrow.return_value = None
    assert await repository.get_by_document_id(DOC_ID) is None


@pytest.mark.asyncio
async def test_repository_update_missing_row(repository, conn):
    conn.fetchrow.return_value = None
    assert await repository.update(DOC_ID, "new") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("tag,expected", [("DELETE 1", True), ("DELETE 0", False)])
async def test_repository_delete_is_idempotent(repository, conn, tag, expected):
    conn.execute.return_value = tag
    assert await repository.delete(DOC_ID) is expected


@pytest.mark.asyncio
async def test_repository_status(repository, conn):
    assert await repository.get_status() == {'connected': True}

    conn.fetchval.side_effect = ConnectionRefusedError("Connection refused")
    assert await repository.get_status() == {'connected': False, 'error': 'Connection refused'}


@pytest.mark.asyncio
async def test_repository_status_without_pool():
    status = await DocumentContentRepository(None).get_status()
    assert status == {'connected': False, 'error': 'Pool not initialized'}


# =============================================================================
# StorageAdapter
# =============================================================================

@pytest.fixture
def s3():
    return MagicMock()


@pytest.fixture
def adapter(s3):
    config = StorageConfig(
        endpoint="minio", port=9000, use_ssl=False,
        access_key="key", secret_key="secret", bucket="nallo-files",
    )
    return StorageAdapter(config, client=s3)


@pytest.mark.asyncio
async def test_upload_encodes_text(adapter, s3):
    key = await adapter.upload(f"documents/{DOC_ID}", "héllo")

    assert key == f"documents/{DOC_ID}"
    kwargs = s3.put_object.call_args.kwargs
    assert kwargs['Bucket'] == "nallo-files"
    assert kwargs['Body'] == "héllo".encode('utf-8')


@pytest.mark.asyncio
async def test_download(adapter, s3):
    s3.get_object.return_value = {'Body': MagicMock(read=MagicMock(return_value=b"data"))}
    assert await adapter.download("documents/x") == b"data"


@pytest.mark.asyncio
async def test_delete_missing_object_is_ignored(adapter, s3):
    s3.delete_object.side_effect = client_error("NoSuchKey", "DeleteObject")
    await adapter.delete("documents/x")


@pytest.mark.asyncio
async def test_delete_propagates_other_errors(adapter, s3):
    s3.delete_object.side_effect = client_error("AccessDenied", "DeleteObject")
    with pytest.raises(ClientError):
        await adapter.delete("documents/x")


@pytest.mark.asyncio
async def test_exists(adapter, s3):
    assert await adapter.exists("documents/x")

    s3.head_object.side_effect = client_error("404")
    assert not await adapter.exists("documents/x")


@pytest.mark.asyncio
async def test_ensure_bucket_creates_missing_bucket(adapter, s3):
    s3.head_bucket.side_effect = client_error("404", "HeadBucket")
    await adapter.ensure_bucket()
    s3.create_bucket.assert_called_once_with(Bucket="nallo-files")


@pytest.mark.asyncio
async def test_presign(adapter, s3):
    s3.generate_presigned_url.return_value = "http://minio:9000/nallo-files/documents/x?sig"

    url = await adapter.presign("documents/x", expires_in=60)

    assert url.endswith("?sig")
    s3.generate_presigned_url.assert_called_once_with(
        'get_object', Params={'Bucket': 'nallo-files', 'Key': 'documents/x'}, ExpiresIn=60
    )


def test_storage_endpoint_url():
    config = StorageConfig("minio", 9000, True, "k", "s", "b")
    assert config.endpoint_url == "https://minio:9000"
    config.endpoint = "http://localhost:9000"
    assert config.endpoint_url == "http://localhost:9000"


# =============================================================================
# GraphDBService
# =============================================================================

@pytest.mark.asyncio
async def test_graph_status_without_driver():
    service = GraphDBService(GraphDBConfig(uri="bolt://graph:7687", user="neo4j", password="pw"))
    assert await service.get_status() == {'connected': False, 'error': 'Driver not initialized'}


@pytest.mark.asyncio
async def test_graph_status(graph_service, session):
    assert await graph_service.get_status() == {'connected': True}

    session.run.side_effect = OSError("Connection refused")
    assert await graph_service.get_status() == {'connected': False, 'error': 'Connection refused'}


@pytest.mark.asyncio
async def test_get_document_node(graph_service, session):
    session.run.return_value.data.return_value = [{'document': {
        'id': DOC_ID, 'type': 'api', 'status': 'done', 'title': 'Auth',
        'lang': 'en', 'tags': ['auth'], 'created_at': STAMP, 'updated_at': STAMP,
    }}]

    node = await graph_service.get_document_node(DOC_ID)

    assert node.id == DOC_ID
    assert node.tags == ['auth']
    assert node.storage_key == f"documents/{DOC_ID}"
    assert session.run.await_args.args[1] == {'id': DOC_ID}


@pytest.mark.asyncio
async def test_get_missing_document_node(graph_service, session):
    session.run.return_value.data.return_value = []
    assert await graph_service.get_document_node(DOC_ID) is None


@pytest.mark.asyncio
async def test_document_relationship_uses_edge_type(graph_service, session):
    session.run.return_value.single.return_value = {'created': 1}

    assert await graph_service.create_document_relationship("a", "b", RelationType.WORKING_COPY_OF)
    assert "WORKING_COPY_OF" in session.run.await_args.args[0]


@pytest.mark.asyncio
async def test_document_relationship_rejects_other_edges(graph_service):
    with pytest.raises(ValueError):
        await graph_service.create_document_relationship("a", "b", RelationType.HAS_TAG)


@pytest.mark.asyncio
async def test_delete_missing_relationship(graph_service, session):
    session.run.return_value.single.return_value = {'deleted': 0}
    assert not await graph_service.delete_document_relationship("a", "b", RelationType.LINKS_TO)
