"""
Tests for DocumentService orchestration across graph, content and storage.
"""
import logging

import pytest

from conftest import DOC_ID, OTHER_ID, make_content, make_node
from models.api.document import DocumentCreate, DocumentQuery, DocumentUpdate
from models.domain.document import DocumentStatus, DocumentType
from models.domain.relationships import RelationType
from services.document_service import DocumentService
from utils.errors import (
    InvalidStatusTransitionError,
    NotFoundError,
    PartialWriteError,
    ValidationError,
)


def create_request(**overrides) -> DocumentCreate:
    values = dict(title="Test Document", type="general", content="# Test", lang="en")
    values.update(overrides)
    return DocumentCreate(**values)


# =============================================================================
# create / get
# =============================================================================

@pytest.mark.asyncio
async def test_create_writes_graph_then_content(service, graph, contents):
    document = await service.create(create_request(tags=["intro"]))

    node = graph.create_document_node.await_args.args[0]
    row = contents.create.await_args.args[0]
    assert node.status == DocumentStatus.DRAFT
    assert node.tags == ["intro"]
    assert row.document_id == node.id
    assert row.storage_key == f"documents/{node.id}"
    assert document.content == "# Test"


@pytest.mark.asyncio
async def test_create_then_get_returns_written_content(service, graph, contents):
    stored = {}

    async def remember(row):
        stored[row.document_id] = row
        return row

    async def lookup(document_id):
        return stored.get(document_id)

    contents.create.side_effect = remember
    contents.get_by_document_id.side_effect = lookup

    created = await service.create(create_request(content="# Hello\n\nWorld"))
    graph.get_document_node.return_value = created.node

    fetched = await service.get(created.id)
    assert fetched.content == "# Hello\n\nWorld"
    assert fetched.node.title == "Test Document"


@pytest.mark.asyncio
async def test_small_content_is_not_uploaded(service, storage):
    await service.create(create_request(content="short"))
    storage.upload.assert_not_awaited()


@pytest.mark.asyncio
async def test_small_create_does_not_touch_storage(service, storage):
    storage.delete.side_effect = ConnectionError("minio unreachable")
    storage.exists.side_effect = ConnectionError("minio unreachable")

    document = await service.create(create_request(content="short"))

    assert document.content == "short"
    storage.delete.assert_not_awaited()
    storage.exists.assert_not_awaited()


@pytest.mark.asyncio
async def test_large_upload_failure_is_partial_write(service, storage):
    storage.upload.side_effect = ConnectionError("minio unreachable at 10.0.0.5")

    with pytest.raises(PartialWriteError) as exc_info:
        await service.create(create_request(content="x" * 2048))

    details = exc_info.value.details
    assert details["written"] == ["graphdb", "postgresql"]
    assert details["failed"] == "storage"
    assert "cause" not in details
    assert isinstance(exc_info.value.cause, ConnectionError)


@pytest.mark.asyncio
async def test_large_content_is_mirrored_to_storage(service, storage):
    document = await service.create(create_request(content="x" * 2048))
    storage.upload.assert_awaited_once_with(f"documents/{document.id}", "x" * 2048)


@pytest.mark.asyncio
async def test_create_without_storage_adapter(graph, contents):
    service = DocumentService(graph=graph, contents=contents, storage=None, blob_threshold=1)
    document = await service.create(create_request())
    assert document.content == "# Test"


@pytest.mark.asyncio
async def test_content_failure_after_graph_write_is_reported_not_rolled_back(service, graph, contents):
    contents.create.side_effect = RuntimeError("connection reset")

    with pytest.raises(PartialWriteError) as exc_info:
        await service.create(create_request())

    details = exc_info.value.details
    assert details["written"] == ["graphdb"]
    assert details["failed"] == "postgresql"
    assert details["document_id"] == graph.create_document_node.await_args.args[0].id
    graph.delete_document_node.assert_not_awaited()


@pytest.mark.asyncio
async def test_graph_failure_on_create_writes_nothing_else(service, graph, contents):
    graph.create_document_node.side_effect = RuntimeError("graph down")

    with pytest.raises(RuntimeError):
        await service.create(create_request())
    contents.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_missing_document_raises_not_found(service, graph):
    graph.get_document_node.return_value = None
    with pytest.raises(NotFoundError):
        await service.get(DOC_ID)


@pytest.mark.asyncio
async def test_get_orphaned_metadata_returns_empty_content(service, contents):
    contents.get_by_document_id.return_value = None
    document = await service.get(DOC_ID)
    assert document.content == ""


# =============================================================================
# update
# =============================================================================

@pytest.mark.asyncio
async def test_update_title_only_leaves_content_alone(service, graph, contents):
    graph.update_document_node.return_value = make_node(title="Renamed")

    document = await service.update(DOC_ID, DocumentUpdate(title="Renamed"))

    graph.update_document_node.assert_awaited_once_with(DOC_ID, {'title': 'Renamed'})
    contents.update.assert_not_awaited()
    assert document.node.title == "Renamed"
    assert document.content == "# Test"


@pytest.mark.asyncio
async def test_update_content_bumps_node_and_row(service, graph, contents):
    document = await service.update(DOC_ID, DocumentUpdate(content="## New"))

    graph.update_document_node.assert_awaited_once_with(DOC_ID, {})
    contents.update.assert_awaited_once_with(DOC_ID, "## New")
    assert document.content == "## New"


@pytest.mark.asyncio
async def test_update_content_creates_missing_row(service, contents):
    contents.update.side_effect = None
    contents.update.return_value = None

    document = await service.update(DOC_ID, DocumentUpdate(content="first"))

    row = contents.create.await_args.args[0]
    assert row.storage_key == f"documents/{DOC_ID}"
    assert document.content == "first"


@pytest.mark.asyncio
async def test_update_shrinking_content_drops_blob(service, storage):
    await service.update(DOC_ID, DocumentUpdate(content="tiny"))
    storage.exists.assert_awaited_once_with(f"documents/{DOC_ID}")
    storage.delete.assert_awaited_once_with(f"documents/{DOC_ID}")


@pytest.mark.asyncio
async def test_update_small_content_without_blob_skips_delete(service, storage):
    storage.exists.return_value = False
    await service.update(DOC_ID, DocumentUpdate(content="tiny"))
    storage.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_small_content_survives_storage_outage(service, storage):
    storage.exists.side_effect = ConnectionError("minio unreachable")

    document = await service.update(DOC_ID, DocumentUpdate(content="tiny"))

    assert document.content == "tiny"
    storage.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_stale_blob_delete_failure_is_only_logged(service, storage, caplog):
    storage.delete.side_effect = ConnectionError("minio unreachable")

    with caplog.at_level(logging.WARNING, logger="services.document_service"):
        document = await service.update(DOC_ID, DocumentUpdate(content="tiny"))

    assert document.content == "tiny"
    assert any(f"documents/{DOC_ID}" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_valid_status_transition(service, graph):
    await service.update(DOC_ID, DocumentUpdate(status=DocumentStatus.IN_REVIEW))
    graph.update_document_node.assert_awaited_once_with(DOC_ID, {'status': 'in_review'})


@pytest.mark.asyncio
async def test_invalid_status_transition(service, graph):
    with pytest.raises(InvalidStatusTransitionError):
        await service.update(DOC_ID, DocumentUpdate(status=DocumentStatus.PUBLISH))
    graph.update_document_node.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_missing_document(service, graph):
    graph.get_document_node.return_value = None
    with pytest.raises(NotFoundError):
        await service.update(DOC_ID, DocumentUpdate(title="x"))


@pytest.mark.asyncio
async def test_content_failure_after_metadata_update(service, contents):
    contents.update.side_effect = RuntimeError("disk full")

    with pytest.raises(PartialWriteError) as exc_info:
        await service.update(DOC_ID, DocumentUpdate(title="t", content="c"))
    assert exc_info.value.details["written"] == ["graphdb"]


# =============================================================================
# delete / list
# =============================================================================

@pytest.mark.asyncio
async def test_delete_removes_content_blob_then_node(service, graph, contents, storage):
    await service.delete(DOC_ID)

    contents.delete.assert_awaited_once_with(DOC_ID)
    storage.delete.assert_awaited_once_with(f"documents/{DOC_ID}")
    graph.delete_document_node.assert_awaited_once_with(DOC_ID)


@pytest.mark.asyncio
async def test_delete_with_content_already_gone(service, graph, contents):
    contents.delete.return_value = False
    await service.delete(DOC_ID)
    graph.delete_document_node.assert_awaited_once_with(DOC_ID)


@pytest.mark.asyncio
async def test_delete_graph_failure_reports_partial_write(service, graph):
    graph.delete_document_node.side_effect = RuntimeError("graph down")

    with pytest.raises(PartialWriteError) as exc_info:
        await service.delete(DOC_ID)
    assert exc_info.value.details["written"] == ["postgresql", "storage"]
    assert exc_info.value.details["failed"] == "graphdb"


@pytest.mark.asyncio
async def test_delete_finishes_when_storage_is_down(service, graph, storage):
    storage.exists.side_effect = ConnectionError("minio unreachable")

    await service.delete(DOC_ID)

    graph.delete_document_node.assert_awaited_once_with(DOC_ID)


@pytest.mark.asyncio
async def test_delete_without_blob_skips_storage_delete(service, storage):
    storage.exists.return_value = False
    await service.delete(DOC_ID)
    storage.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_missing_document(service, graph, contents):
    graph.get_document_node.return_value = None
    with pytest.raises(NotFoundError):
        await service.delete(DOC_ID)
    contents.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_passes_filters_and_joins_content(service, graph):
    graph.list_document_nodes.return_value = ([make_node(), make_node(OTHER_ID)], 7)

    documents, total = await service.list(
        DocumentQuery(status="draft", type=DocumentType.API, lang="en", limit=2, offset=4)
    )

    graph.list_document_nodes.assert_awaited_once_with(
        status="draft", type="api", lang="en", limit=2, offset=4
    )
    assert total == 7
    assert [d.id for d in documents] == [DOC_ID, OTHER_ID]
    assert all(d.content == "# Test" for d in documents)


# =============================================================================
# relationships
# =============================================================================

@pytest.mark.asyncio
async def test_link_documents(service, graph):
    await service.link(DOC_ID, OTHER_ID)
    graph.create_document_relationship.assert_awaited_once_with(DOC_ID, OTHER_ID, RelationType.LINKS_TO)


@pytest.mark.asyncio
async def test_link_to_self_is_rejected(service, graph):
    with pytest.raises(ValidationError):
        await service.link(DOC_ID, DOC_ID)
    graph.create_document_relationship.assert_not_awaited()


@pytest.mark.asyncio
async def test_link_to_missing_target(service, graph):
    graph.get_document_node.side_effect = lambda document_id: make_node() if document_id == DOC_ID else None
    with pytest.raises(NotFoundError):
        await service.link(DOC_ID, OTHER_ID)


@pytest.mark.asyncio
async def test_unlink_missing_link(service, graph):
    graph.delete_document_relationship.return_value = False
    with pytest.raises(NotFoundError):
        await service.unlink(DOC_ID, OTHER_ID)


@pytest.mark.asyncio
async def test_backlinks_follow_incoming_edges(service, graph):
    graph.get_related_documents.return_value = [make_node(OTHER_ID)]

    documents = await service.get_backlinks(DOC_ID)

    graph.get_related_documents.assert_awaited_once_with(DOC_ID, RelationType.LINKS_TO, incoming=True)
    assert [d.id for d in documents] == [OTHER_ID]


@pytest.mark.asyncio
async def test_working_copy_round(service, graph):
    await service.create_working_copy(OTHER_ID, DOC_ID)
    graph.create_document_relationship.assert_awaited_once_with(OTHER_ID, DOC_ID, RelationType.WORKING_COPY_OF)

    graph.get_related_documents.return_value = [make_node(DOC_ID, status=DocumentStatus.PUBLISH)]
    original = await service.get_original(OTHER_ID)
    assert original.id == DOC_ID


@pytest.mark.asyncio
async def test_get_original_when_not_a_copy(service, graph):
    graph.get_related_documents.return_value = []
    assert await service.get_original(DOC_ID) is None


@pytest.mark.asyncio
async def test_attach_unknown_concept(service, graph):
    graph.attach_concept.return_value = False
    with pytest.raises(NotFoundError):
        await service.attach_concept(DOC_ID, "concept-1")


@pytest.mark.asyncio
async def test_context_skips_empty_optional_matches(service, graph):
    graph.get_document_context.return_value = {
        'tags': ['b', 'a'],
        'concepts': [{'id': 'c1', 'term': 'Token', 'description': None}, {'id': None}],
        'version': {'id': None, 'name': None},
        'pages': [{'id': 'p1', 'slug': 'auth', 'title': 'Auth'}],
    }

    context = await service.get_context(DOC_ID)

    assert context['tags'] == ['a', 'b']
    assert [c.term for c in context['concepts']] == ['Token']
    assert context['version'] is None
    assert context['pages'][0].slug == 'auth'


@pytest.mark.asyncio
async def test_content_url_is_presigned(service, storage):
    url = await service.get_content_url(DOC_ID, expires_in=600)
    storage.presign.assert_awaited_once_with(f"documents/{DOC_ID}", expires_in=600)
    assert url.startswith("http://minio:9000/")


@pytest.mark.asyncio
async def test_content_url_without_blob(service, storage):
    storage.exists.return_value = False
    with pytest.raises(NotFoundError):
        await service.get_content_url(DOC_ID)


def test_make_content_helper_matches_key_invariant():
    assert make_content("abc").storage_key == "documents/abc"
