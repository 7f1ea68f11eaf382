"""
Tests for GraphDBService queries and parameters against a mocked neo4j session.
"""
import pytest

from conftest import DOC_ID, STAMP, make_node, neo4j_result
from models.domain.attachment import Attachment
from models.domain.graph_nodes import Concept, Page, Tag
from models.domain.relationships import RelationType


def document_record(**overrides) -> dict:
    record = {
        'id': DOC_ID, 'type': 'general', 'status': 'draft', 'title': 'Test Document',
        'lang': 'en', 'storage_key': f"documents/{DOC_ID}", 'tags': [],
        'created_at': STAMP, 'updated_at': STAMP,
    }
    record.update(overrides)
    return record


# =============================================================================
# Document nodes
# =============================================================================

@pytest.mark.asyncio
async def test_create_document_node_drops_unset_properties(graph_service, session):
    session.run.return_value = neo4j_result(single={'document': document_record(tags=['auth'])})
    node = make_node(tags=['auth'], version_id="v-1", summary=None, author=None)

    created = await graph_service.create_document_node(node)

    query, params = session.run.await_args.args
    assert 'summary' not in params['props']
    assert 'author' not in params['props']
    assert params['props']['id'] == DOC_ID
    assert params['props']['status'] == 'draft'
    assert params['tags'] == ['auth']
    assert params['version_id'] == "v-1"
    assert "MERGE (t:Tag {name: name})" in query
    assert "ON CREATE SET t.id = randomUUID()" in query
    assert "MERGE (d)-[:BELONGS_TO]->(v)" in query
    assert created.tags == ['auth']


@pytest.mark.asyncio
async def test_update_document_node_sends_patch(graph_service, session):
    session.run.return_value = neo4j_result(single={'document': document_record(title="Renamed")})

    node = await graph_service.update_document_node(DOC_ID, {'title': 'Renamed'})

    query, params = session.run.await_args.args
    assert params == {'id': DOC_ID, 'updates': {'title': 'Renamed'}}
    assert "SET d += $updates, d.updated_at = datetime()" in query
    assert node.title == "Renamed"


@pytest.mark.asyncio
async def test_update_missing_document_node(graph_service, session):
    session.run.return_value = neo4j_result(single=None)
    assert await graph_service.update_document_node(DOC_ID, {'title': 'x'}) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("record,expected", [({'deleted': 1}, True), ({'deleted': 0}, False), (None, False)])
async def test_delete_document_node(graph_service, session, record, expected):
    session.run.return_value = neo4j_result(single=record)

    assert await graph_service.delete_document_node(DOC_ID) is expected
    assert "DETACH DELETE d" in session.run.await_args.args[0]


@pytest.mark.asyncio
async def test_list_document_nodes_counts_then_pages(graph_service, session):
    session.run.side_effect = [
        neo4j_result(data=[{'total': 42}]),
        neo4j_result(data=[{'document': document_record()}]),
    ]

    nodes, total = await graph_service.list_document_nodes(status="draft", lang="en", limit=5, offset=10)

    assert total == 42
    assert [n.id for n in nodes] == [DOC_ID]
    count_call, page_call = session.run.await_args_list
    assert "count(d) AS total" in count_call.args[0]
    assert count_call.args[1] == {'status': 'draft', 'type': None, 'lang': 'en'}
    assert page_call.args[1]['limit'] == 5
    assert page_call.args[1]['offset'] == 10
    assert "SKIP $offset LIMIT $limit" in page_call.args[0]


# =============================================================================
# Concepts
# =============================================================================

@pytest.mark.asyncio
async def test_create_concept_node(graph_service, session):
    concept = Concept.new(term="Token", description="Bearer credential", lang="en")
    session.run.return_value = neo4j_result(single={'node': concept.to_properties()})

    created = await graph_service.create_concept_node(concept)

    query, params = session.run.await_args.args
    assert "CREATE (n:Concept)" in query
    assert params['props']['term'] == "Token"
    assert created.id == concept.id


@pytest.mark.asyncio
async def test_synonym_edge_is_matched_both_ways(graph_service, session):
    session.run.return_value = neo4j_result(single={'created': 1})
    assert await graph_service.create_concept_relationship("a", "b", RelationType.SYNONYM_OF)
    assert "(s)-[existing:SYNONYM_OF]-(t)" in session.run.await_args.args[0]

    session.run.return_value = neo4j_result(single={'deleted': 1})
    assert await graph_service.delete_concept_relationship("b", "a", RelationType.SYNONYM_OF)
    assert "[r:SYNONYM_OF]-(" in session.run.await_args.args[0]


@pytest.mark.asyncio
async def test_subtypes_follow_incoming_edges(graph_service, session):
    session.run.return_value = neo4j_result(data=[{'concept': {'id': 'child', 'term': 'JWT'}}])

    concepts = await graph_service.get_related_concepts("parent", RelationType.SUBTYPE_OF, incoming=True)

    assert "<-[:SUBTYPE_OF]-" in session.run.await_args.args[0]
    assert [c.term for c in concepts] == ['JWT']


@pytest.mark.asyncio
async def test_concept_relationship_rejects_document_edges(graph_service):
    with pytest.raises(ValueError):
        await graph_service.create_concept_relationship("a", "b", RelationType.LINKS_TO)


# =============================================================================
# Versions and pages
# =============================================================================

@pytest.mark.asyncio
async def test_list_versions_filters_public(graph_service, session):
    session.run.side_effect = [
        neo4j_result(data=[{'total': 1}]),
        neo4j_result(data=[{'node': {'id': 'v1', 'version': 'v1.0.0', 'name': 'First', 'is_public': True}}]),
    ]

    versions, total = await graph_service.list_version_nodes(is_public=True, limit=10, offset=0)

    assert total == 1
    assert versions[0].version == 'v1.0.0'
    assert versions[0].is_public
    assert session.run.await_args_list[0].args[1] == {'is_public': True}


@pytest.mark.asyncio
async def test_create_page_node_links_version_and_parent(graph_service, session):
    page = Page.new(slug="auth", title="Auth", version_id="v1", parent_page_id="p0")
    session.run.return_value = neo4j_result(single={'page': {**page.to_properties(), 'version_id': 'v1',
                                                             'parent_page_id': 'p0'}})

    created = await graph_service.create_page_node(page)

    query, params = session.run.await_args.args
    assert "MERGE (p)-[:IN_VERSION]->(v)" in query
    assert "MERGE (p)-[:CHILD_OF]->(parent)" in query
    assert params['version_id'] == "v1"
    assert params['parent_page_id'] == "p0"
    assert 'version_id' not in params['props']
    assert created.parent_page_id == "p0"


@pytest.mark.asyncio
async def test_create_page_node_without_version(graph_service, session):
    session.run.return_value = neo4j_result(single=None)
    with pytest.raises(ValueError):
        await graph_service.create_page_node(Page.new(slug="x", title="X", version_id="gone"))


# =============================================================================
# Tags
# =============================================================================

@pytest.mark.asyncio
async def test_tag_node_uses_label(graph_service, session):
    session.run.return_value = neo4j_result(single={'created': 1})

    assert await graph_service.tag_node("Concept", "c1", "t1")
    query, params = session.run.await_args.args
    assert "MATCH (n:Concept {id: $node_id})" in query
    assert params == {'node_id': 'c1', 'tag_id': 't1'}


@pytest.mark.asyncio
async def test_tag_node_rejects_other_labels(graph_service, session):
    with pytest.raises(ValueError):
        await graph_service.tag_node("Version", "v1", "t1")
    session.run.assert_not_awaited()


@pytest.mark.asyncio
async def test_find_tag_by_name(graph_service, session):
    tag = Tag.new("auth")
    session.run.return_value = neo4j_result(data=[{'node': tag.to_properties()}])

    found = await graph_service.find_tag_by_name("auth")

    assert found.id == tag.id
    assert session.run.await_args.args[1] == {'name': 'auth'}


# =============================================================================
# Attachments, search, stats
# =============================================================================

@pytest.mark.asyncio
async def test_create_attachment_node_links_document(graph_service, session):
    attachment = Attachment.create("spec.yaml", "application/yaml", b"openapi: 3.0.0", document_id=DOC_ID)
    session.run.return_value = neo4j_result(single={'attachment': {**attachment.to_properties(),
                                                                   'document_id': DOC_ID}})

    created = await graph_service.create_attachment_node(attachment)

    query, params = session.run.await_args.args
    assert "MERGE (d)-[:HAS_ATTACHMENT]->(a)" in query
    assert params['document_id'] == DOC_ID
    assert params['props']['attachment_type'] == 'oas'
    assert created.document_id == DOC_ID


@pytest.mark.asyncio
async def test_search_lowercases_query_and_passes_filters(graph_service, session):
    hit = {'document_id': DOC_ID, 'page_id': None, 'title': 'OAuth Guide', 'summary': None,
           'type': 'tutorial', 'relevance_score': 2.0, 'matched_fields': ['title']}
    session.run.side_effect = [neo4j_result(data=[{'total': 1}]), neo4j_result(data=[hit])]

    results, total = await graph_service.search_documents("OAuth", tags=['auth'], limit=5)

    assert total == 1
    assert results == [hit]
    params = session.run.await_args_list[1].args[1]
    assert params['q'] == 'oauth'
    assert params['tags'] == ['auth']
    assert params['version_id'] is None
    assert params['limit'] == 5


@pytest.mark.asyncio
async def test_graph_stats_sums_counts(graph_service, session):
    session.run.side_effect = [
        neo4j_result(data=[{'type': 'Document', 'count': 3}, {'type': 'Tag', 'count': 2}]),
        neo4j_result(data=[{'type': 'HAS_TAG', 'count': 4}]),
    ]

    stats = await graph_service.get_graph_stats()

    assert stats == {
        'total_nodes': 5,
        'total_edges': 4,
        'nodes_by_type': {'Document': 3, 'Tag': 2},
        'edges_by_type': {'HAS_TAG': 4},
    }
