"""
Tags API
========

Endpoints:
- POST   /tags                  - create (201, 409 on duplicate name)
- GET    /tags                  - list (search by name + paginate)
- GET    /tags/{id}             - get
- PUT    /tags/{id}             - partial update
- DELETE /tags/{id}             - delete (204), removes it everywhere
- GET    /tags/{id}/entities    - documents, concepts and pages carrying the tag

Tagging, for {collection} in documents, concepts, pages:
- POST   /{collection}/{id}/tags            - {tag_id} (201)
- GET    /{collection}/{id}/tags
- DELETE /{collection}/{id}/tags/{tag_id}
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from api.dependencies import get_tag_service
from models.api.tag import (
    TagAssign,
    TagCreate,
    TaggedEntitiesResponse,
    TaggedEntity,
    TagListResponse,
    TagQuery,
    TagResponse,
    TagUpdate,
)
from services.tag_service import TagService

router = APIRouter(prefix="/tags", tags=["Tags"])
entity_router = APIRouter(tags=["Tags"])

Service = Annotated[TagService, Depends(get_tag_service)]

TAGGABLE_COLLECTIONS = {
    "documents": "Document",
    "concepts": "Concept",
    "pages": "Page",
}


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(body: TagCreate, service: Service):
    return TagResponse.from_tag(await service.create(body))


@router.get("", response_model=TagListResponse)
async def list_tags(query: Annotated[TagQuery, Query()], service: Service):
    tags, total = await service.list(query)
    return TagListResponse(
        items=[TagResponse.from_tag(t) for t in tags],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(tag_id: str, service: Service):
    return TagResponse.from_tag(await service.get(tag_id))


@router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(tag_id: str, body: TagUpdate, service: Service):
    return TagResponse.from_tag(await service.update(tag_id, body))


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(tag_id: str, service: Service):
    await service.delete(tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{tag_id}/entities", response_model=TaggedEntitiesResponse)
async def get_tagged_entities(tag_id: str, service: Service):
    items = [TaggedEntity(**row) for row in await service.get_tagged(tag_id)]
    return TaggedEntitiesResponse(tag_id=tag_id, items=items, total=len(items))


def _add_entity_tag_routes(collection: str, label: str) -> None:

    @entity_router.post(f"/{collection}/{{node_id}}/tags", status_code=status.HTTP_201_CREATED,
                        name=f"tag_{collection}")
    async def add_tag(node_id: str, body: TagAssign, service: Service):
        await service.add(label, node_id, body.tag_id)
        return {"message": f"Tag added to {label.lower()}"}

    @entity_router.get(f"/{collection}/{{node_id}}/tags", response_model=TagListResponse,
                       name=f"list_{collection}_tags")
    async def list_entity_tags(node_id: str, service: Service):
        tags = await service.tags_of(label, node_id)
        return TagListResponse(items=[TagResponse.from_tag(t) for t in tags], total=len(tags),
                               limit=len(tags), offset=0)

    @entity_router.delete(f"/{collection}/{{node_id}}/tags/{{tag_id}}", status_code=status.HTTP_204_NO_CONTENT,
                          name=f"untag_{collection}")
    async def remove_tag(node_id: str, tag_id: str, service: Service):
        await service.remove(label, node_id, tag_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


for _collection, _label in TAGGABLE_COLLECTIONS.items():
    _add_entity_tag_routes(_collection, _label)
