"""
Versions API
============

Endpoints:
- POST   /versions                  - create (201, 409 on duplicate label)
- GET    /versions                  - list (is_public filter + paginate)
- GET    /versions/{id}             - get
- PUT    /versions/{id}             - partial update
- DELETE /versions/{id}             - delete (204)
- GET    /versions/{id}/navigation  - tree of visible pages
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from api.dependencies import get_version_service
from models.api.version import (
    NavigationNode,
    NavigationResponse,
    VersionCreate,
    VersionListResponse,
    VersionQuery,
    VersionResponse,
    VersionUpdate,
)
from services.version_service import VersionService

router = APIRouter(prefix="/versions", tags=["Versions"])

Service = Annotated[VersionService, Depends(get_version_service)]


@router.post("", response_model=VersionResponse, status_code=status.HTTP_201_CREATED)
async def create_version(body: VersionCreate, service: Service):
    return VersionResponse.from_version(await service.create(body))


@router.get("", response_model=VersionListResponse)
async def list_versions(query: Annotated[VersionQuery, Query()], service: Service):
    versions, total = await service.list(query)
    return VersionListResponse(
        items=[VersionResponse.from_version(v) for v in versions],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/{version_id}", response_model=VersionResponse)
async def get_version(version_id: str, service: Service):
    return VersionResponse.from_version(await service.get(version_id))


@router.put("/{version_id}", response_model=VersionResponse)
async def update_version(version_id: str, body: VersionUpdate, service: Service):
    return VersionResponse.from_version(await service.update(version_id, body))


@router.delete("/{version_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_version(version_id: str, service: Service):
    await service.delete(version_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{version_id}/navigation", response_model=NavigationResponse)
async def get_navigation(version_id: str, service: Service):
    items = await service.get_navigation(version_id)
    return NavigationResponse(version_id=version_id, items=[NavigationNode.from_item(i) for i in items])
