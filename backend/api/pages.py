"""
Pages API
=========

Endpoints:
- POST   /pages                             - create in a version (201)
- GET    /pages                             - list (version_id, visible filters + paginate)
- GET    /pages/{id}                        - get
- PUT    /pages/{id}                        - partial update, may move the page
- DELETE /pages/{id}                        - delete (204)
- POST   /pages/{id}/documents              - display a document on the page (201)
- DELETE /pages/{id}/documents/{document_id}
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from api.dependencies import get_page_service
from models.api.page import (
    PageCreate,
    PageDocumentLink,
    PageDocumentResponse,
    PageListResponse,
    PageQuery,
    PageResponse,
    PageUpdate,
)
from services.page_service import PageService

router = APIRouter(prefix="/pages", tags=["Pages"])

Service = Annotated[PageService, Depends(get_page_service)]


@router.post("", response_model=PageResponse, status_code=status.HTTP_201_CREATED)
async def create_page(body: PageCreate, service: Service):
    return PageResponse.from_page(await service.create(body))


@router.get("", response_model=PageListResponse)
async def list_pages(query: Annotated[PageQuery, Query()], service: Service):
    pages, total = await service.list(query)
    return PageListResponse(
        items=[PageResponse.from_page(p) for p in pages],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/{page_id}", response_model=PageResponse)
async def get_page(page_id: str, service: Service):
    return PageResponse.from_page(await service.get(page_id))


@router.put("/{page_id}", response_model=PageResponse)
async def update_page(page_id: str, body: PageUpdate, service: Service):
    return PageResponse.from_page(await service.update(page_id, body))


@router.delete("/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_page(page_id: str, service: Service):
    await service.delete(page_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{page_id}/documents", response_model=PageDocumentResponse, status_code=status.HTTP_201_CREATED)
async def link_page_document(page_id: str, body: PageDocumentLink, service: Service):
    await service.link_document(page_id, body.document_id)
    return PageDocumentResponse(page_id=page_id, document_id=body.document_id)


@router.delete("/{page_id}/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unlink_page_document(page_id: str, document_id: str, service: Service):
    await service.unlink_document(page_id, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
