"""
Documents API
=============

REST endpoints for documents. Mounted under API_V1_PREFIX.

Endpoints:
- POST   /documents                                - create (201)
- GET    /documents                                - list (filter + paginate)
- GET    /documents/{id}                           - get with content
- PUT    /documents/{id}                           - partial update
- DELETE /documents/{id}                           - delete (204)
- POST   /documents/{id}/links                     - link to another document
- GET    /documents/{id}/links                     - outgoing links
- DELETE /documents/{id}/links/{target_id}         - unlink
- GET    /documents/{id}/backlinks                 - incoming links
- POST   /documents/{id}/working-copy              - mark as working copy of original_id
- GET    /documents/{id}/original                  - original of a working copy
- GET    /documents/{id}/working-copies            - working copies of a document
- DELETE /documents/{id}/working-copy/{original_id}
- POST   /documents/{id}/concepts                  - attach a concept
- DELETE /documents/{id}/concepts/{concept_id}
- GET    /documents/{id}/context                   - tags, concepts, version, pages
- GET    /documents/{id}/content-url               - presigned URL of the content blob
"""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from api.dependencies import get_document_service
from models.api.document import (
    ConceptAttach,
    ContentUrlResponse,
    DocumentContextResponse,
    DocumentCreate,
    DocumentListResponse,
    DocumentQuery,
    DocumentResponse,
    DocumentUpdate,
    LinkCreate,
    OriginalDocumentResponse,
    RelatedDocumentsResponse,
    WorkingCopyCreate,
)
from services.document_service import DocumentService
from utils.errors import ValidationError
from utils.id_generator import is_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])

Service = Annotated[DocumentService, Depends(get_document_service)]


def _check_id(*ids: str) -> None:
    for document_id in ids:
        if not is_uuid(document_id):
            raise ValidationError("Invalid UUID format", {'id': document_id})


def _related(documents) -> RelatedDocumentsResponse:
    items = [DocumentResponse.from_document(d) for d in documents]
    return RelatedDocumentsResponse(items=items, total=len(items))


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(body: DocumentCreate, service: Service):
    document = await service.create(body)
    logger.info(f"Document created via API: {document.id}")
    return DocumentResponse.from_document(document)


@router.get("", response_model=DocumentListResponse)
async def list_documents(query: Annotated[DocumentQuery, Query()], service: Service):
    documents, total = await service.list(query)
    return DocumentListResponse(
        items=[DocumentResponse.from_document(d) for d in documents],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str, service: Service):
    _check_id(document_id)
    return DocumentResponse.from_document(await service.get(document_id))


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(document_id: str, body: DocumentUpdate, service: Service):
    _check_id(document_id)
    document = await service.update(document_id, body)
    logger.info(f"Document updated via API: {document_id}")
    return DocumentResponse.from_document(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(document_id: str, service: Service):
    _check_id(document_id)
    await service.delete(document_id)
    logger.info(f"Document deleted via API: {document_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# DOCUMENT RELATIONSHIPS (LINKS_TO, WORKING_COPY_OF)
# ============================================================================

@router.post("/{document_id}/links", status_code=status.HTTP_201_CREATED)
async def link_document(document_id: str, body: LinkCreate, service: Service):
    _check_id(document_id, body.target_id)
    await service.link(document_id, body.target_id)
    return {"message": "Document linked"}


@router.get("/{document_id}/links", response_model=RelatedDocumentsResponse)
async def get_links(document_id: str, service: Service):
    _check_id(document_id)
    return _related(await service.get_links(document_id))


@router.delete("/{document_id}/links/{target_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unlink_document(document_id: str, target_id: str, service: Service):
    _check_id(document_id, target_id)
    await service.unlink(document_id, target_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{document_id}/backlinks", response_model=RelatedDocumentsResponse)
async def get_backlinks(document_id: str, service: Service):
    _check_id(document_id)
    return _related(await service.get_backlinks(document_id))


@router.post("/{document_id}/working-copy", status_code=status.HTTP_201_CREATED)
async def create_working_copy(document_id: str, body: WorkingCopyCreate, service: Service):
    _check_id(document_id, body.original_id)
    await service.create_working_copy(document_id, body.original_id)
    return {"message": "Working copy relationship created"}


@router.get("/{document_id}/original", response_model=OriginalDocumentResponse)
async def get_original(document_id: str, service: Service):
    _check_id(document_id)
    original = await service.get_original(document_id)
    return OriginalDocumentResponse(original=DocumentResponse.from_document(original) if original else None)


@router.delete("/{document_id}/working-copy/{original_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_working_copy(document_id: str, original_id: str, service: Service):
    _check_id(document_id, original_id)
    await service.remove_working_copy(document_id, original_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{document_id}/working-copies", response_model=RelatedDocumentsResponse)
async def get_working_copies(document_id: str, service: Service):
    _check_id(document_id)
    return _related(await service.get_working_copies(document_id))


# ============================================================================
# GRAPH NEIGHBOURHOOD
# ============================================================================

@router.post("/{document_id}/concepts", status_code=status.HTTP_201_CREATED)
async def attach_concept(document_id: str, body: ConceptAttach, service: Service):
    _check_id(document_id)
    await service.attach_concept(document_id, body.concept_id)
    return {"message": "Concept attached"}


@router.delete("/{document_id}/concepts/{concept_id}", status_code=status.HTTP_204_NO_CONTENT)
async def detach_concept(document_id: str, concept_id: str, service: Service):
    _check_id(document_id)
    await service.detach_concept(document_id, concept_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{document_id}/context", response_model=DocumentContextResponse)
async def get_context(document_id: str, service: Service):
    _check_id(document_id)
    context = await service.get_context(document_id)
    return DocumentContextResponse.build(document_id=document_id, **context)


@router.get("/{document_id}/content-url", response_model=ContentUrlResponse)
async def get_content_url(
    document_id: str,
    service: Service,
    expires_in: int = Query(3600, ge=60, le=7 * 24 * 3600),
):
    _check_id(document_id)
    url = await service.get_content_url(document_id, expires_in=expires_in)
    return ContentUrlResponse(url=url, expires_in=expires_in)
