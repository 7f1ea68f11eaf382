"""
FastAPI dependencies

Services are built once in the app lifespan and kept on app.state.
Tests swap them through app.dependency_overrides.
"""
from typing import Optional

from fastapi import Request

from services.attachment_service import AttachmentService
from services.concept_service import ConceptService
from services.document_service import DocumentService
from services.graphdb_service import GraphDBService
from services.health_service import HealthService
from services.page_service import PageService
from services.search_service import SearchService
from services.tag_service import TagService
from services.version_service import VersionService
from utils.errors import AppError, ErrorCode


def _from_state(request: Request, name: str, stores: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise AppError(ErrorCode.SERVICE_UNAVAILABLE, f"{stores} not available", 503)
    return service


def get_document_service(request: Request) -> DocumentService:
    return _from_state(request, "document_service", "Document stores are")


def get_concept_service(request: Request) -> ConceptService:
    return _from_state(request, "concept_service", "Graph database is")


def get_version_service(request: Request) -> VersionService:
    return _from_state(request, "version_service", "Graph database is")


def get_page_service(request: Request) -> PageService:
    return _from_state(request, "page_service", "Graph database is")


def get_tag_service(request: Request) -> TagService:
    return _from_state(request, "tag_service", "Graph database is")


def get_search_service(request: Request) -> SearchService:
    return _from_state(request, "search_service", "Graph database is")


def get_graphdb_service(request: Request) -> GraphDBService:
    return _from_state(request, "graph_service", "Graph database is")


def get_attachment_service(request: Request) -> AttachmentService:
    return _from_state(request, "attachment_service", "Attachment stores are")


def get_health_service(request: Request) -> Optional[HealthService]:
    # None while the stores were never initialised; /health still answers 503
    return getattr(request.app.state, "health_service", None)
