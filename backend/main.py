"""
Nallo Docs - FastAPI Backend

Document metadata lives in the graph database, content in PostgreSQL and
large content blobs in object storage. See services/document_service.py.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import attachments, concepts, documents, health, pages, search, tags, versions
from config import create_postgres_pool, create_storage_adapter, get_settings, setup_logging
from config.database import GraphDBConfig
from middleware.error_handler import register_error_handlers
from middleware.request_logging import log_requests
from repositories.document_content_repository import DocumentContentRepository
from services.attachment_service import AttachmentService
from services.concept_service import ConceptService
from services.document_service import DocumentService
from services.graphdb_service import GraphDBService
from services.health_service import HealthService
from services.page_service import PageService
from services.search_service import SearchService
from services.tag_service import TagService
from services.version_service import VersionService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open store connections on startup, close them on shutdown.

    A store that cannot be reached is logged and left disconnected:
    /health reports it and routes needing it answer 503 until restart.
    Concepts, versions, pages, tags and search only need the graph;
    attachments need the graph and object storage.
    """
    settings = get_settings()

    graph = GraphDBService(GraphDBConfig.from_settings(settings))
    try:
        await graph.connect()
    except Exception as e:
        logger.error(f"❌ GraphDB unavailable at {settings.graphdb_uri}: {e}")

    pool = None
    try:
        pool = await create_postgres_pool(settings)
        logger.info(f"✅ Connected to PostgreSQL at {settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    except Exception as e:
        logger.error(f"❌ PostgreSQL unavailable at {settings.postgres_host}:{settings.postgres_port}: {e}")

    storage = None
    try:
        storage = await create_storage_adapter(settings)
    except Exception as e:
        logger.warning(f"⚠️  Object storage unavailable, large content stays in PostgreSQL only: {e}")

    contents = DocumentContentRepository(pool)
    app.state.health_service = HealthService(graph.get_status, contents.get_status)
    if graph.driver is not None:
        app.state.graph_service = graph
        app.state.concept_service = ConceptService(graph)
        app.state.version_service = VersionService(graph)
        app.state.page_service = PageService(graph)
        app.state.tag_service = TagService(graph)
        app.state.search_service = SearchService(graph)
        if storage is not None:
            app.state.attachment_service = AttachmentService(graph, storage)
    if graph.driver is not None and pool is not None:
        app.state.document_service = DocumentService(
            graph=graph,
            contents=contents,
            storage=storage,
            blob_threshold=settings.storage_blob_threshold,
        )
    logger.info("Application initialized")

    yield

    logger.info("Shutting down application...")
    if pool is not None:
        await pool.close()
    await graph.close()
    logger.info("Application shut down")


def create_app(use_lifespan: bool = True) -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Nallo Docs",
        description="Documentation management API: graph metadata, relational content, object storage blobs",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    register_error_handlers(app)

    # Health (no prefix, no authentication)
    app.include_router(health.router)
    for router in (
        documents.router,
        concepts.router,
        versions.router,
        pages.router,
        tags.router,
        tags.entity_router,
        attachments.router,
        search.router,
    ):
        app.include_router(router, prefix=settings.api_v1_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().port)
