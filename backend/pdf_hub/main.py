"""FastAPI application entry point.

Run with ``pdf-hub`` or ``uvicorn pdf_hub.main:create_app --factory``.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from pdf_hub.config import Settings, settings
from pdf_hub.errors import PdfHubError
from pdf_hub.logging_config import configure_logging
from pdf_hub.middleware import RequestSizeLimitMiddleware
from pdf_hub.routes.pdfs import router as pdfs_router
from pdf_hub.schemas.responses import HealthResponse
from pdf_hub.services.blob_store import BlobStore
from pdf_hub.services.catalog import Catalog

logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the app and the catalog and blob store it owns."""
    app_settings = app_settings or settings

    blob_store = BlobStore(app_settings.UPLOAD_DIR, max_bytes=app_settings.MAX_UPLOAD_BYTES)
    catalog = Catalog(app_settings.CATALOG_PATH, app_settings.initial_categories)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Clear interrupted uploads and restore the catalog snapshot on startup."""
        blob_store.purge_incoming()
        await catalog.load()
        logger.info(f"PDF hub listening on http://{app_settings.API_HOST}:{app_settings.API_PORT}")
        logger.info(f"Upload directory: {blob_store.root.resolve()}")
        yield

    app = FastAPI(
        title="PDF Hub API",
        version="1.0.0",
        description="Upload, list and delete categorised PDF files.",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.catalog = catalog
    app.state.blob_store = blob_store

    # CORS
    origins = [o.strip() for o in app_settings.CORS_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_bytes=app_settings.MAX_UPLOAD_BYTES + app_settings.MULTIPART_OVERHEAD_BYTES,
    )

    @app.exception_handler(PdfHubError)
    async def pdf_hub_error(request: Request, exc: PdfHubError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """Report catalog size."""
        return HealthResponse(
            categories=len(catalog.list_all()),
            records=catalog.count(),
        )

    app.include_router(pdfs_router)

    # Blobs are served by storage name; download refs handed to clients depend on this prefix
    app.mount(app_settings.PUBLIC_PREFIX, StaticFiles(directory=blob_store.root), name="pdfs")

    public_dir = Path(app_settings.PUBLIC_DIR)
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")

    return app


def run() -> None:
    import uvicorn

    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(create_app(), host=settings.API_HOST, port=settings.API_PORT, log_config=None)
