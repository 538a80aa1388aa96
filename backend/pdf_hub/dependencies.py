"""FastAPI dependencies for the services owned by the app.

Usage in routes:
    from pdf_hub.dependencies import get_catalog

    @router.get("/items")
    async def list_items(catalog: Catalog = Depends(get_catalog)):
        return catalog.list_all()
"""
from fastapi import Request

from pdf_hub.config import Settings
from pdf_hub.services.blob_store import BlobStore
from pdf_hub.services.catalog import Catalog


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
