"""PDF API routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File as FastAPIFile, Form, UploadFile
from fastapi.responses import JSONResponse

from pdf_hub.config import Settings
from pdf_hub.dependencies import get_blob_store, get_catalog, get_settings
from pdf_hub.errors import BlobNotFound, ValidationError
from pdf_hub.schemas.record import Record
from pdf_hub.schemas.responses import DeleteResponse, ErrorResponse, UploadResponse
from pdf_hub.services.blob_store import BlobStore
from pdf_hub.services.catalog import Catalog
from pdf_hub.services.records import build_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pdfs"])

# Multipart field carrying the file; also prefixes storage names
UPLOAD_FIELD = "pdf"

RESP_ERRORS = {
    400: {"model": ErrorResponse, "description": "No file provided"},
    413: {"model": ErrorResponse, "description": "File too large"},
    415: {"model": ErrorResponse, "description": "Not a PDF"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/pdfs", response_model=dict[str, list[Record]])
async def list_pdfs(catalog: Catalog = Depends(get_catalog)):
    """List every record, grouped by category, in upload order."""
    return catalog.list_all()


@router.post("/upload", response_model=UploadResponse, responses=RESP_ERRORS)
async def upload_pdf(
    pdf: Optional[UploadFile] = FastAPIFile(None),
    category: Optional[str] = Form(None),
    filename: Optional[str] = Form(None),
    catalog: Catalog = Depends(get_catalog),
    blob_store: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
):
    """Store an uploaded PDF and add it to the catalog."""
    if pdf is None or not pdf.filename:
        return _error(400, "No file selected")

    try:
        blob = await blob_store.accept(
            pdf,
            pdf.filename,
            pdf.content_type,
            declared_size=pdf.size,
            field_name=UPLOAD_FIELD,
        )
    except ValidationError as e:
        logger.warning("Rejected upload %s: %s", pdf.filename, e.message)
        raise
    except OSError as e:
        logger.error(f"Failed to store {pdf.filename}: {e}")
        return _error(500, f"Upload failed: {e}")

    record = build_record(
        blob,
        original_name=pdf.filename,
        category=category,
        display_name=filename,
        default_category=settings.DEFAULT_CATEGORY,
        public_prefix=settings.PUBLIC_PREFIX,
    )

    try:
        await catalog.insert(record)
    except Exception as e:
        logger.error(f"Failed to catalogue {pdf.filename}: {e}")
        try:
            await blob_store.remove(blob.storage_path)
        except (BlobNotFound, OSError) as cleanup_error:
            logger.warning("Could not remove blob %s after failed insert: %s", blob.storage_name, cleanup_error)
        return _error(500, f"Upload failed: {e}")

    return UploadResponse(message="File uploaded", file=record)


@router.delete(
    "/delete/{record_id}",
    response_model=DeleteResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown id"}, 500: RESP_ERRORS[500]},
)
async def delete_pdf(
    record_id: str,
    catalog: Catalog = Depends(get_catalog),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Delete a record and then its blob."""
    try:
        record = await catalog.delete_by_id(record_id)
    except OSError as e:
        return _error(500, f"Delete failed: {e}")

    # Record deletion is committed from here on.
    try:
        await blob_store.remove(record.storage_path)
    except BlobNotFound:
        logger.warning("Blob for record %s was already absent: %s", record_id, record.storage_path)
    except OSError as e:
        logger.error(f"Orphaned blob {record.storage_path} for deleted record {record_id}: {e}")

    return DeleteResponse(message="File deleted")
