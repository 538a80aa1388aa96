"""Response envelopes for the PDF API."""
from pdf_hub.schemas.base import CamelModel
from pdf_hub.schemas.record import Record


class UploadResponse(CamelModel):
    success: bool = True
    message: str = "File uploaded"
    file: Record


class DeleteResponse(CamelModel):
    success: bool = True
    message: str = "File deleted"


class ErrorResponse(CamelModel):
    error: str


class HealthResponse(CamelModel):
    status: str = "ok"
    categories: int = 0
    records: int = 0
