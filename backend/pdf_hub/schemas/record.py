"""Record schema: metadata for one stored PDF."""
from pydantic import Field

from pdf_hub.schemas.base import FrozenCamelModel


class Record(FrozenCamelModel):
    id: str
    original_name: str
    storage_name: str
    storage_path: str
    category: str
    display_name: str
    upload_timestamp: str
    size_label: str
    download_ref: str = Field(description="Public path the blob is served from")
