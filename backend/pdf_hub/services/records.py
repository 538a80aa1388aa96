"""Building catalog records from stored blobs."""
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from pdf_hub.schemas.record import Record
from pdf_hub.services.blob_store import StoredBlob

MIB = 1024 * 1024


def format_size_label(byte_size: int) -> str:
    return f"{byte_size / MIB:.2f} MB"


def format_upload_timestamp(moment: datetime) -> str:
    """Local wall-clock time as ``YYYY/M/D HH:MM:SS``. Display only."""
    return f"{moment.year}/{moment.month}/{moment.day} {moment:%H:%M:%S}"


def default_display_name(original_name: str) -> str:
    return Path(original_name).stem or original_name


def build_record(
    blob: StoredBlob,
    original_name: str,
    category: Optional[str],
    display_name: Optional[str],
    default_category: str,
    public_prefix: str,
    now: Optional[datetime] = None,
) -> Record:
    """Create the record for a freshly stored blob.

    Blank ``category`` falls back to ``default_category``; blank
    ``display_name`` falls back to the original name without extension.
    """
    category = (category or "").strip() or default_category
    display_name = (display_name or "").strip() or default_display_name(original_name)

    return Record(
        id=uuid.uuid4().hex,
        original_name=original_name,
        storage_name=blob.storage_name,
        storage_path=blob.storage_path,
        category=category,
        display_name=display_name,
        upload_timestamp=format_upload_timestamp(now or datetime.now()),
        size_label=format_size_label(blob.byte_size),
        download_ref=f"{public_prefix.rstrip('/')}/{blob.storage_name}",
    )
