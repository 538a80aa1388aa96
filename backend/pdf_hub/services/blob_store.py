"""Blob storage for uploaded PDFs on the local filesystem."""
import logging
import os
import random
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import aiofiles
import aiofiles.os
import aiofiles.tempfile

from pdf_hub.errors import BlobNotFound, PayloadTooLarge, UnsupportedMediaType

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

# Chunk size for streaming uploads to disk
CHUNK_SIZE = 256 * 1024

# Characters kept from the client extension; anything else would need URL escaping
UNSAFE_SUFFIX_CHARS = re.compile(r"[^A-Za-z0-9.]")


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class StoredBlob:
    storage_name: str
    storage_path: str
    byte_size: int


def generate_storage_name(field_name: str, original_name: str) -> str:
    """Build ``<field>-<ms timestamp>-<random>`` plus the original extension.

    The extension is reduced to letters, digits and dots so the name can be
    used as a URL path segment as is.

    Collisions are not detected; the timestamp and random suffix make one
    vanishingly unlikely.
    """
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    extension = UNSAFE_SUFFIX_CHARS.sub("", Path(original_name).suffix)
    return f"{field_name}-{unique_suffix}{extension}"


class BlobStore:
    """Writes validated PDF payloads under ``root`` and removes them on request.

    Uploads in progress live in a hidden sibling directory of ``root``, which
    is not served, and are renamed into ``root`` once complete.
    """

    def __init__(self, root: Path | str, max_bytes: int, field_name: str = "pdf"):
        self.root = Path(root)
        self.max_bytes = max_bytes
        self.field_name = field_name
        self.incoming = self.root.with_name(f".{self.root.name}-incoming")
        self.root.mkdir(parents=True, exist_ok=True)
        self.incoming.mkdir(parents=True, exist_ok=True)

    def path_for(self, storage_name: str) -> Path:
        """Resolve a storage name under the root. Directory parts are dropped."""
        return self.root / Path(storage_name).name

    async def accept(
        self,
        payload: AsyncReadable,
        original_name: str,
        mime_type: Optional[str],
        declared_size: Optional[int] = None,
        field_name: Optional[str] = None,
    ) -> StoredBlob:
        """Stream ``payload`` to a fresh file and return where it landed.

        The bytes go to a temp file in the incoming directory and are renamed
        into the root only once the whole payload is within the size limit, so
        a partial upload is never visible or served.
        """
        if mime_type != PDF_MEDIA_TYPE:
            raise UnsupportedMediaType(mime_type)
        if declared_size is not None and declared_size > self.max_bytes:
            raise PayloadTooLarge(self.max_bytes)

        storage_name = generate_storage_name(field_name or self.field_name, original_name)
        final_path = self.path_for(storage_name)
        total = 0
        tmp_path = None

        try:
            async with aiofiles.tempfile.NamedTemporaryFile(
                dir=str(self.incoming),
                delete=False,
                suffix=".tmp",
            ) as tmp:
                tmp_path = tmp.name
                while True:
                    chunk = await payload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    total += len(chunk)
                    if total > self.max_bytes:
                        raise PayloadTooLarge(self.max_bytes)
                    await tmp.write(chunk)

            # NamedTemporaryFile creates 0600; blobs are served publicly
            os.chmod(tmp_path, 0o644)
            await aiofiles.os.replace(tmp_path, final_path)
        except Exception:
            if tmp_path is not None:
                await self._discard(tmp_path)
            raise

        logger.info("Stored blob %s (%d bytes)", storage_name, total)
        return StoredBlob(
            storage_name=storage_name,
            storage_path=final_path.as_posix(),
            byte_size=total,
        )

    async def remove(self, storage_path: str) -> None:
        """Delete a blob. Raises BlobNotFound if it is already gone."""
        path = self.path_for(storage_path)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            raise BlobNotFound(storage_path) from None
        logger.info("Removed blob %s", path.name)

    def purge_incoming(self) -> int:
        """Delete temp files left behind by interrupted uploads."""
        purged = 0
        for leftover in self.incoming.glob("*.tmp"):
            leftover.unlink(missing_ok=True)
            purged += 1
        if purged:
            logger.warning("Discarded %d incomplete upload(s) from %s", purged, self.incoming)
        return purged

    async def _discard(self, tmp_path: str) -> None:
        try:
            await aiofiles.os.remove(tmp_path)
        except FileNotFoundError:
            pass
