"""In-memory catalog of PDF records, mirrored to a JSON snapshot file.

Records are grouped by category and kept in upload order. Every mutation
runs under one lock together with the snapshot write that follows it, so
two concurrent mutations can never interleave their persists.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable, Optional

import aiofiles
import aiofiles.os
from pydantic import ValidationError as SchemaError

from pdf_hub.errors import RecordNotFound
from pdf_hub.schemas.record import Record

logger = logging.getLogger(__name__)


class Catalog:
    """Owns the category -> records mapping and its snapshot file."""

    def __init__(self, snapshot_path: Path | str, initial_categories: Iterable[str] = ("exercise", "math")):
        self.snapshot_path = Path(snapshot_path)
        self.initial_categories = list(initial_categories)
        self._categories: dict[str, list[Record]] = self._empty()
        self._lock = asyncio.Lock()

    def _empty(self) -> dict[str, list[Record]]:
        return {category: [] for category in self.initial_categories}

    # ── Reads ────────────────────────────────────────────────────────

    def list_all(self) -> dict[str, list[Record]]:
        """Copy of the full mapping. Does not take the lock.

        Built without awaiting, so no other coroutine can mutate the
        mapping halfway through the copy.
        """
        return {category: list(records) for category, records in self._categories.items()}

    def get(self, record_id: str) -> Optional[Record]:
        location = self._locate(record_id)
        if location is None:
            return None
        category, index = location
        return self._categories[category][index]

    def count(self) -> int:
        return sum(len(records) for records in self._categories.values())

    def _locate(self, record_id: str) -> Optional[tuple[str, int]]:
        for category, records in self._categories.items():
            for index, record in enumerate(records):
                if record.id == record_id:
                    return category, index
        return None

    # ── Mutations ────────────────────────────────────────────────────

    async def insert(self, record: Record) -> None:
        """Append ``record`` to its category and persist before returning.

        If the snapshot write fails the append is undone and the error
        propagates, leaving memory and disk as they were.
        """
        async with self._lock:
            if self._locate(record.id) is not None:
                raise ValueError(f"Duplicate record id: {record.id}")

            created = record.category not in self._categories
            records = self._categories.setdefault(record.category, [])
            records.append(record)
            try:
                await self._write_snapshot()
            except Exception:
                records.pop()
                if created:
                    del self._categories[record.category]
                raise

        logger.info("Catalogued %s in '%s' as %s", record.original_name, record.category, record.id)

    async def delete_by_id(self, record_id: str) -> Record:
        """Remove the record with ``record_id`` from whichever category holds it.

        The snapshot is written before returning, so the caller removes the
        blob only after the record is durably gone. A crash in between
        leaves an orphaned blob, never a listed record without one.
        """
        async with self._lock:
            location = self._locate(record_id)
            if location is None:
                raise RecordNotFound(record_id)

            category, index = location
            record = self._categories[category].pop(index)
            try:
                await self._write_snapshot()
            except Exception:
                self._categories[category].insert(index, record)
                raise

        logger.info("Removed record %s from '%s'", record_id, category)
        return record

    # ── Snapshot ─────────────────────────────────────────────────────

    async def load(self) -> bool:
        """Replace in-memory state from the snapshot file.

        Loaded categories are laid over the initial ones. Returns False
        when the file is missing or unreadable and a fresh catalog was
        started instead.
        """
        async with self._lock:
            categories = self._empty()
            try:
                async with aiofiles.open(self.snapshot_path, "r", encoding="utf-8") as f:
                    raw = await f.read()
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise ValueError("snapshot root is not an object")
                for category, items in data.items():
                    categories[category] = [Record.model_validate(item) for item in items]
            except FileNotFoundError:
                logger.info("No catalog snapshot at %s, starting a fresh catalog", self.snapshot_path)
                self._categories = self._empty()
                return False
            except (OSError, ValueError, TypeError, SchemaError) as e:
                logger.warning("Unreadable catalog snapshot %s (%s), starting a fresh catalog", self.snapshot_path, e)
                self._categories = self._empty()
                return False

            self._categories = categories
            logger.info(
                "Loaded %d record(s) in %d categories from %s",
                self.count(), len(self._categories), self.snapshot_path,
            )
            return True

    async def persist(self) -> None:
        """Write the full catalog to the snapshot file."""
        async with self._lock:
            await self._write_snapshot()

    def serialize(self) -> str:
        data = {
            category: [record.model_dump(by_alias=True) for record in records]
            for category, records in self._categories.items()
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    async def _write_snapshot(self) -> None:
        # Caller holds the lock.
        payload = self.serialize()
        self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.snapshot_path.with_name(self.snapshot_path.name + ".tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self.snapshot_path)
        except OSError as e:
            logger.error(f"Failed to persist catalog to {self.snapshot_path}: {e}")
            raise
