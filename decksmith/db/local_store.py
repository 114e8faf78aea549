"""
Local fallback deck cache.

A keyed table of SavedDeckRecord that survives remote outages. Individual
key operations are serialized by the store itself; writes to different ids
never conflict.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from decksmith.models.failure import LocalStoreError
from decksmith.models.records import SavedDeckRecord

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[SavedDeckRecord])


class LocalDeckStore(Protocol):
    """Keyed table of saved deck snapshots."""

    async def list(self) -> list[SavedDeckRecord]: ...

    async def get(self, deck_id: str) -> SavedDeckRecord | None: ...

    async def put(self, record: SavedDeckRecord) -> None: ...

    async def delete(self, deck_id: str) -> bool: ...


class InMemoryDeckStore:
    """Local store that lives only as long as the process."""

    def __init__(self) -> None:
        self._records: dict[str, SavedDeckRecord] = {}

    async def list(self) -> list[SavedDeckRecord]:
        return list(self._records.values())

    async def get(self, deck_id: str) -> SavedDeckRecord | None:
        return self._records.get(deck_id)

    async def put(self, record: SavedDeckRecord) -> None:
        self._records[record.id] = record

    async def delete(self, deck_id: str) -> bool:
        return self._records.pop(deck_id, None) is not None


class JsonFileDeckStore:
    """
    Local store persisted as a JSON array in a single file.

    Every operation reads the file, and writes go through a temporary file
    that replaces the original, so a crash never leaves a truncated cache.
    File I/O runs in a worker thread while the store lock is held.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, SavedDeckRecord]:
        if not self.path.exists():
            return {}
        try:
            records = _RECORDS.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            raise LocalStoreError("Failed to read saved decks", detail=str(e)) from e
        return {record.id: record for record in records}

    def _write(self, records: dict[str, SavedDeckRecord]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(_RECORDS.dump_json(list(records.values()), indent=2))
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise LocalStoreError("Failed to write saved decks", detail=str(e)) from e

    async def list(self) -> list[SavedDeckRecord]:
        async with self._lock:
            records = await asyncio.to_thread(self._read)
            return list(records.values())

    async def get(self, deck_id: str) -> SavedDeckRecord | None:
        async with self._lock:
            records = await asyncio.to_thread(self._read)
            return records.get(deck_id)

    async def put(self, record: SavedDeckRecord) -> None:
        async with self._lock:
            records = await asyncio.to_thread(self._read)
            records[record.id] = record
            await asyncio.to_thread(self._write, records)

    async def delete(self, deck_id: str) -> bool:
        async with self._lock:
            records = await asyncio.to_thread(self._read)
            if records.pop(deck_id, None) is None:
                return False
            await asyncio.to_thread(self._write, records)
            logger.info("Deleted saved deck %s", deck_id)
            return True
