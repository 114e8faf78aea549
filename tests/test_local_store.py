"""Tests for the local fallback deck cache."""

import asyncio
from datetime import UTC, datetime
from pathlib import Path

import pytest

from decksmith.db.local_store import InMemoryDeckStore, JsonFileDeckStore
from decksmith.models.deck import DeckFormat
from decksmith.models.failure import LocalStoreError
from decksmith.models.records import SavedCardLine, SavedDeckRecord


def make_record(deck_id: str = "deck-1", name: str = "Mono Red") -> SavedDeckRecord:
    now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
    return SavedDeckRecord(
        id=deck_id,
        name=name,
        format=DeckFormat.STANDARD,
        cards=[
            SavedCardLine(
                card_identifier="lightning-bolt", fallback_name="Lightning Bolt", count=4
            ),
            SavedCardLine(card_identifier=None, fallback_name="Mystery Card", count=1),
        ],
        total_count=5,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path: Path):
    if request.param == "memory":
        return InMemoryDeckStore()
    return JsonFileDeckStore(tmp_path / "saved_decks.json")


class TestLocalDeckStore:
    async def test_put_and_get(self, store) -> None:
        record = make_record()

        await store.put(record)

        assert await store.get("deck-1") == record

    async def test_get_missing(self, store) -> None:
        assert await store.get("missing") is None

    async def test_put_overwrites(self, store) -> None:
        await store.put(make_record(name="Old"))
        await store.put(make_record(name="New"))

        records = await store.list()

        assert [record.name for record in records] == ["New"]

    async def test_delete(self, store) -> None:
        await store.put(make_record())

        assert await store.delete("deck-1") is True
        assert await store.get("deck-1") is None
        assert await store.delete("deck-1") is False

    async def test_writes_to_different_ids_do_not_conflict(self, store) -> None:
        await store.put(make_record("a", "Deck A"))
        await store.put(make_record("b", "Deck B"))
        await store.delete("a")

        assert [record.id for record in await store.list()] == ["b"]


class TestJsonFileDeckStore:
    async def test_survives_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "cache" / "saved_decks.json"
        await JsonFileDeckStore(path).put(make_record())

        record = await JsonFileDeckStore(path).get("deck-1")

        assert record == make_record()

    async def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert await JsonFileDeckStore(tmp_path / "none.json").list() == []

    async def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "saved_decks.json"
        path.write_text("{not json")

        with pytest.raises(LocalStoreError, match="Failed to read"):
            await JsonFileDeckStore(path).list()

    async def test_no_temp_file_left_behind(self, tmp_path: Path) -> None:
        path = tmp_path / "saved_decks.json"

        await JsonFileDeckStore(path).put(make_record())

        assert [p.name for p in tmp_path.iterdir()] == ["saved_decks.json"]

    async def test_concurrent_puts_all_persist(self, tmp_path: Path) -> None:
        """Interleaved writes from one store never drop a record."""
        store = JsonFileDeckStore(tmp_path / "saved_decks.json")

        await asyncio.gather(*(store.put(make_record(f"deck-{i}")) for i in range(10)))

        assert sorted(record.id for record in await store.list()) == sorted(
            f"deck-{i}" for i in range(10)
        )
