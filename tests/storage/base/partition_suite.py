"""Base test suite for partition storage implementations."""

import pytest
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class PartitionStorageContract:
    """Contract that all partition storages must fulfill."""

    supports_persistence: bool = True
    preserves_order: bool = True


class BasePartitionStorageTestSuite(ABC):
    """Abstract test suite all partition storage implementations must pass."""

    @pytest.fixture
    @abstractmethod
    async def storage(self) -> Any:
        """Provide storage instance for testing."""
        pass

    @pytest.fixture
    @abstractmethod
    def contract(self) -> PartitionStorageContract:
        """Define storage capabilities contract."""
        pass

    @pytest.mark.asyncio
    async def test_empty_partition(self, storage):
        """A fresh partition selects as an empty list."""
        assert await storage.select_all() == []

    @pytest.mark.asyncio
    async def test_insert_and_select(self, storage, standard_site_dataset, contract):
        """Inserted records come back unchanged."""
        records = standard_site_dataset["pages"]
        await storage.insert_many(records)

        result = await storage.select_all()
        if contract.preserves_order:
            assert result == records
        else:
            assert sorted(result, key=lambda r: r["id"]) == sorted(records, key=lambda r: r["id"])

    @pytest.mark.asyncio
    async def test_insert_empty_is_noop(self, storage):
        """Inserting nothing leaves the partition empty."""
        await storage.insert_many([])
        assert await storage.select_all() == []

    @pytest.mark.asyncio
    async def test_delete_all(self, storage, standard_site_dataset):
        """delete_all empties the partition."""
        await storage.insert_many(standard_site_dataset["pages"])
        await storage.delete_all()
        assert await storage.select_all() == []

        # Deleting an empty partition is fine
        await storage.delete_all()
        assert await storage.select_all() == []

    @pytest.mark.asyncio
    async def test_nested_values_round_trip(self, storage, standard_site_dataset):
        """Nested documents survive storage."""
        records = standard_site_dataset["site_content"]
        await storage.insert_many(records)

        result = await storage.select_all()
        assert result[0]["content"]["hero"]["bullets"] == ["fast", "simple"]

    @pytest.mark.asyncio
    async def test_upsert_inserts_new(self, storage):
        """Upsert appends a record whose key is not present."""
        await storage.upsert({"language": "en", "content": {"a": 1}}, "language")

        result = await storage.select_all()
        assert result == [{"language": "en", "content": {"a": 1}}]

    @pytest.mark.asyncio
    async def test_upsert_replaces_existing(self, storage, standard_site_dataset):
        """Upsert replaces exactly the record with the matching key."""
        await storage.insert_many(standard_site_dataset["site_content"])
        await storage.upsert({"language": "en", "content": {"hero": {"title": "Hi"}}}, "language")

        result = await storage.select_all()
        assert len(result) == 2
        by_language = {r["language"]: r for r in result}
        assert by_language["en"]["content"] == {"hero": {"title": "Hi"}}
        assert by_language["fr"]["content"] == {"hero": {"title": "Bonjour"}}

    @pytest.mark.asyncio
    async def test_upsert_keeps_fields_it_does_not_carry(self, storage, standard_site_dataset):
        """Upsert merges into the stored record instead of dropping its fields."""
        await storage.insert_many(standard_site_dataset["site_settings"])
        await storage.upsert({"id": 1, "site_title": "New"}, "id")

        assert await storage.select_all() == [
            {"id": 1, "site_title": "New", "logo_url": "", "updated_at": "2024-05-01T12:00:00Z"}
        ]

    @pytest.mark.asyncio
    async def test_update_by(self, storage, standard_site_dataset):
        """update_by merges changes into the matching record only."""
        await storage.insert_many(standard_site_dataset["pages"])

        updated = await storage.update_by("id", "home", {"title": "Start", "published": False})

        assert updated == {"id": "home", "title": "Start", "published": False, "order": 1}
        assert await storage.select_by("id", "home") == updated
        assert (await storage.select_by("id", "about"))["title"] == "About us"
        assert await storage.update_by("id", "missing", {"title": "x"}) is None
        assert len(await storage.select_all()) == 2

    @pytest.mark.asyncio
    async def test_delete_by(self, storage, standard_site_dataset):
        """delete_by removes exactly the matching record."""
        await storage.insert_many(standard_site_dataset["pages"])

        assert await storage.delete_by("id", "about") is True
        assert await storage.delete_by("id", "about") is False

        result = await storage.select_all()
        assert [r["id"] for r in result] == ["home"]

    @pytest.mark.asyncio
    async def test_upsert_requires_conflict_key(self, storage):
        """A record without the conflict key is rejected."""
        with pytest.raises(KeyError):
            await storage.upsert({"content": {}}, "language")

    @pytest.mark.asyncio
    async def test_select_by(self, storage, standard_site_dataset):
        """select_by finds a record by field value."""
        await storage.insert_many(standard_site_dataset["site_content"])

        record = await storage.select_by("language", "fr")
        assert record["content"]["hero"]["title"] == "Bonjour"
        assert await storage.select_by("language", "de") is None

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, storage, standard_site_dataset):
        """Mutating selected records does not change the store."""
        await storage.insert_many(standard_site_dataset["site_content"])

        result = await storage.select_all()
        result[0]["content"]["hero"]["title"] = "changed"

        again = await storage.select_all()
        assert again[0]["content"]["hero"]["title"] == "Hello"

    @pytest.mark.asyncio
    async def test_health(self, storage):
        """A working storage reports healthy."""
        assert await storage.check_health() is True
