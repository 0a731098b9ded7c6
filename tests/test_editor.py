"""Tests for ContentEditor edit sessions."""

import asyncio
from datetime import datetime, timedelta, timezone
import pytest
from unittest.mock import AsyncMock, MagicMock

from sitedesk._storage.part_json import JsonPartitionStorage
from sitedesk.config import DEFAULT_EDITORS, EditorConfig
from sitedesk.editor import ContentEditor, coerce_key
from sitedesk.errors import PartitionFetchError, PartitionWriteError

CONTENT_EDITOR = DEFAULT_EDITORS[0]
SETTINGS_EDITOR = DEFAULT_EDITORS[1]


@pytest.fixture
def content_storage(mock_global_config):
    return JsonPartitionStorage(namespace="site_content", global_config=mock_global_config)


@pytest.fixture
def settings_storage(mock_global_config):
    return JsonPartitionStorage(namespace="site_settings", global_config=mock_global_config)


def test_coerce_key():
    assert coerce_key("1") == 1
    assert coerce_key("en") == "en"
    assert coerce_key("-1") == "-1"
    assert coerce_key("007") == 7


@pytest.mark.parametrize("key", ["²", "①", "١٢", "1.5", ""])
def test_coerce_key_leaves_non_ascii_digits_as_text(key):
    """Unicode digits pass isdigit but are not integer literals."""
    assert coerce_key(key) == key


@pytest.mark.asyncio
async def test_load_missing_record_uses_defaults(settings_storage):
    editor = ContentEditor(settings_storage, SETTINGS_EDITOR, key=1)

    document = await editor.load()

    assert document == SETTINGS_EDITOR.defaults
    assert document is not SETTINGS_EDITOR.defaults
    assert editor.loaded and not editor.dirty


@pytest.mark.asyncio
async def test_edit_and_save_document_field(content_storage, standard_site_dataset):
    await content_storage.insert_many(standard_site_dataset["site_content"])
    editor = ContentEditor(content_storage, CONTENT_EDITOR, key="en")
    await editor.load()

    assert editor.update(["hero", "bullets", 2], "tested")
    assert editor.dirty
    await editor.save()

    record = await content_storage.select_by("language", "en")
    assert record == {
        "language": "en",
        "content": {"hero": {"title": "Hello", "bullets": ["fast", "simple", "tested"]}},
    }
    assert not editor.dirty
    assert len(await content_storage.select_all()) == 2


@pytest.mark.asyncio
async def test_save_creates_record(content_storage):
    editor = ContentEditor(content_storage, CONTENT_EDITOR, key="de")
    await editor.load()
    editor.update(["hero", "title"], "Hallo")
    await editor.save()

    assert await content_storage.select_all() == [
        {"language": "de", "content": {"hero": {"title": "Hallo"}}}
    ]


@pytest.mark.asyncio
async def test_rejected_edit_keeps_document(content_storage, standard_site_dataset):
    await content_storage.insert_many(standard_site_dataset["site_content"])
    editor = ContentEditor(content_storage, CONTENT_EDITOR, key="en")
    await editor.load()
    before = editor.document

    assert editor.update(["hero", "title", "x"], "boom") is False
    assert editor.update([], "boom") is False
    assert editor.document is before
    assert not editor.dirty


@pytest.mark.asyncio
async def test_read_only_fields(settings_storage, standard_site_dataset):
    """Whole-record editors never write read-only fields themselves."""
    await settings_storage.insert_many(standard_site_dataset["site_settings"])
    editor = ContentEditor(settings_storage, SETTINGS_EDITOR, key=1)
    await editor.load()

    assert editor.update(["updated_at"], "2030-01-01") is False
    assert editor.update(["site_title"], "Acme Inc") is True
    await editor.save()

    record = await settings_storage.select_by("id", 1)
    assert record["site_title"] == "Acme Inc"
    assert record["logo_url"] == ""
    assert record["updated_at"] != "2030-01-01"


@pytest.mark.asyncio
async def test_save_keeps_and_refreshes_updated_at(settings_storage, standard_site_dataset):
    """Saving settings stamps updated_at instead of dropping it."""
    await settings_storage.insert_many(standard_site_dataset["site_settings"])
    editor = ContentEditor(settings_storage, SETTINGS_EDITOR, key=1)
    await editor.load()
    editor.update(["site_title"], "New")

    before = datetime.now(timezone.utc)
    await editor.save()

    record = await settings_storage.select_by("id", 1)
    assert set(record) == {"id", "site_title", "logo_url", "updated_at"}
    stamped = datetime.fromisoformat(record["updated_at"])
    assert stamped >= before
    assert stamped - before < timedelta(seconds=5)


@pytest.mark.asyncio
async def test_save_keeps_fields_outside_the_document(content_storage):
    """Columns the editor does not manage survive a save."""
    await content_storage.insert_many([
        {"language": "en", "content": {"hero": {"title": "Hello"}}, "published": True},
    ])
    editor = ContentEditor(content_storage, CONTENT_EDITOR, key="en")
    await editor.load()
    editor.update(["hero", "title"], "Hi")
    await editor.save()

    assert await content_storage.select_all() == [
        {"language": "en", "content": {"hero": {"title": "Hi"}}, "published": True},
    ]


@pytest.mark.asyncio
async def test_replace_keeps_read_only_fields(settings_storage, standard_site_dataset):
    await settings_storage.insert_many(standard_site_dataset["site_settings"])
    editor = ContentEditor(settings_storage, SETTINGS_EDITOR, key=1)
    await editor.load()

    editor.replace({"site_title": "New", "id": 99})

    assert editor.document["id"] == 1
    assert editor.document["updated_at"] == "2024-05-01T12:00:00Z"
    assert editor.document["site_title"] == "New"
    assert editor.dirty


@pytest.mark.asyncio
async def test_reset_to_defaults(content_storage, standard_site_dataset):
    config = EditorConfig(
        name="site_content",
        partition="site_content",
        conflict_key="language",
        document_field="content",
        defaults={"hero": {"title": "Welcome"}},
    )
    await content_storage.insert_many(standard_site_dataset["site_content"])
    editor = ContentEditor(content_storage, config, key="en")

    document = await editor.reset_to_defaults()

    assert document == {"hero": {"title": "Welcome"}}
    record = await content_storage.select_by("language", "en")
    assert record["content"] == {"hero": {"title": "Welcome"}}


@pytest.mark.asyncio
async def test_load_failure():
    storage = MagicMock()
    storage.select_by = AsyncMock(side_effect=RuntimeError("network down"))
    editor = ContentEditor(storage, CONTENT_EDITOR, key="en")

    with pytest.raises(PartitionFetchError) as exc_info:
        await editor.load()

    assert exc_info.value.partition == "site_content"
    assert exc_info.value.reason == "network down"


@pytest.mark.asyncio
async def test_save_timeout():
    async def slow_upsert(record, conflict_key):
        await asyncio.sleep(1)

    storage = MagicMock()
    storage.upsert = slow_upsert
    editor = ContentEditor(storage, CONTENT_EDITOR, key="en", request_timeout=0.01)
    editor.update(["hero"], "x")

    with pytest.raises(PartitionWriteError, match="timed out after 0.01s"):
        await editor.save()

    assert editor.dirty
