"""Edit sessions over a single record of a content partition."""

from typing import Any, Optional

from ._utils import logger, deep_copy, with_timeout, describe_error, utc_now
from .base import BasePartitionStorage, Record
from .config import EditorConfig
from .document import Path, update_nested
from .errors import PartitionFetchError, PartitionWriteError


def coerce_key(key: str) -> Any:
    """Record keys arrive as text from URLs and argv; decimal keys are ints."""
    return int(key) if key.isascii() and key.isdecimal() else key


class ContentEditor:
    """Hold an in-memory document, apply path edits, persist on save.

    The record is identified by ``config.conflict_key == key``. When
    ``config.document_field`` is set, the document is that field of the
    record (e.g. ``site_content.content``); otherwise the whole record is the
    document (e.g. the single ``site_settings`` row).
    """

    def __init__(
        self,
        storage: BasePartitionStorage,
        config: EditorConfig,
        key: Any,
        request_timeout: Optional[float] = None,
    ):
        self.storage = storage
        self.config = config
        self.key = key
        self.request_timeout = request_timeout
        self.document: Any = deep_copy(config.defaults)
        self.dirty = False
        self.loaded = False

    @property
    def partition(self) -> str:
        return self.config.partition

    async def load(self) -> Any:
        """Fetch the record, falling back to the configured defaults."""
        try:
            record = await with_timeout(
                self.storage.select_by(self.config.conflict_key, self.key),
                self.request_timeout,
            )
        except Exception as e:
            reason = describe_error(e, self.request_timeout)
            logger.error(f"Failed to load {self.config.name}[{self.key}]: {reason}")
            raise PartitionFetchError(self.partition, reason) from e

        if record is None:
            logger.info(f"No {self.config.name} record for {self.key!r}, using defaults")
            self.document = deep_copy(self.config.defaults)
        elif self.config.document_field:
            self.document = record.get(self.config.document_field)
            if self.document is None:
                self.document = deep_copy(self.config.defaults)
        else:
            self.document = record

        self.dirty = False
        self.loaded = True
        return self.document

    def update(self, path: Path, value: Any) -> bool:
        """Apply one edit; return False when it was rejected."""
        if not path:
            return False
        if self.config.document_field is None and path[0] in self.config.read_only_fields:
            logger.warning(f"Ignored edit of read-only field {path[0]!r} in {self.config.name}")
            return False

        updated = update_nested(self.document, path, value)
        if updated is self.document:
            return False

        self.document = updated
        self.dirty = True
        return True

    def replace(self, document: Any) -> None:
        """Replace the whole document (read-only fields are kept)."""
        if self.config.document_field is None and isinstance(self.document, dict):
            kept = {f: self.document[f] for f in self.config.read_only_fields if f in self.document}
            document = {**document, **kept}
        self.document = deep_copy(document)
        self.dirty = True

    def _build_record(self, document: Any) -> Record:
        if self.config.document_field:
            record = {
                self.config.conflict_key: self.key,
                self.config.document_field: deep_copy(document),
            }
        else:
            record = {
                k: v for k, v in deep_copy(document).items()
                if k not in self.config.read_only_fields
            }
            record[self.config.conflict_key] = self.key

        if self.config.touch_field:
            record[self.config.touch_field] = utc_now().isoformat()
        return record

    async def _write(self, document: Any) -> None:
        record = self._build_record(document)
        try:
            await with_timeout(
                self.storage.upsert(record, self.config.conflict_key),
                self.request_timeout,
            )
        except Exception as e:
            reason = describe_error(e, self.request_timeout)
            logger.error(f"Failed to save {self.config.name}[{self.key}]: {reason}")
            raise PartitionWriteError(self.partition, reason) from e

    async def save(self) -> None:
        """Persist the whole in-memory document through ``upsert``."""
        await self._write(self.document)
        self.dirty = False
        logger.info(f"Saved {self.config.name}[{self.key}]")

    async def reset_to_defaults(self) -> Any:
        """Overwrite the stored record with the defaults and reload."""
        await self._write(self.config.defaults)
        logger.info(f"Reset {self.config.name}[{self.key}] to defaults")
        return await self.load()
