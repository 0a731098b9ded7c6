"""Per-record management of list partitions (pages, projects, services, links)."""

import uuid
from typing import Any, Awaitable, Dict, List, Optional

from ._utils import logger, deep_copy, with_timeout, describe_error, utc_now
from .base import BasePartitionStorage, Record
from .config import CollectionConfig
from .errors import (
    PartitionFetchError,
    PartitionWriteError,
    RecordNotFoundError,
    UnsupportedOperation,
)


def _order_key(value: Any):
    # Numbers before text so mixed columns still sort
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return (1, str(value))
    return (0, value)


class RecordCollection:
    """List, add, update and delete the records of one partition by id.

    Ids arrive as text from URLs and argv while stored ids may be numbers, so
    a record matches when its id equals the given id or has the same text.
    The id and creation time are assigned on insert and never changed by
    updates.
    """

    def __init__(
        self,
        storage: BasePartitionStorage,
        config: CollectionConfig,
        request_timeout: Optional[float] = None,
    ):
        self.storage = storage
        self.config = config
        self.request_timeout = request_timeout

    @property
    def partition(self) -> str:
        return self.config.partition

    async def _fetch(self) -> List[Record]:
        try:
            return await with_timeout(self.storage.select_all(), self.request_timeout)
        except Exception as e:
            reason = describe_error(e, self.request_timeout)
            logger.error(f"Failed to fetch {self.config.name}: {reason}")
            raise PartitionFetchError(self.partition, reason) from e

    async def _write(self, aw: Awaitable[Any], action: str) -> Any:
        try:
            return await with_timeout(aw, self.request_timeout)
        except Exception as e:
            reason = describe_error(e, self.request_timeout)
            logger.error(f"Failed to {action} in {self.config.name}: {reason}")
            raise PartitionWriteError(self.partition, reason) from e

    def _sorted(self, records: List[Record]) -> List[Record]:
        field_name = self.config.order_field
        if not field_name:
            return records
        present = [r for r in records if r.get(field_name) is not None]
        missing = [r for r in records if r.get(field_name) is None]
        present.sort(key=lambda r: _order_key(r[field_name]), reverse=self.config.descending)
        return present + missing

    def _match(self, records: List[Record], record_id: Any) -> Optional[Record]:
        id_field = self.config.id_field
        for record in records:
            stored = record.get(id_field)
            if stored is not None and (stored == record_id or str(stored) == str(record_id)):
                return record
        return None

    def _writable(self, values: Dict[str, Any]) -> Record:
        return {
            k: v for k, v in deep_copy(values).items()
            if k not in self.config.read_only_fields
        }

    async def list_records(self) -> List[Record]:
        """All records in display order."""
        return self._sorted(await self._fetch())

    async def get(self, record_id: Any) -> Record:
        record = self._match(await self._fetch(), record_id)
        if record is None:
            raise RecordNotFoundError(self.partition, record_id)
        return record

    async def insert(self, values: Dict[str, Any]) -> Record:
        """Add a record built from the defaults and ``values``; return it.

        A fresh id is always assigned. When the collection is ordered by a
        position field that ``values`` leaves out, the record goes last.
        """
        config = self.config
        record = {**deep_copy(config.defaults), **self._writable(values)}
        record[config.id_field] = str(uuid.uuid4())
        if config.created_field:
            record[config.created_field] = utc_now().isoformat()

        if (
            config.order_field
            and config.order_field != config.created_field
            and record.get(config.order_field) is None
        ):
            positions = [
                r[config.order_field] for r in await self._fetch()
                if isinstance(r.get(config.order_field), (int, float))
                and not isinstance(r.get(config.order_field), bool)
            ]
            record[config.order_field] = max(positions, default=0) + 1

        await self._write(self.storage.insert_many([record]), "insert")
        logger.info(f"Added {config.name} record {record[config.id_field]}")
        return record

    async def update(self, record_id: Any, changes: Dict[str, Any]) -> Record:
        """Merge ``changes`` into a record; id and creation time are kept."""
        current = await self.get(record_id)
        stored_id = current[self.config.id_field]
        updated = await self._write(
            self.storage.update_by(self.config.id_field, stored_id, self._writable(changes)),
            "update",
        )
        if updated is None:
            raise RecordNotFoundError(self.partition, record_id)
        logger.info(f"Updated {self.config.name} record {stored_id}")
        return updated

    async def delete(self, record_id: Any) -> None:
        current = await self.get(record_id)
        stored_id = current[self.config.id_field]
        deleted = await self._write(
            self.storage.delete_by(self.config.id_field, stored_id),
            "delete",
        )
        if not deleted:
            raise RecordNotFoundError(self.partition, record_id)
        logger.info(f"Deleted {self.config.name} record {stored_id}")

    async def move(self, record_id: Any, offset: int) -> List[Record]:
        """Swap positions with the neighbour ``offset`` places away (-1 up, 1 down).

        Moving past either end leaves the order unchanged. Returns the
        records in their new order.
        """
        config = self.config
        if not config.order_field or config.order_field == config.created_field:
            raise UnsupportedOperation(f"{config.name} has no position field to reorder by")

        records = await self.list_records()
        record = self._match(records, record_id)
        if record is None:
            raise RecordNotFoundError(self.partition, record_id)

        index = records.index(record)
        target = index + offset
        if offset == 0 or not 0 <= target < len(records):
            return records

        neighbour = records[target]
        field_name = config.order_field
        first = record.get(field_name)
        second = neighbour.get(field_name)
        # Missing or equal positions fall back to the list indices
        if first is None or second is None or first == second:
            first, second = index, target

        await self._write(
            self.storage.update_by(config.id_field, record[config.id_field], {field_name: second}),
            "reorder",
        )
        await self._write(
            self.storage.update_by(config.id_field, neighbour[config.id_field], {field_name: first}),
            "reorder",
        )
        logger.info(f"Moved {config.name} record {record[config.id_field]} by {offset}")
        return await self.list_records()
