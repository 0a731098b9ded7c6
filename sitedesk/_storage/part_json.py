"""JSON file partition storage for local and single-node deployments."""

import asyncio
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..base import BasePartitionStorage, Record
from .._utils import logger, load_json, write_json, deep_copy


@dataclass
class JsonPartitionStorage(BasePartitionStorage):
    """Keep a partition as a JSON array in ``<working_dir>/partition_<name>.json``."""

    _lock: Any = field(init=False, default=None)

    def __post_init__(self):
        working_dir = self.global_config["working_dir"]
        os.makedirs(working_dir, exist_ok=True)
        self._file_name = os.path.join(working_dir, f"partition_{self.namespace}.json")
        data = load_json(self._file_name)
        if data is not None and not isinstance(data, list):
            raise ValueError(f"Partition file {self._file_name} does not hold a JSON array")
        self._data: List[Record] = data or []
        self._lock = asyncio.Lock()
        logger.info(f"Load partition {self.namespace} with {len(self._data)} records")

    def _persist(self) -> None:
        write_json(self._data, self._file_name)

    async def select_all(self) -> List[Record]:
        return deep_copy(self._data)

    async def delete_all(self) -> None:
        async with self._lock:
            self._data = []
            self._persist()
        logger.debug(f"Deleted all records in partition {self.namespace}")

    async def insert_many(self, records: List[Record]) -> None:
        if not records:
            return
        async with self._lock:
            self._data.extend(deep_copy(records))
            self._persist()
        logger.debug(f"Inserted {len(records)} records into partition {self.namespace}")

    async def upsert(self, record: Record, conflict_key: str) -> None:
        if conflict_key not in record:
            raise KeyError(f"Record has no conflict key '{conflict_key}'")
        async with self._lock:
            index = self._find(conflict_key, record[conflict_key])
            if index is None:
                self._data.append(deep_copy(record))
            else:
                self._data[index] = {**self._data[index], **deep_copy(record)}
            self._persist()

    async def update_by(self, field_name: str, value: Any, changes: Record) -> Optional[Record]:
        async with self._lock:
            index = self._find(field_name, value)
            if index is None:
                return None
            self._data[index] = {**self._data[index], **deep_copy(changes)}
            self._persist()
            return deep_copy(self._data[index])

    async def delete_by(self, field_name: str, value: Any) -> bool:
        async with self._lock:
            index = self._find(field_name, value)
            if index is None:
                return False
            del self._data[index]
            self._persist()
        logger.debug(f"Deleted record {field_name}={value!r} from partition {self.namespace}")
        return True

    def _find(self, field_name: str, value: Any) -> Optional[int]:
        for index, existing in enumerate(self._data):
            if existing.get(field_name) == value:
                return index
        return None

    async def check_health(self) -> bool:
        return os.path.isdir(self.global_config["working_dir"])
