from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


@dataclass
class StorageNameSpace:
    namespace: str
    global_config: dict

    async def check_health(self) -> bool:
        """Return True when the backend is reachable."""
        return True


@dataclass
class BasePartitionStorage(StorageNameSpace):
    """A named table of records (e.g. ``pages``, ``social_links``)."""

    async def select_all(self) -> List[Record]:
        """Return every record of the partition, in store order."""
        raise NotImplementedError

    async def delete_all(self) -> None:
        raise NotImplementedError

    async def insert_many(self, records: List[Record]) -> None:
        raise NotImplementedError

    async def upsert(self, record: Record, conflict_key: str) -> None:
        """Merge into the record whose ``conflict_key`` matches, or append it.

        Fields of the stored record that ``record`` does not carry are kept.
        """
        raise NotImplementedError

    async def update_by(self, field_name: str, value: Any, changes: Record) -> Optional[Record]:
        """Merge ``changes`` into the first matching record; None when absent."""
        raise NotImplementedError

    async def delete_by(self, field_name: str, value: Any) -> bool:
        """Remove the first matching record; False when absent."""
        raise NotImplementedError

    async def select_by(self, field_name: str, value: Any) -> Optional[Record]:
        for record in await self.select_all():
            if record.get(field_name) == value:
                return record
        return None


@dataclass
class BlobObject:
    name: str
    size: int
    created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BaseBlobStorage(StorageNameSpace):
    """Flat object store; ``namespace`` is the bucket/container name."""

    async def upload(self, name: str, data: bytes, upsert: bool = False) -> None:
        raise NotImplementedError

    async def download(self, name: str) -> bytes:
        raise NotImplementedError

    async def list_objects(self) -> List[BlobObject]:
        raise NotImplementedError
