"""Partition export/restore for backup operations."""

from typing import Any, Dict, List, Optional

from ..base import BasePartitionStorage
from .._utils import logger, with_timeout, describe_error, gather_fail_fast
from ..errors import ConnectionUnavailable, PartitionFetchError, RestoreFailed


class PartitionExporter:
    """Export and restore a fixed set of partitions."""

    def __init__(self, storages: Dict[str, BasePartitionStorage], request_timeout: Optional[float] = None):
        """Initialize exporter with partition storages.

        Args:
            storages: Mapping of partition name to storage instance
                     (e.g., {'pages': storage, 'social_links': storage, ...})
            request_timeout: Bound for each remote call, in seconds
        """
        self.storages = storages
        self.request_timeout = request_timeout

    async def _export_partition(self, name: str) -> List[Any]:
        try:
            records = await with_timeout(self.storages[name].select_all(), self.request_timeout)
        except ConnectionUnavailable:
            raise
        except Exception as e:
            raise PartitionFetchError(name, describe_error(e, self.request_timeout)) from e
        logger.debug(f"Exported partition {name} ({len(records)} records)")
        return records

    async def export(self) -> Dict[str, List[Any]]:
        """Fetch every record of every partition.

        Fetches run concurrently; the first failure cancels the others.

        Raises:
            PartitionFetchError: For the first partition that failed
        """
        names = list(self.storages)
        results = await gather_fail_fast(*(self._export_partition(name) for name in names))
        logger.info(f"Partition export complete: {len(names)} partitions")
        return dict(zip(names, results))

    async def restore(self, data: Dict[str, List[Any]]) -> List[str]:
        """Replace live partitions with archived records, one partition at a time.

        Each partition is emptied and then refilled. There is no rollback: when
        a partition fails, the partitions before it stay restored.

        Returns:
            Names of restored partitions, in order

        Raises:
            RestoreFailed: Identifies the failing partition and what was restored
        """
        restored: List[str] = []
        for name, records in data.items():
            storage = self.storages[name]
            try:
                await with_timeout(storage.delete_all(), self.request_timeout)
                await with_timeout(storage.insert_many(records), self.request_timeout)
            except Exception as e:
                reason = describe_error(e, self.request_timeout)
                logger.error(f"Restore of partition {name} failed: {reason}; restored so far: {restored}")
                raise RestoreFailed(name, reason, restored) from e
            restored.append(name)
            logger.debug(f"Restored {name}: {len(records)} records")

        logger.info(f"Partition restore complete: {restored}")
        return restored

    @staticmethod
    def get_statistics(data: Dict[str, List[Any]]) -> Dict[str, int]:
        """Record count per partition."""
        return {name: len(records) for name, records in data.items()}
