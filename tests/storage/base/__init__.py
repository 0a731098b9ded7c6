"""Base test suites for all storage types."""

from .partition_suite import BasePartitionStorageTestSuite, PartitionStorageContract
from .fixtures import (
    standard_site_dataset,
    temp_storage_dir,
    mock_global_config
)

__all__ = [
    "BasePartitionStorageTestSuite",
    "PartitionStorageContract",
    "standard_site_dataset",
    "temp_storage_dir",
    "mock_global_config"
]
