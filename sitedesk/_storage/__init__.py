"""Storage module with lazy loading support."""

from typing import TYPE_CHECKING

# Always import factory and registration (lightweight)
from .factory import StorageFactory, _register_backends

if TYPE_CHECKING:
    from .part_json import JsonPartitionStorage
    from .part_redis import RedisPartitionStorage
    from .blob_local import LocalBlobStorage
    from .blob_s3 import S3BlobStorage


def __getattr__(name):
    """Lazy import storage backends so redis/aioboto3 load only when used."""
    if name == "JsonPartitionStorage":
        from .part_json import JsonPartitionStorage
        return JsonPartitionStorage
    elif name == "RedisPartitionStorage":
        from .part_redis import RedisPartitionStorage
        return RedisPartitionStorage
    elif name == "LocalBlobStorage":
        from .blob_local import LocalBlobStorage
        return LocalBlobStorage
    elif name == "S3BlobStorage":
        from .blob_s3 import S3BlobStorage
        return S3BlobStorage
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "StorageFactory",
    "_register_backends",
    "JsonPartitionStorage",
    "RedisPartitionStorage",
    "LocalBlobStorage",
    "S3BlobStorage",
]
