"""Storage factory for centralized backend creation."""

from typing import Type, Dict, Callable
from sitedesk.base import BasePartitionStorage, BaseBlobStorage


class StorageFactory:
    """Factory for creating storage backends with validation and registration."""

    _partition_backends: Dict[str, Callable[[], Type[BasePartitionStorage]]] = {}
    _blob_backends: Dict[str, Callable[[], Type[BaseBlobStorage]]] = {}

    ALLOWED_PARTITION = {"json", "redis"}
    ALLOWED_BLOB = {"local", "s3"}

    @classmethod
    def register_partition(cls, name: str, backend_loader: Callable[[], Type[BasePartitionStorage]]) -> None:
        """Register a partition storage backend.

        Args:
            name: Backend name (must be in ALLOWED_PARTITION)
            backend_loader: Function that returns the partition storage class

        Raises:
            ValueError: If backend name not in allowed list
        """
        if name not in cls.ALLOWED_PARTITION:
            raise ValueError(f"Backend {name} not in allowed partition backends: {cls.ALLOWED_PARTITION}")
        cls._partition_backends[name] = backend_loader

    @classmethod
    def register_blob(cls, name: str, backend_loader: Callable[[], Type[BaseBlobStorage]]) -> None:
        """Register a blob storage backend.

        Args:
            name: Backend name (must be in ALLOWED_BLOB)
            backend_loader: Function that returns the blob storage class

        Raises:
            ValueError: If backend name not in allowed list
        """
        if name not in cls.ALLOWED_BLOB:
            raise ValueError(f"Backend {name} not in allowed blob backends: {cls.ALLOWED_BLOB}")
        cls._blob_backends[name] = backend_loader

    @classmethod
    def create_partition_storage(
        cls,
        backend: str,
        namespace: str,
        global_config: dict,
        **kwargs
    ) -> BasePartitionStorage:
        """Create a partition storage instance.

        Args:
            backend: Backend name
            namespace: Partition name
            global_config: Global configuration dict
            **kwargs: Additional backend-specific parameters

        Returns:
            Partition storage instance

        Raises:
            ValueError: If backend not registered
        """
        if backend not in cls._partition_backends:
            _register_backends()
            if backend not in cls._partition_backends:
                raise ValueError(f"Unknown partition backend: {backend}. Available: {list(cls._partition_backends.keys())}")

        backend_class = cls._partition_backends[backend]()
        return backend_class(
            namespace=namespace,
            global_config=global_config,
            **kwargs
        )

    @classmethod
    def create_blob_storage(
        cls,
        backend: str,
        namespace: str,
        global_config: dict,
        **kwargs
    ) -> BaseBlobStorage:
        """Create a blob storage instance.

        Args:
            backend: Backend name
            namespace: Bucket/container name
            global_config: Global configuration dict
            **kwargs: Additional backend-specific parameters

        Returns:
            Blob storage instance

        Raises:
            ValueError: If backend not registered
        """
        if backend not in cls._blob_backends:
            _register_backends()
            if backend not in cls._blob_backends:
                raise ValueError(f"Unknown blob backend: {backend}. Available: {list(cls._blob_backends.keys())}")

        backend_class = cls._blob_backends[backend]()
        return backend_class(
            namespace=namespace,
            global_config=global_config,
            **kwargs
        )


def _get_json_storage():
    """Lazy loader for JSON partition storage."""
    from .part_json import JsonPartitionStorage
    return JsonPartitionStorage


def _get_redis_storage():
    """Lazy loader for Redis partition storage."""
    from .part_redis import RedisPartitionStorage
    return RedisPartitionStorage


def _get_local_blob_storage():
    """Lazy loader for local directory blob storage."""
    from .blob_local import LocalBlobStorage
    return LocalBlobStorage


def _get_s3_blob_storage():
    """Lazy loader for S3 blob storage."""
    from .blob_s3 import S3BlobStorage
    return S3BlobStorage


def _register_backends():
    """Register built-in backends with lazy loaders. Called when factory is first used."""
    if not StorageFactory._partition_backends:
        StorageFactory.register_partition("json", _get_json_storage)
        StorageFactory.register_partition("redis", _get_redis_storage)

    if not StorageFactory._blob_backends:
        StorageFactory.register_blob("local", _get_local_blob_storage)
        StorageFactory.register_blob("s3", _get_s3_blob_storage)
