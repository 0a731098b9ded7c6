import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

from .backup import BackupManager
from .config import SiteDeskConfig, validate_config
from .collection import RecordCollection
from .editor import ContentEditor
from ._storage.factory import StorageFactory, _register_backends
from ._utils import logger
from .base import BaseBlobStorage, BasePartitionStorage


class SiteDesk:
    """Site content store: partitions, the backup archiver, editors and collections."""

    def __init__(self, config: Optional[SiteDeskConfig] = None):
        """Initialize SiteDesk with configuration object.

        Args:
            config: SiteDeskConfig object. If None, uses defaults.
        """
        self.config = config or SiteDeskConfig()
        for warning in validate_config(self.config):
            logger.warning(f"Config: {warning}")

        self._init_working_dir()
        self._init_storage()
        self._init_backup()

        logger.info(f"SiteDesk initialized with config: {self.config}")

    def _init_working_dir(self):
        """Initialize working and backup directories."""
        dirs = [Path(self.config.storage.working_dir)]
        if self.config.storage.blob_backend == "local":
            dirs.append(Path(self.config.storage.backup_dir))
        for directory in dirs:
            if not directory.exists():
                logger.info(f"Creating directory {directory}")
                directory.mkdir(parents=True, exist_ok=True)
        self.working_dir = str(dirs[0])

    def _init_storage(self):
        """Initialize storage backends using factory pattern."""
        _register_backends()
        global_config = self.config.to_dict()

        self.partitions: Dict[str, BasePartitionStorage] = {
            name: StorageFactory.create_partition_storage(
                backend=self.config.storage.partition_backend,
                namespace=name,
                global_config=global_config,
            )
            for name in self.config.partition_names()
        }
        self.blob_storage: BaseBlobStorage = StorageFactory.create_blob_storage(
            backend=self.config.storage.blob_backend,
            namespace=self.config.backup.bucket,
            global_config=global_config,
        )

    def _init_backup(self):
        """Initialize the archiver over the backed-up partitions only."""
        self.backup_manager = BackupManager(
            partitions={name: self.partitions[name] for name in self.config.backup.partitions},
            blob_storage=self.blob_storage,
            config=self.config.backup,
            request_timeout=self.config.storage.request_timeout,
        )

    def editor(self, name: str, key: Any) -> ContentEditor:
        """New edit session over the record of editor ``name`` identified by ``key``."""
        editor_config = self.config.editor(name)
        return ContentEditor(
            storage=self.partitions[editor_config.partition],
            config=editor_config,
            key=key,
            request_timeout=self.config.storage.request_timeout,
        )

    def collection(self, name: str) -> RecordCollection:
        """Record-by-record access to the list partition of collection ``name``."""
        collection_config = self.config.collection(name)
        return RecordCollection(
            storage=self.partitions[collection_config.partition],
            config=collection_config,
            request_timeout=self.config.storage.request_timeout,
        )

    async def check_health(self) -> Dict[str, bool]:
        """Health per storage: ``partition:<name>`` entries plus ``blob``."""
        names = [f"partition:{name}" for name in self.partitions] + ["blob"]
        storages = list(self.partitions.values()) + [self.blob_storage]
        results = await asyncio.gather(
            *(storage.check_health() for storage in storages),
            return_exceptions=True,
        )
        return {name: result is True for name, result in zip(names, results)}

    async def close(self):
        """Release backend connections."""
        for storage in list(self.partitions.values()) + [self.blob_storage]:
            if hasattr(storage, "close"):
                await storage.close()
