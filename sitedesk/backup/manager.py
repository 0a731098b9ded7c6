"""Backup and restore orchestration for site content partitions."""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..base import BaseBlobStorage, BasePartitionStorage
from ..config import BackupConfig
from .._utils import logger, with_timeout, describe_error
from ..errors import (
    BackupFailed,
    BackupFailureReason,
    ConfirmationError,
    ConnectionUnavailable,
    InvalidArchiveFormat,
    NotFoundError,
    PartitionFetchError,
    SiteDeskError,
    UploadCollision,
)
from .confirmation import ConfirmationGate
from .exporter import PartitionExporter
from .models import ArchiveHeader, BackupMetadata, ConfirmationToken, RestoreResult
from .utils import (
    compute_checksum,
    decode_archive,
    encode_archive,
    generate_backup_name,
    is_placeholder,
    parse_backup_timestamp,
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class BackupManager:
    """Back up all configured partitions to one JSON archive and restore from it."""

    def __init__(
        self,
        partitions: Dict[str, BasePartitionStorage],
        blob_storage: Optional[BaseBlobStorage],
        config: Optional[BackupConfig] = None,
        request_timeout: Optional[float] = None,
    ):
        """Initialize backup manager.

        Args:
            partitions: Partition name to storage; these are exactly the
                partitions that get backed up and may be restored
            blob_storage: Object store holding the archives
            config: Naming and confirmation settings
            request_timeout: Bound for each remote call, in seconds
        """
        self.partitions = dict(partitions or {})
        self.blob_storage = blob_storage
        self.config = config or BackupConfig(partitions=tuple(self.partitions) or BackupConfig().partitions)
        self.request_timeout = request_timeout
        self._confirmations = ConfirmationGate(self.config.confirmation_ttl)

    async def create_backup(self) -> BackupMetadata:
        """Create a full backup of all partitions.

        Returns:
            BackupMetadata for the new archive

        Raises:
            BackupFailed: No storage available, any partition fetch failed, or
                the upload failed (including a name collision)
        """
        if not self.partitions or self.blob_storage is None:
            logger.error("Backup requested without partition or blob storage")
            raise BackupFailed(
                BackupFailureReason.CONNECTION_UNAVAILABLE,
                "partition or blob storage not configured",
            )

        name = generate_backup_name(self.config.name_prefix)
        created_at = parse_backup_timestamp(name, self.config.name_prefix)
        logger.info(f"Starting backup: {name}")

        exporter = PartitionExporter(self.partitions, self.request_timeout)
        try:
            data = await exporter.export()
        except ConnectionUnavailable as e:
            logger.error(f"Backup {name} aborted: {e}")
            raise BackupFailed(BackupFailureReason.CONNECTION_UNAVAILABLE, str(e)) from e
        except PartitionFetchError as e:
            logger.error(f"Backup {name} aborted: {e}")
            raise BackupFailed(BackupFailureReason.PARTITION_FETCH, str(e), partition=e.partition) from e

        statistics = exporter.get_statistics(data)
        header = ArchiveHeader(
            created_at=created_at,
            sitedesk_version=self._get_version(),
            partitions=list(data),
            statistics=statistics,
            checksum=compute_checksum(data),
        )
        payload = encode_archive(data, header)

        try:
            await with_timeout(
                self.blob_storage.upload(name, payload, upsert=False),
                self.request_timeout,
            )
        except UploadCollision as e:
            logger.error(f"Backup {name} not written, object already exists")
            raise BackupFailed(BackupFailureReason.UPLOAD, str(e)) from e
        except Exception as e:
            reason = describe_error(e, self.request_timeout)
            logger.error(f"Backup {name} upload failed: {reason}")
            raise BackupFailed(BackupFailureReason.UPLOAD, reason) from e

        logger.info(f"Backup complete: {name} ({len(payload):,} bytes)")

        return BackupMetadata(
            name=name,
            created_at=created_at,
            size_bytes=len(payload),
            partitions=header.partitions,
            statistics=statistics,
        )

    async def list_backups(self) -> List[BackupMetadata]:
        """List all available backups, newest first.

        Returns:
            List of BackupMetadata, without zero-byte or placeholder objects
        """
        if self.blob_storage is None:
            raise ConnectionUnavailable("blob storage")

        try:
            objects = await with_timeout(self.blob_storage.list_objects(), self.request_timeout)
        except SiteDeskError:
            raise
        except Exception as e:
            reason = describe_error(e, self.request_timeout)
            logger.error(f"Failed to list backups: {reason}")
            raise ConnectionUnavailable("blob storage", reason) from e

        backups = []
        for obj in objects:
            if is_placeholder(obj.name, obj.size):
                continue
            created_at = parse_backup_timestamp(obj.name, self.config.name_prefix) or obj.created_at or _EPOCH
            backups.append(BackupMetadata(
                name=obj.name,
                created_at=created_at,
                size_bytes=obj.size,
            ))

        backups.sort(key=lambda b: (b.created_at, b.name), reverse=True)
        return backups

    async def download_backup(self, name: str) -> bytes:
        """Return the raw archive bytes of a listed backup.

        Raises:
            NotFoundError: If ``name`` is not a listed backup
        """
        await self._require_known(name)
        try:
            return await with_timeout(self.blob_storage.download(name), self.request_timeout)
        except SiteDeskError:
            raise
        except Exception as e:
            reason = describe_error(e, self.request_timeout)
            logger.error(f"Failed to download backup {name}: {reason}")
            raise ConnectionUnavailable("blob storage", reason) from e

    async def request_restore(self, name: str) -> ConfirmationToken:
        """First step of a restore: describe the effect and issue a token.

        Raises:
            NotFoundError: If ``name`` is not a listed backup
        """
        await self._require_known(name)
        description = (
            f"Restoring '{name}' deletes every record in the partitions stored in the "
            f"archive (of {', '.join(self.partitions)}) and replaces them with the archived "
            f"records. Partitions are restored one at a time without rollback, so a failure "
            f"part-way leaves some partitions restored and the rest unchanged. This cannot "
            f"be undone without another backup."
        )
        token = self._confirmations.request(name, description)
        logger.warning(f"Restore of {name} requested, awaiting confirmation")
        return token

    async def restore_backup(self, name: str, token: str) -> RestoreResult:
        """Second step of a restore: replace live partitions with the archive.

        Args:
            name: Backup name, as returned by list_backups()
            token: Token issued by request_restore() for the same name

        Raises:
            ConfirmationError: Missing, expired, reused or mismatched token
            NotFoundError: If ``name`` is not a listed backup
            InvalidArchiveFormat: Archive unreadable; nothing was written
            RestoreFailed: A partition failed; earlier partitions stay restored
        """
        issued = self._confirmations.consume(token)
        if issued.backup_name != name:
            raise ConfirmationError(f"Confirmation was issued for '{issued.backup_name}', not '{name}'")

        data = await self.download_backup(name)
        logger.info(f"Starting restore: {name}")

        header, partitions = decode_archive(data)
        unknown = sorted(p for p in partitions if p not in self.partitions)
        if unknown:
            raise InvalidArchiveFormat(f"unknown partitions {unknown}")

        exporter = PartitionExporter(self.partitions, self.request_timeout)
        restored = await exporter.restore(partitions)

        logger.info(f"Restore complete: {name}")
        return RestoreResult(
            name=name,
            partitions=restored,
            statistics=exporter.get_statistics(partitions),
            header=header,
        )

    async def _require_known(self, name: str) -> None:
        backups = await self.list_backups()
        if not any(b.name == name for b in backups):
            raise NotFoundError(name)

    def _get_version(self) -> str:
        """Get sitedesk version."""
        try:
            from .. import __version__
            return __version__
        except ImportError:
            return "unknown"
