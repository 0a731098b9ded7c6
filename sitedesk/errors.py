"""Error kinds raised by the editor, the storage adapters and the archiver."""

from enum import Enum
from typing import Optional, Sequence, Union, List

PathSegment = Union[str, int]


class SiteDeskError(Exception):
    """Base class for all sitedesk errors."""
    pass


class InvalidPathError(SiteDeskError):
    """An edit path cannot be applied to the shape of the document."""

    def __init__(self, path: Sequence[PathSegment], segment: PathSegment, found: str):
        self.path = list(path)
        self.segment = segment
        self.found = found
        super().__init__(
            f"Cannot traverse into {found} at segment {segment!r} of path {self.path}"
        )


class ConnectionUnavailable(SiteDeskError):
    """The remote client could not be initialized or reached."""

    def __init__(self, backend: str, reason: str = "not configured"):
        self.backend = backend
        self.reason = reason
        super().__init__(f"{backend} unavailable: {reason}")


class PartitionFetchError(SiteDeskError):
    def __init__(self, partition: str, reason: str):
        self.partition = partition
        self.reason = reason
        super().__init__(f"Failed to fetch partition '{partition}': {reason}")


class PartitionWriteError(SiteDeskError):
    def __init__(self, partition: str, reason: str):
        self.partition = partition
        self.reason = reason
        super().__init__(f"Failed to write partition '{partition}': {reason}")


class InvalidArchiveFormat(SiteDeskError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid archive format: {reason}")


class NotFoundError(SiteDeskError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Backup not found: {name}")


class UploadCollision(SiteDeskError):
    """An object with the same name already exists and overwriting is disabled."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Object already exists: {name}")


class ConfirmationError(SiteDeskError):
    """A destructive operation was attempted without a valid confirmation token."""
    pass


class BackupFailureReason(str, Enum):
    CONNECTION_UNAVAILABLE = "connection_unavailable"
    PARTITION_FETCH = "partition_fetch"
    UPLOAD = "upload"


class BackupFailed(SiteDeskError):
    def __init__(
        self,
        reason: BackupFailureReason,
        detail: str,
        partition: Optional[str] = None,
    ):
        self.reason = reason
        self.detail = detail
        self.partition = partition
        super().__init__(f"Backup failed ({reason.value}): {detail}")


class RestoreFailed(SiteDeskError):
    """Restore of one partition failed; earlier partitions stay restored."""

    def __init__(self, partition: str, reason: str, restored: Optional[List[str]] = None):
        self.partition = partition
        self.reason = reason
        self.restored = list(restored or [])
        super().__init__(
            f"Restore failed at partition '{partition}': {reason} "
            f"(already restored: {self.restored or 'none'})"
        )


class RecordNotFoundError(SiteDeskError):
    def __init__(self, partition: str, record_id):
        self.partition = partition
        self.record_id = record_id
        super().__init__(f"No record {record_id!r} in '{partition}'")


class UnsupportedOperation(SiteDeskError):
    """The operation does not apply to this collection's configuration."""
    pass
