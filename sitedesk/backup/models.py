"""Data models for backup/restore operations."""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

ARCHIVE_FORMAT_VERSION = 1


class ArchiveHeader(BaseModel):
    """Header stored under the reserved ``__archive__`` key of an archive."""

    format_version: int = Field(ARCHIVE_FORMAT_VERSION, description="Archive format version")
    created_at: datetime = Field(..., description="Backup creation timestamp")
    sitedesk_version: str = Field("unknown", description="sitedesk version")
    partitions: List[str] = Field(..., description="Partition names in the archive")
    statistics: Dict[str, int] = Field(default_factory=dict, description="Record count per partition")
    checksum: str = Field("", description="SHA-256 checksum of the partition payload")


class BackupMetadata(BaseModel):
    """Backup metadata for listings and API responses."""

    name: str
    created_at: datetime
    size_bytes: int
    partitions: List[str] = Field(default_factory=list)
    statistics: Dict[str, int] = Field(default_factory=dict)


class ConfirmationToken(BaseModel):
    """Proof that an operator confirmed a destructive restore."""

    token: str
    backup_name: str
    description: str
    expires_at: datetime


class RestoreResult(BaseModel):
    name: str
    partitions: List[str]
    statistics: Dict[str, int] = Field(default_factory=dict)
    header: Optional[ArchiveHeader] = None
