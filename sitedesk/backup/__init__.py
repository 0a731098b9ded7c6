"""Backup and restore of site content partitions."""

from .manager import BackupManager
from .models import BackupMetadata, ConfirmationToken, RestoreResult

__all__ = ["BackupManager", "BackupMetadata", "ConfirmationToken", "RestoreResult"]
