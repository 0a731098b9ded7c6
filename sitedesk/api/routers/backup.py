"""Backup and restore API endpoints."""

from fastapi import APIRouter, Depends, Response
from typing import List

from ..dependencies import get_backup_manager
from ..exceptions import to_http_error
from ..models import RestoreConfirm
from sitedesk.backup import BackupManager
from sitedesk.backup.models import BackupMetadata, ConfirmationToken, RestoreResult
from sitedesk.errors import SiteDeskError
from sitedesk._utils import logger

router = APIRouter(prefix="/backup", tags=["backup"])


@router.post("", response_model=BackupMetadata)
async def create_backup(
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> BackupMetadata:
    """Back up every configured partition into a new archive."""
    try:
        return await backup_manager.create_backup()
    except SiteDeskError as e:
        raise to_http_error(e) from e


@router.get("", response_model=List[BackupMetadata])
async def list_backups(
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> List[BackupMetadata]:
    """List all available backups, newest first."""
    try:
        return await backup_manager.list_backups()
    except SiteDeskError as e:
        raise to_http_error(e) from e


@router.get("/{name}/download")
async def download_backup(
    name: str,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> Response:
    """Download a backup archive as a JSON file."""
    try:
        data = await backup_manager.download_backup(name)
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return Response(
        content=data,
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={name}"}
    )


@router.post("/{name}/restore-request", response_model=ConfirmationToken)
async def request_restore(
    name: str,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> ConfirmationToken:
    """Describe what restoring ``name`` will do and issue a confirmation token."""
    try:
        return await backup_manager.request_restore(name)
    except SiteDeskError as e:
        raise to_http_error(e) from e


@router.post("/{name}/restore", response_model=RestoreResult)
async def restore_backup(
    name: str,
    body: RestoreConfirm,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> RestoreResult:
    """Restore ``name`` after confirmation. Live partitions are replaced."""
    try:
        result = await backup_manager.restore_backup(name, body.token)
    except SiteDeskError as e:
        logger.error(f"Restore of {name} via API failed: {e}")
        raise to_http_error(e) from e

    return result
