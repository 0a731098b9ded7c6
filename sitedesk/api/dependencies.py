"""Dependency injection for FastAPI."""

from fastapi import Depends, Request
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sitedesk import SiteDesk
    from sitedesk.backup import BackupManager


async def get_sitedesk(request: Request) -> "SiteDesk":
    """Get SiteDesk instance from app state."""
    return request.app.state.sitedesk


async def get_backup_manager(sitedesk: "SiteDesk" = Depends(get_sitedesk)) -> "BackupManager":
    """Backup manager of the app's SiteDesk."""
    return sitedesk.backup_manager
