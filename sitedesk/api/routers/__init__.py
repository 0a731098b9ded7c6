"""API routers."""

from . import backup, content, health, records

__all__ = ["backup", "content", "health", "records"]
