"""Local directory blob storage."""

import asyncio
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from ..base import BaseBlobStorage, BlobObject
from ..errors import NotFoundError, UploadCollision
from .._utils import logger


@dataclass
class LocalBlobStorage(BaseBlobStorage):
    """Store objects as files in ``<backup_dir>/<bucket>``."""

    def __post_init__(self):
        backup_dir = self.global_config.get("backup_dir", "./backups")
        self.root = Path(backup_dir) / self.namespace
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"Invalid object name: {name!r}")
        return self.root / name

    def _write(self, path: Path, data: bytes, upsert: bool) -> None:
        mode = "wb" if upsert else "xb"
        try:
            f = open(path, mode)
        except FileExistsError:
            raise UploadCollision(path.name)
        try:
            with f:
                f.write(data)
        except Exception:
            # A partial new object must not show up in listings
            if not upsert:
                path.unlink(missing_ok=True)
            raise

    async def upload(self, name: str, data: bytes, upsert: bool = False) -> None:
        path = self._path(name)
        await asyncio.to_thread(self._write, path, data, upsert)
        logger.info(f"Uploaded {name} to {self.root} ({len(data):,} bytes)")

    async def download(self, name: str) -> bytes:
        path = self._path(name)
        if not path.is_file():
            raise NotFoundError(name)
        return await asyncio.to_thread(path.read_bytes)

    async def list_objects(self) -> List[BlobObject]:
        objects = []
        with os.scandir(self.root) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                stat = entry.stat()
                objects.append(BlobObject(
                    name=entry.name,
                    size=stat.st_size,
                    created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                ))
        return objects

    async def check_health(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.W_OK)
