"""S3-compatible blob storage (AWS S3, MinIO, Supabase/R2 S3 endpoints)."""

from dataclasses import dataclass
from typing import List, Optional

import aioboto3
from botocore.exceptions import ClientError, BotoCoreError

from ..base import BaseBlobStorage, BlobObject
from ..errors import ConnectionUnavailable, NotFoundError, UploadCollision
from .._utils import logger

COLLISION_CODES = {"PreconditionFailed", "ConditionalRequestConflict"}
NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


@dataclass
class S3BlobStorage(BaseBlobStorage):
    """Objects live under ``s3://<s3_bucket>/<s3_prefix><namespace>/``."""

    def __post_init__(self):
        self.bucket = self.global_config.get("s3_bucket")
        if not self.bucket:
            raise ValueError("s3_bucket must be configured for the s3 blob backend")
        prefix = self.global_config.get("s3_prefix", "") or ""
        self.prefix = f"{prefix}{self.namespace}/"
        self.endpoint_url: Optional[str] = self.global_config.get("s3_endpoint_url")
        self.region: Optional[str] = self.global_config.get("s3_region")
        self.session = aioboto3.Session()

    def _client(self):
        return self.session.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=self.region,
        )

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    async def upload(self, name: str, data: bytes, upsert: bool = False) -> None:
        params = {
            "Bucket": self.bucket,
            "Key": self._key(name),
            "Body": data,
            "ContentType": "application/json",
            "CacheControl": "max-age=3600",
        }
        if not upsert:
            params["IfNoneMatch"] = "*"

        try:
            async with self._client() as s3:
                await s3.put_object(**params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in COLLISION_CODES:
                raise UploadCollision(name) from e
            raise
        except BotoCoreError as e:
            raise ConnectionUnavailable("s3", str(e)) from e

        logger.info(f"Uploaded s3://{self.bucket}/{self._key(name)} ({len(data):,} bytes)")

    async def download(self, name: str) -> bytes:
        try:
            async with self._client() as s3:
                response = await s3.get_object(Bucket=self.bucket, Key=self._key(name))
                async with response["Body"] as stream:
                    return await stream.read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in NOT_FOUND_CODES:
                raise NotFoundError(name) from e
            raise
        except BotoCoreError as e:
            raise ConnectionUnavailable("s3", str(e)) from e

    async def list_objects(self) -> List[BlobObject]:
        objects = []
        try:
            async with self._client() as s3:
                paginator = s3.get_paginator("list_objects_v2")
                async for page in paginator.paginate(Bucket=self.bucket, Prefix=self.prefix):
                    for item in page.get("Contents", []):
                        name = item["Key"][len(self.prefix):]
                        objects.append(BlobObject(
                            name=name,
                            size=item.get("Size", 0),
                            created_at=item.get("LastModified"),
                        ))
        except BotoCoreError as e:
            raise ConnectionUnavailable("s3", str(e)) from e
        return objects

    async def check_health(self) -> bool:
        try:
            async with self._client() as s3:
                await s3.head_bucket(Bucket=self.bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"S3 health check failed: {e}")
            return False
