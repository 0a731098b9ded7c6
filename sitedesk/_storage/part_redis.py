"""Redis-based partition storage for shared deployments."""

import json
from dataclasses import dataclass, field
from typing import Optional, Any, List, Tuple

import redis.asyncio as aioredis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry
from redis.exceptions import RedisError, ConnectionError as RedisConnectionError

from ..base import BasePartitionStorage, Record
from ..errors import ConnectionUnavailable
from .._utils import logger


@dataclass
class RedisPartitionStorage(BasePartitionStorage):
    """Store a partition as one Redis list of JSON-encoded records."""

    _redis_client: Optional[Any] = field(init=False, default=None)
    _connection_pool: Optional[Any] = field(init=False, default=None)
    _initialized: bool = field(init=False, default=False)

    def __post_init__(self):
        self._key = f"sitedesk:partition:{self.namespace}"

        self.redis_url = self.global_config.get("redis_url", "redis://localhost:6379")
        self.redis_password = self.global_config.get("redis_password", None)
        self.max_connections = self.global_config.get("redis_max_connections", 50)
        self.socket_timeout = self.global_config.get("redis_socket_timeout", 5.0)
        self.connection_timeout = self.global_config.get("redis_connection_timeout", 5.0)
        self.health_check_interval = self.global_config.get("redis_health_check_interval", 30)

    async def _ensure_initialized(self):
        """Ensure Redis connection is initialized."""
        if self._initialized:
            return

        retry = Retry(
            ExponentialBackoff(cap=10, base=1),
            retries=3,
            supported_errors=(RedisConnectionError, TimeoutError, ConnectionError)
        )

        self._connection_pool = aioredis.ConnectionPool.from_url(
            self.redis_url,
            password=self.redis_password,
            max_connections=self.max_connections,
            socket_timeout=self.socket_timeout,
            socket_connect_timeout=self.connection_timeout,
            decode_responses=False,
            retry=retry,
            health_check_interval=self.health_check_interval
        )

        self._redis_client = aioredis.Redis(
            connection_pool=self._connection_pool,
            auto_close_connection_pool=False
        )

        try:
            await self._redis_client.ping()
            logger.info(f"Connected to Redis for partition: {self.namespace}")
        except (RedisError, OSError) as e:
            logger.error(f"Redis connection failed: {e}")
            raise ConnectionUnavailable("redis", str(e)) from e

        self._initialized = True

    def _serialize(self, record: Record) -> bytes:
        return json.dumps(record, default=str).encode("utf-8")

    def _deserialize(self, data: bytes) -> Record:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)

    async def select_all(self) -> List[Record]:
        await self._ensure_initialized()
        raw = await self._redis_client.lrange(self._key, 0, -1)
        return [self._deserialize(item) for item in raw]

    async def delete_all(self) -> None:
        await self._ensure_initialized()
        await self._redis_client.delete(self._key)
        logger.info(f"Dropped all records in Redis partition: {self.namespace}")

    async def insert_many(self, records: List[Record]) -> None:
        if not records:
            return
        await self._ensure_initialized()
        await self._redis_client.rpush(self._key, *[self._serialize(r) for r in records])
        logger.debug(f"Inserted {len(records)} records into Redis partition: {self.namespace}")

    async def upsert(self, record: Record, conflict_key: str) -> None:
        if conflict_key not in record:
            raise KeyError(f"Record has no conflict key '{conflict_key}'")
        merged = await self.update_by(conflict_key, record[conflict_key], record)
        if merged is None:
            await self._redis_client.rpush(self._key, self._serialize(record))

    async def _find(self, field_name: str, value: Any) -> Tuple[Optional[int], Optional[bytes]]:
        await self._ensure_initialized()
        raw = await self._redis_client.lrange(self._key, 0, -1)
        for index, item in enumerate(raw):
            if self._deserialize(item).get(field_name) == value:
                return index, item
        return None, None

    async def update_by(self, field_name: str, value: Any, changes: Record) -> Optional[Record]:
        index, raw = await self._find(field_name, value)
        if index is None:
            return None
        merged = {**self._deserialize(raw), **changes}
        await self._redis_client.lset(self._key, index, self._serialize(merged))
        return merged

    async def delete_by(self, field_name: str, value: Any) -> bool:
        index, raw = await self._find(field_name, value)
        if index is None:
            return False
        await self._redis_client.lrem(self._key, 1, raw)
        logger.debug(f"Deleted record {field_name}={value!r} from Redis partition: {self.namespace}")
        return True

    async def check_health(self) -> bool:
        try:
            await self._ensure_initialized()
            return bool(await self._redis_client.ping())
        except (ConnectionUnavailable, RedisError):
            return False

    async def close(self):
        """Release the client and its connection pool."""
        if self._redis_client:
            await self._redis_client.aclose()
        if self._connection_pool:
            await self._connection_pool.disconnect()
        self._redis_client = None
        self._connection_pool = None
        self._initialized = False
