import asyncio
import copy
import json
import os
from datetime import datetime, timezone
from typing import Any, Awaitable, List, Optional
import logging

logger = logging.getLogger("sitedesk")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def load_json(file_name: str) -> Optional[Any]:
    if not os.path.exists(file_name):
        return None
    with open(file_name, encoding="utf-8") as f:
        return json.load(f)


def write_json(json_obj: Any, file_name: str) -> None:
    with open(file_name, "w", encoding="utf-8") as f:
        json.dump(json_obj, f, indent=2, ensure_ascii=False)


def deep_copy(value: Any) -> Any:
    return copy.deepcopy(value)


async def with_timeout(aw: Awaitable[Any], timeout: Optional[float]) -> Any:
    """Await with an optional timeout in seconds (None or <= 0 disables it)."""
    if timeout is None or timeout <= 0:
        return await aw
    return await asyncio.wait_for(aw, timeout=timeout)


def describe_error(exc: BaseException, timeout: Optional[float] = None) -> str:
    """Turn an exception into the short reason string carried by errors."""
    if isinstance(exc, asyncio.TimeoutError):
        if timeout:
            return f"timed out after {timeout}s"
        return "timed out"
    message = str(exc)
    return message or type(exc).__name__


async def gather_fail_fast(*aws: Awaitable[Any]) -> List[Any]:
    """Like asyncio.gather, but cancel the remaining awaitables on first failure."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        raise
