"""Utility functions for backup/restore operations."""

import hashlib
import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from .._utils import logger
from ..errors import InvalidArchiveFormat
from .models import ArchiveHeader

HEADER_KEY = "__archive__"

# Marker objects some stores create for "empty folders"
PLACEHOLDER_NAMES = {".emptyFolderPlaceholder", ".keep", ".gitkeep"}

_TIMESTAMP_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2})-(\d{2})-(\d{2})(?:-(\d{1,6}))?Z\.json$"
)


def generate_backup_name(prefix: str = "backup-", now: Optional[datetime] = None) -> str:
    """Generate a backup object name from the current UTC time.

    Returns:
        Name in format: backup-YYYY-MM-DDTHH-MM-SS-mmmZ.json, i.e. an ISO 8601
        timestamp with ':' and '.' replaced by '-'
    """
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    return f"{prefix}{timestamp.replace(':', '-').replace('.', '-')}.json"


def parse_backup_timestamp(name: str, prefix: str = "backup-") -> Optional[datetime]:
    """Recover the creation time encoded in a backup name, or None."""
    if not name.startswith(prefix):
        return None
    match = _TIMESTAMP_RE.fullmatch(name[len(prefix):])
    if not match:
        return None
    date, hour, minute, second, fraction = match.groups()
    micro = int((fraction or "0").ljust(6, "0"))
    try:
        return datetime.fromisoformat(f"{date}T{hour}:{minute}:{second}").replace(
            microsecond=micro, tzinfo=timezone.utc
        )
    except ValueError:
        return None


def is_placeholder(name: str, size: int) -> bool:
    """True for zero-byte objects and directory/placeholder markers."""
    return size == 0 or name.endswith("/") or name in PLACEHOLDER_NAMES


def compute_checksum(partitions: Dict[str, List[Any]]) -> str:
    """Compute SHA-256 checksum of the partition payload.

    Hashes a canonical JSON rendering (sorted keys, no whitespace) so the
    checksum survives re-serialization of the archive.

    Returns:
        SHA-256 checksum as hex string with 'sha256:' prefix
    """
    canonical = json.dumps(partitions, sort_keys=True, separators=(",", ":"), default=str)
    return f"sha256:{hashlib.sha256(canonical.encode('utf-8')).hexdigest()}"


def encode_archive(partitions: Dict[str, List[Any]], header: ArchiveHeader) -> bytes:
    """Serialize partitions plus header to UTF-8 JSON bytes."""
    payload: Dict[str, Any] = {HEADER_KEY: json.loads(header.model_dump_json())}
    payload.update(partitions)
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str).encode("utf-8")


def decode_archive(data: bytes) -> Tuple[Optional[ArchiveHeader], Dict[str, List[Any]]]:
    """Parse and validate archive bytes.

    Archives written before the header existed (a bare partition mapping) are
    accepted and return a None header.

    Raises:
        InvalidArchiveFormat: Not JSON, not an object, a partition that is not
            a list of objects, a malformed header, or a checksum mismatch
    """
    try:
        parsed = json.loads(data.decode("utf-8") if isinstance(data, bytes) else data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidArchiveFormat(f"not valid JSON ({e})") from e

    if not isinstance(parsed, dict):
        raise InvalidArchiveFormat(f"top level is {type(parsed).__name__}, expected object")

    header = None
    raw_header = parsed.pop(HEADER_KEY, None)
    if raw_header is not None:
        try:
            header = ArchiveHeader.model_validate(raw_header)
        except ValidationError as e:
            raise InvalidArchiveFormat(f"malformed header ({e.error_count()} errors)") from e

    for name, records in parsed.items():
        if not isinstance(records, list):
            raise InvalidArchiveFormat(f"partition '{name}' is {type(records).__name__}, expected array")
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise InvalidArchiveFormat(
                    f"record {index} of partition '{name}' is {type(record).__name__}, expected object"
                )

    if header is not None:
        if sorted(header.partitions) != sorted(parsed.keys()):
            raise InvalidArchiveFormat(
                f"header lists {sorted(header.partitions)} but archive holds {sorted(parsed.keys())}"
            )
        if header.checksum:
            actual = compute_checksum(parsed)
            if actual != header.checksum:
                raise InvalidArchiveFormat(f"checksum mismatch (expected {header.checksum}, got {actual})")
            logger.debug(f"Archive checksum verified: {actual}")

    return header, parsed
