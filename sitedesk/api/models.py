"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union
from datetime import datetime, timezone


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ContentEdit(BaseModel):
    path: List[Union[int, str]] = Field(..., min_length=1)
    value: Any = None


class ContentPatch(BaseModel):
    edits: List[ContentEdit] = Field(..., min_length=1)


class ContentReplace(BaseModel):
    document: Dict[str, Any]


class ContentResponse(BaseModel):
    editor: str
    key: Union[int, str]
    document: Any
    flat: Optional[Dict[str, str]] = None


class ContentPatchResponse(ContentResponse):
    applied: List[int] = Field(default_factory=list)
    rejected: List[int] = Field(default_factory=list)
    saved: bool = False


class RestoreConfirm(BaseModel):
    token: str = Field(..., min_length=1)


class HealthStatus(BaseModel):
    status: str  # "healthy", "degraded", "unhealthy"
    partitions: Dict[str, bool]
    blob: bool
    timestamp: datetime = Field(default_factory=_utc_now)


class RecordCreate(BaseModel):
    values: Dict[str, Any] = Field(default_factory=dict)


class RecordUpdate(BaseModel):
    values: Dict[str, Any] = Field(..., min_length=1)


class RecordMove(BaseModel):
    offset: int = Field(..., description="-1 moves one place up, 1 one place down")


class RecordResponse(BaseModel):
    collection: str
    record: Dict[str, Any]


class RecordListResponse(BaseModel):
    collection: str
    records: List[Dict[str, Any]]
    total: int
