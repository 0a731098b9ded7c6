"""Custom exceptions for FastAPI application."""

from fastapi import HTTPException
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from sitedesk.errors import (
    BackupFailed,
    BackupFailureReason,
    ConfirmationError,
    ConnectionUnavailable,
    InvalidArchiveFormat,
    InvalidPathError,
    NotFoundError,
    RecordNotFoundError,
    SiteDeskError,
    UnsupportedOperation,
    UploadCollision,
)


class SiteDeskAPIError(HTTPException):
    """Base exception for sitedesk API errors."""
    pass


class BackupNotFoundError(SiteDeskAPIError):
    def __init__(self, name: str):
        super().__init__(HTTP_404_NOT_FOUND, f"Backup {name} not found")


class EditorNotFoundError(SiteDeskAPIError):
    def __init__(self, name: str):
        super().__init__(HTTP_404_NOT_FOUND, f"Editor {name} not found")


class CollectionNotFoundError(SiteDeskAPIError):
    def __init__(self, name: str):
        super().__init__(HTTP_404_NOT_FOUND, f"Collection {name} not found")


class RecordNotFound(SiteDeskAPIError):
    def __init__(self, detail: str):
        super().__init__(HTTP_404_NOT_FOUND, detail)


class ConflictError(SiteDeskAPIError):
    def __init__(self, detail: str):
        super().__init__(HTTP_409_CONFLICT, detail)


class UnprocessableError(SiteDeskAPIError):
    def __init__(self, detail: str):
        super().__init__(HTTP_422_UNPROCESSABLE_ENTITY, detail)


class UpstreamError(SiteDeskAPIError):
    def __init__(self, detail: str):
        super().__init__(HTTP_502_BAD_GATEWAY, detail)


class StorageUnavailableError(SiteDeskAPIError):
    def __init__(self, backend: str):
        super().__init__(HTTP_503_SERVICE_UNAVAILABLE, f"{backend} backend temporarily unavailable")


def to_http_error(error: SiteDeskError) -> SiteDeskAPIError:
    """Map a domain error onto the HTTP error the API responds with."""
    if isinstance(error, NotFoundError):
        return BackupNotFoundError(error.name)
    if isinstance(error, RecordNotFoundError):
        return RecordNotFound(str(error))
    if isinstance(error, (UploadCollision, ConfirmationError)):
        return ConflictError(str(error))
    if isinstance(error, (InvalidArchiveFormat, InvalidPathError, UnsupportedOperation)):
        return UnprocessableError(str(error))
    if isinstance(error, ConnectionUnavailable):
        return StorageUnavailableError(error.backend)
    if isinstance(error, BackupFailed):
        if isinstance(error.__cause__, UploadCollision):
            return ConflictError(str(error))
        if error.reason == BackupFailureReason.CONNECTION_UNAVAILABLE:
            return StorageUnavailableError("storage")
        return UpstreamError(str(error))
    return UpstreamError(str(error))
