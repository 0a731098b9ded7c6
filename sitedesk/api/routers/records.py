"""Record management endpoints for list partitions."""

from fastapi import APIRouter, Depends
from typing import Dict

from ..dependencies import get_sitedesk
from ..exceptions import CollectionNotFoundError, to_http_error
from ..models import RecordCreate, RecordListResponse, RecordMove, RecordResponse, RecordUpdate
from sitedesk import SiteDesk
from sitedesk.collection import RecordCollection
from sitedesk.errors import SiteDeskError

router = APIRouter(prefix="/records", tags=["records"])


def _open_collection(sitedesk: SiteDesk, collection: str) -> RecordCollection:
    try:
        return sitedesk.collection(collection)
    except KeyError:
        raise CollectionNotFoundError(collection)


@router.get("/{collection}", response_model=RecordListResponse)
async def list_records(
    collection: str,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> RecordListResponse:
    """All records in display order."""
    records_collection = _open_collection(sitedesk, collection)
    try:
        records = await records_collection.list_records()
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return RecordListResponse(collection=collection, records=records, total=len(records))


@router.post("/{collection}", response_model=RecordResponse, status_code=201)
async def create_record(
    collection: str,
    body: RecordCreate,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> RecordResponse:
    """Add a record; the id and creation time are assigned by the server."""
    records_collection = _open_collection(sitedesk, collection)
    try:
        record = await records_collection.insert(body.values)
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return RecordResponse(collection=collection, record=record)


@router.get("/{collection}/{record_id}", response_model=RecordResponse)
async def get_record(
    collection: str,
    record_id: str,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> RecordResponse:
    records_collection = _open_collection(sitedesk, collection)
    try:
        record = await records_collection.get(record_id)
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return RecordResponse(collection=collection, record=record)


@router.patch("/{collection}/{record_id}", response_model=RecordResponse)
async def update_record(
    collection: str,
    record_id: str,
    body: RecordUpdate,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> RecordResponse:
    """Merge the given fields into a record."""
    records_collection = _open_collection(sitedesk, collection)
    try:
        record = await records_collection.update(record_id, body.values)
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return RecordResponse(collection=collection, record=record)


@router.delete("/{collection}/{record_id}")
async def delete_record(
    collection: str,
    record_id: str,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> Dict[str, str]:
    records_collection = _open_collection(sitedesk, collection)
    try:
        await records_collection.delete(record_id)
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return {"message": f"Record {record_id} deleted"}


@router.post("/{collection}/{record_id}/move", response_model=RecordListResponse)
async def move_record(
    collection: str,
    record_id: str,
    body: RecordMove,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> RecordListResponse:
    """Swap a record with its neighbour; returns the new order."""
    records_collection = _open_collection(sitedesk, collection)
    try:
        records = await records_collection.move(record_id, body.offset)
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return RecordListResponse(collection=collection, records=records, total=len(records))
