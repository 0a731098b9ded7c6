"""Content editing endpoints."""

from fastapi import APIRouter, Depends
from typing import Optional

from ..dependencies import get_sitedesk
from ..exceptions import EditorNotFoundError, to_http_error
from ..models import ContentPatch, ContentPatchResponse, ContentReplace, ContentResponse
from sitedesk import SiteDesk
from sitedesk.document import flatten_document
from sitedesk.editor import ContentEditor, coerce_key
from sitedesk.errors import SiteDeskError

router = APIRouter(prefix="/content", tags=["content"])


def _open_editor(sitedesk: SiteDesk, editor: str, key: str) -> ContentEditor:
    try:
        return sitedesk.editor(editor, coerce_key(key))
    except KeyError:
        raise EditorNotFoundError(editor)


def _flat(document) -> Optional[dict]:
    return flatten_document(document) if isinstance(document, dict) else None


@router.get("/{editor}/{key}", response_model=ContentResponse)
async def get_content(
    editor: str,
    key: str,
    flat: bool = False,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> ContentResponse:
    """Current document of a record, or the editor defaults when absent."""
    session = _open_editor(sitedesk, editor, key)
    try:
        document = await session.load()
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return ContentResponse(
        editor=editor,
        key=session.key,
        document=document,
        flat=_flat(document) if flat else None,
    )


@router.patch("/{editor}/{key}", response_model=ContentPatchResponse)
async def patch_content(
    editor: str,
    key: str,
    patch: ContentPatch,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> ContentPatchResponse:
    """Apply path edits in order; rejected edits are reported, not fatal.

    The record is saved once, and only when at least one edit applied.
    """
    session = _open_editor(sitedesk, editor, key)
    applied, rejected = [], []
    try:
        await session.load()
        for index, edit in enumerate(patch.edits):
            if session.update(edit.path, edit.value):
                applied.append(index)
            else:
                rejected.append(index)
        if session.dirty:
            await session.save()
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return ContentPatchResponse(
        editor=editor,
        key=session.key,
        document=session.document,
        applied=applied,
        rejected=rejected,
        saved=bool(applied),
    )


@router.put("/{editor}/{key}", response_model=ContentResponse)
async def replace_content(
    editor: str,
    key: str,
    body: ContentReplace,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> ContentResponse:
    """Replace the whole document and save it."""
    session = _open_editor(sitedesk, editor, key)
    try:
        await session.load()
        session.replace(body.document)
        await session.save()
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return ContentResponse(editor=editor, key=session.key, document=session.document)


@router.post("/{editor}/{key}/reset", response_model=ContentResponse)
async def reset_content(
    editor: str,
    key: str,
    sitedesk: SiteDesk = Depends(get_sitedesk)
) -> ContentResponse:
    """Overwrite the stored record with the editor defaults."""
    session = _open_editor(sitedesk, editor, key)
    try:
        document = await session.reset_to_defaults()
    except SiteDeskError as e:
        raise to_http_error(e) from e

    return ContentResponse(editor=editor, key=session.key, document=document)
