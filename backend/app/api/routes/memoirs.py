"""
Memoir routes: view, edit-mode draft operations, save and PDF export.
"""
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List
from urllib.parse import quote
import logging
from app.db.session import get_db
from app.models.user import User
from app.schemas.memoir import (
    MemoirResponse, MemoirDraftResponse, MemoirTitleUpdate, CaptionUpdate,
    RegenerateRequest, NotificationResponse
)
from app.core.errors import TripnoteError, to_http_exception
from app.core.session import SessionContext
from app.core.utils import safe_filename
from app.services.memoir_service import (
    MemoirAssembler, MemoirView, MemoirDraft, PhotoUpload, DraftRegistry, draft_registry
)
from app.api.dependencies import get_current_user, get_memoir_assembler
from app.api.routes.trips import check_trip_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/memoirs", tags=["memoirs"])


def get_draft_registry() -> DraftRegistry:
    return draft_registry


def view_response(view: MemoirView) -> MemoirResponse:
    return MemoirResponse(
        id=view.memoir_id,
        trip_id=view.trip_id,
        trip_title=view.trip_title,
        start_date=view.start_date,
        end_date=view.end_date,
        title=view.title,
        photos=view.photos,
        journals=view.journals,
        auto_repaired=view.auto_repaired
    )


def draft_response(draft: MemoirDraft) -> MemoirDraftResponse:
    return MemoirDraftResponse(
        **view_response(draft).model_dump(),
        editing=draft.editing,
        revision=draft.revision,
        notifications=[NotificationResponse(**n.as_dict()) for n in draft.notifier.drain()]
    )


def require_draft(context: SessionContext, registry: DraftRegistry) -> MemoirDraft:
    """Draft opened by this session, or 404."""
    draft = registry.get(context)
    if draft is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Memoir is not in edit mode"
        )
    return draft


@router.get("/{trip_id}", response_model=MemoirResponse)
async def get_memoir(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler)
):
    """Load the memoir of a trip, creating it on first view."""
    trip, _ = check_trip_access(trip_id, current_user, db)
    try:
        view = assembler.load(trip_id, trip=trip)
    except TripnoteError as e:
        raise to_http_exception(e)
    return view_response(view)


@router.post("/{trip_id}/draft", response_model=MemoirDraftResponse)
async def start_editing(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Enter edit mode. Returns the existing draft if one is open."""
    trip, context = check_trip_access(trip_id, current_user, db, require_edit=True)

    draft = registry.get(context)
    if draft is None:
        try:
            view = assembler.load(trip_id, trip=trip)
            draft = registry.put(assembler.begin_edit(view, context))
        except TripnoteError as e:
            raise to_http_exception(e)
    return draft_response(draft)


@router.get("/{trip_id}/draft", response_model=MemoirDraftResponse)
async def get_draft(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Current edit-mode draft."""
    _, context = check_trip_access(trip_id, current_user, db, require_edit=True)
    return draft_response(require_draft(context, registry))


@router.patch("/{trip_id}/draft", response_model=MemoirDraftResponse)
async def rename_draft(
    trip_id: int,
    update: MemoirTitleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Change the memoir title in the draft."""
    _, context = check_trip_access(trip_id, current_user, db, require_edit=True)
    draft = require_draft(context, registry)
    try:
        assembler.rename(draft, update.title)
    except TripnoteError as e:
        raise to_http_exception(e)
    return draft_response(draft)


@router.delete("/{trip_id}/draft")
async def cancel_editing(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Leave edit mode, discarding unsaved changes."""
    _, context = check_trip_access(trip_id, current_user, db)
    registry.discard(context)
    return {"message": "Edit mode cancelled"}


@router.post("/{trip_id}/draft/regenerate", response_model=MemoirDraftResponse)
def regenerate_draft(
    trip_id: int,
    request: RegenerateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Rebuild photos and journals from the itinerary. Must be confirmed; not saved.

    Declared sync so the item and photo fetches run in the threadpool.
    """
    _, context = check_trip_access(trip_id, current_user, db, require_edit=True)
    draft = require_draft(context, registry)
    try:
        assembler.regenerate(draft, confirm=request.confirm)
    except TripnoteError as e:
        raise to_http_exception(e)
    return draft_response(draft)


@router.post("/{trip_id}/draft/photos", response_model=MemoirDraftResponse)
async def add_draft_photos(
    trip_id: int,
    files: List[UploadFile] = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Upload photos into the draft; failures are reported once for the batch."""
    _, context = check_trip_access(trip_id, current_user, db, require_edit=True)
    draft = require_draft(context, registry)

    uploads = [
        PhotoUpload(filename=file.filename, content_type=file.content_type, content=await file.read())
        for file in files
    ]
    report = assembler.add_photos(draft, uploads)
    if uploads and not report.added:
        # Every file failed: surface the batch notification as an error
        notifications = draft.notifier.drain()
        detail = notifications[-1].message if notifications else "Photo upload failed"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    return draft_response(draft)


@router.patch("/{trip_id}/draft/photos/{index}", response_model=MemoirDraftResponse)
async def edit_draft_caption(
    trip_id: int,
    index: int,
    update: CaptionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Edit the caption of the photo at a list position."""
    _, context = check_trip_access(trip_id, current_user, db, require_edit=True)
    draft = require_draft(context, registry)
    try:
        assembler.edit_caption(draft, index, update.caption)
    except TripnoteError as e:
        raise to_http_exception(e)
    return draft_response(draft)


@router.delete("/{trip_id}/draft/photos/{index}", response_model=MemoirDraftResponse)
async def delete_draft_photo(
    trip_id: int,
    index: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Remove the photo at a list position."""
    _, context = check_trip_access(trip_id, current_user, db, require_edit=True)
    draft = require_draft(context, registry)
    try:
        assembler.delete_photo(draft, index)
    except TripnoteError as e:
        raise to_http_exception(e)
    return draft_response(draft)


@router.post("/{trip_id}/draft/save", response_model=MemoirDraftResponse)
async def save_draft(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Persist the draft's title and photos. On failure the draft stays open."""
    _, context = check_trip_access(trip_id, current_user, db, require_edit=True)
    draft = require_draft(context, registry)
    try:
        assembler.save(draft)
    except TripnoteError as e:
        raise to_http_exception(e)
    registry.discard(context)
    return draft_response(draft)


@router.get("/{trip_id}/export")
def export_memoir(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assembler: MemoirAssembler = Depends(get_memoir_assembler)
):
    """Download the memoir as a single-page PDF.

    Declared sync: remote photo fetches block, so rendering runs in the threadpool.
    """
    trip, _ = check_trip_access(trip_id, current_user, db)
    try:
        view = assembler.load(trip_id, trip=trip)
        filename, content = assembler.export_pdf(view)
    except TripnoteError as e:
        raise to_http_exception(e)

    filename = safe_filename(filename, fallback="memoir.pdf")
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}
    )
