"""
Memoir assembly and editing.

``MemoirAssembler.load`` builds the memoir view for a trip: daily journals
are recomputed from the itinerary every time, and the persisted memoir is
created on first view or repaired in memory when its photo list is empty.
Edit mode works on a ``MemoirDraft``; nothing in a draft is persisted until
``save`` replaces the memoir's title and photo list in one write.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple
import logging
from app.core.errors import (
    ErrorKind, TripnoteError, TripNotFoundError, PhotoIndexError, EditForbiddenError,
    ConfirmationRequiredError, LoadError, PersistenceError
)
from app.core.notifications import INFO, Notifier
from app.core.session import SessionContext
from app.core.utils import tentative_update
from app.repositories.interface import (
    TripRepository, ItemRepository, PhotoRepository, MemoirRepository
)
from app.schemas.memoir import PhotoEntry, PhotoSource, DailyJournal
from app.services.day_grouper import build_daily_journals
from app.services.photo_aggregator import collect_all_photos
from app.services.storage_service import ObjectStorage, build_upload_path, validate_image
from app.services import export_service

logger = logging.getLogger(__name__)

MEMOIR_TITLE_SUFFIX = " - Travel Memoir"


@dataclass
class MemoirView:
    """What the memoir page shows right after loading."""
    memoir_id: int
    trip_id: int
    trip_title: str
    start_date: date
    end_date: date
    title: str
    photos: List[PhotoEntry]
    journals: List[DailyJournal]
    auto_repaired: bool = False


@dataclass
class MemoirDraft(MemoirView):
    """Edit-mode copy of a memoir view."""
    editing: bool = True
    revision: int = 0
    notifier: Notifier = field(default_factory=Notifier)
    context: Optional[SessionContext] = None  # Session that opened the draft

    def touch(self) -> None:
        self.revision += 1


@dataclass
class PhotoUpload:
    filename: str
    content_type: str
    content: bytes


@dataclass
class UploadReport:
    added: List[PhotoEntry] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def memoir_title_for(trip_title: str) -> str:
    return f"{trip_title}{MEMOIR_TITLE_SUFFIX}"


def parse_photo_records(records) -> List[PhotoEntry]:
    """Stored JSON photo list to PhotoEntry objects, skipping malformed rows."""
    photos = []
    for record in records or []:
        try:
            photos.append(PhotoEntry.model_validate(record))
        except ValueError as e:
            logger.warning(f"Skipping malformed memoir photo {record!r}: {e}")
    return photos


class MemoirAssembler:
    """Orchestrates the memoir pipeline over the repository interfaces."""

    def __init__(
        self,
        trips: TripRepository,
        items: ItemRepository,
        photos: PhotoRepository,
        memoirs: MemoirRepository,
        storage: Optional[ObjectStorage] = None
    ):
        self.trips = trips
        self.items = items
        self.photos = photos
        self.memoirs = memoirs
        self.storage = storage

    # ----------------------------------------------------------------- load

    def _fetch_items(self, trip_id: int, operation: str) -> list:
        try:
            return self.items.list_for_trip(trip_id)
        except Exception as e:
            logger.error(f"Error fetching itinerary items for trip {trip_id}: {e}", exc_info=True)
            raise LoadError(str(e), operation=operation) from e

    def load(self, trip_id: int, trip=None) -> MemoirView:
        """
        Load or create the memoir for a trip.

        Steps run strictly in order: trip, items, journals, memoir.
        - no memoir yet: aggregate photos and persist a new memoir
        - memoir with an empty photo list: aggregate photos in memory only
          (``auto_repaired``); the record changes only on an explicit save
        - otherwise the stored photo list is used as-is
        """
        if trip is None:
            try:
                trip = self.trips.get(trip_id)
            except Exception as e:
                logger.error(f"Error fetching trip {trip_id}: {e}", exc_info=True)
                raise LoadError(str(e), operation="Load memoir") from e
        if not trip:
            logger.error(f"Trip {trip_id} not found")
            raise TripNotFoundError("Trip not found", operation="Load memoir")

        items = self._fetch_items(trip_id, "Load memoir")
        journals = build_daily_journals(trip.start_date, items, trip.end_date)

        try:
            memoir = self.memoirs.get_for_trip(trip_id)
        except Exception as e:
            logger.error(f"Error fetching memoir for trip {trip_id}: {e}", exc_info=True)
            raise LoadError(str(e), operation="Load memoir") from e

        auto_repaired = False
        if memoir is None:
            photos = collect_all_photos(items, self.photos)
            try:
                memoir = self.memoirs.create(
                    trip_id, memoir_title_for(trip.title), [p.to_record() for p in photos]
                )
            except Exception as e:
                logger.error(f"Error creating memoir for trip {trip_id}: {e}", exc_info=True)
                raise PersistenceError(str(e), operation="Create memoir") from e
        elif not memoir.photos:
            logger.info(f"Memoir {memoir.id} photos empty, attempting auto-fill")
            photos = collect_all_photos(items, self.photos)
            auto_repaired = bool(photos)
        else:
            photos = parse_photo_records(memoir.photos)

        return MemoirView(
            memoir_id=memoir.id,
            trip_id=trip_id,
            trip_title=trip.title,
            start_date=trip.start_date,
            end_date=trip.end_date,
            title=memoir.title,
            photos=photos,
            journals=journals,
            auto_repaired=auto_repaired
        )

    # ----------------------------------------------------------------- edit

    def begin_edit(self, view: MemoirView, context: SessionContext) -> MemoirDraft:
        """Enter edit mode with a private copy of the view, owned by ``context``."""
        if context.trip_id != view.trip_id or not context.can_edit:
            raise EditForbiddenError(
                f"{context.username} cannot edit the memoir of trip {view.trip_id}",
                operation="Edit memoir"
            )
        return MemoirDraft(
            memoir_id=view.memoir_id,
            trip_id=view.trip_id,
            trip_title=view.trip_title,
            start_date=view.start_date,
            end_date=view.end_date,
            title=view.title,
            photos=[p.model_copy() for p in view.photos],
            journals=list(view.journals),
            auto_repaired=view.auto_repaired,
            context=context
        )

    def regenerate(self, draft: MemoirDraft, confirm: bool = False) -> MemoirDraft:
        """
        Rebuild photos and journals from the current itinerary.

        Destructive: unsaved captions and manual photo additions or removals
        are discarded. Requires ``confirm``. Not persisted until ``save``.
        """
        if not confirm:
            raise ConfirmationRequiredError(
                "Regenerating clears all photos and text in this memoir", operation="Regenerate"
            )

        started_at = draft.revision
        items = self._fetch_items(draft.trip_id, "Regenerate")
        photos = collect_all_photos(items, self.photos)
        journals = build_daily_journals(draft.start_date, items, draft.end_date)

        # The regenerate route runs in the threadpool: caption edits, uploads or a
        # save on the same draft can land while the fetches above are in flight
        if draft.revision != started_at or not draft.editing:
            logger.warning(f"Discarding stale regenerate result for memoir {draft.memoir_id}")
            return draft

        draft.photos = photos
        draft.journals = journals
        draft.auto_repaired = False
        draft.touch()
        if not items:
            draft.notifier.notify(INFO, "Regenerate", "The itinerary has no items")
        else:
            draft.notifier.notify(
                INFO, "Regenerate", f"Regenerated with {len(photos)} photos. Remember to save."
            )
        return draft

    def add_photos(self, draft: MemoirDraft, uploads: Sequence[PhotoUpload]) -> UploadReport:
        """
        Upload files one at a time and append each success to the draft.

        A failed file is skipped; files uploaded before it stay. One
        notification summarizes the failures at the end of the batch.
        """
        report = UploadReport()
        for upload in uploads:
            if not draft.editing:
                logger.warning(f"Memoir {draft.memoir_id} left edit mode during upload, stopping batch")
                break
            try:
                if self.storage is None:
                    raise TripnoteError("No object storage configured", operation="Upload")
                validate_image(upload.filename, upload.content_type, len(upload.content))
                path = build_upload_path(f"memoirs/{draft.trip_id}", upload.filename)
                url = self.storage.upload(upload.content, path)
            except Exception as e:
                logger.error(f"Error uploading {upload.filename} to memoir {draft.memoir_id}: {e}")
                report.failed.append(upload.filename)
                continue
            entry = PhotoEntry(
                url=url,
                caption="",
                order=len(draft.photos),
                source=PhotoSource.UPLOAD,
                item_id=None
            )
            draft.photos.append(entry)
            draft.touch()
            report.added.append(entry)

        if report.failed:
            draft.notifier.notify(
                ErrorKind.UPLOAD_FAILURE,
                "Photo upload",
                f"{len(report.failed)} of {len(uploads)} photos failed to upload: {', '.join(report.failed)}"
            )
        return report

    def _check_index(self, draft: MemoirDraft, index: int, operation: str) -> None:
        if index < 0 or index >= len(draft.photos):
            raise PhotoIndexError(f"No photo at position {index}", operation=operation)

    def delete_photo(self, draft: MemoirDraft, index: int) -> PhotoEntry:
        """Remove a photo. Orders are renumbered on save, gaps are fine until then."""
        self._check_index(draft, index, "Delete photo")
        removed = draft.photos.pop(index)
        draft.touch()
        return removed

    def edit_caption(self, draft: MemoirDraft, index: int, caption: str) -> PhotoEntry:
        self._check_index(draft, index, "Edit caption")
        draft.photos[index].caption = caption
        draft.touch()
        return draft.photos[index]

    def rename(self, draft: MemoirDraft, title: str) -> None:
        title = (title or "").strip()
        if not title:
            raise TripnoteError("Title must not be empty", operation="Rename memoir")
        draft.title = title
        draft.touch()

    def save(self, draft: MemoirDraft):
        """
        Persist title and the full photo list in one write.

        On success the draft leaves edit mode. On failure the draft is
        restored as it was and stays in edit mode; nothing is persisted.
        No version check: the last successful save wins.
        """
        with tentative_update(draft, "photos", "editing"):
            draft.photos = [p.model_copy(update={"order": i}) for i, p in enumerate(draft.photos)]
            draft.editing = False
            try:
                memoir = self.memoirs.replace(
                    draft.memoir_id, draft.title, [p.to_record() for p in draft.photos]
                )
            except Exception as e:
                logger.error(f"Error saving memoir {draft.memoir_id}: {e}", exc_info=True)
                draft.notifier.notify(ErrorKind.PERSISTENCE_FAILURE, "Save", "Saving failed")
                raise PersistenceError(str(e), operation="Save") from e
        draft.auto_repaired = False
        logger.info(f"Saved memoir {draft.memoir_id} with {len(draft.photos)} photos")
        return memoir

    # --------------------------------------------------------------- export

    def export_pdf(self, view: MemoirView, fetch_image=None) -> Tuple[str, bytes]:
        """Render the view to PDF. Returns (filename, content)."""
        document = export_service.build_document(
            view.title, view.start_date, view.end_date, view.journals, view.photos
        )
        fetch_image = fetch_image or export_service.make_image_fetcher(self.storage)
        content = export_service.render_memoir_pdf(document, fetch_image)
        return f"{view.trip_title}-Memoir.pdf", content


def _draft_key(context: SessionContext) -> Tuple[int, int]:
    return context.trip_id, context.user_id


class DraftRegistry:
    """Edit-mode drafts held in process, one per session (trip, user)."""

    def __init__(self):
        self._drafts: Dict[Tuple[int, int], MemoirDraft] = {}

    def get(self, context: SessionContext) -> Optional[MemoirDraft]:
        return self._drafts.get(_draft_key(context))

    def put(self, draft: MemoirDraft) -> MemoirDraft:
        """Register a draft under the session that opened it."""
        if draft.context is None:
            raise ValueError("Draft has no session context")
        self._drafts[_draft_key(draft.context)] = draft
        return draft

    def discard(self, context: SessionContext) -> Optional[MemoirDraft]:
        return self._drafts.pop(_draft_key(context), None)

    def clear(self) -> None:
        self._drafts.clear()


draft_registry = DraftRegistry()
