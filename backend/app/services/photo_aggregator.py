"""
Photo aggregation for memoirs.

Builds one ordered photo list from the two sources attached to itinerary
items: the single cover image of each item and the item's gallery photos.
"""
from typing import List, Sequence
import logging
from app.repositories.interface import PhotoRepository
from app.schemas.memoir import PhotoEntry, PhotoSource

logger = logging.getLogger(__name__)


def collect_cover_photos(items: Sequence) -> List[PhotoEntry]:
    """Cover image of every item that has one, in item order."""
    return [
        PhotoEntry(
            url=item.image_url,
            caption=item.title or "",
            source=PhotoSource.COVER,
            item_id=item.id
        )
        for item in items
        if item.image_url
    ]


def collect_all_photos(items: Sequence, photos: PhotoRepository) -> List[PhotoEntry]:
    """
    Collect cover and gallery photos for a set of itinerary items.
    
    Cover photos come first (caption = item title), then gallery photos
    (empty caption) from a single bulk lookup over all item ids. ``order``
    is the position in the combined list. If the gallery lookup fails the
    cover photos are returned alone.
    """
    if not items:
        return []
    
    cover_photos = collect_cover_photos(items)
    item_ids = [item.id for item in items]
    
    try:
        gallery_rows = photos.list_for_items(item_ids)
    except Exception as e:
        logger.error(f"Error fetching gallery photos for {len(item_ids)} items: {e}", exc_info=True)
        return _reindex(cover_photos)
    
    gallery_photos = [
        PhotoEntry(
            url=row.url,
            caption="",
            source=PhotoSource.GALLERY,
            item_id=row.trip_item_id
        )
        for row in gallery_rows or []
    ]
    
    return _reindex(cover_photos + gallery_photos)


def _reindex(entries: List[PhotoEntry]) -> List[PhotoEntry]:
    for index, entry in enumerate(entries):
        entry.order = index
    return entries
