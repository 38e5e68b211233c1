"""
Itinerary item routes, including cover images and gallery photos.
"""
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session
from typing import List
import logging
from app.db.session import get_db
from app.models.user import User
from app.models.itinerary import ItineraryItem, GalleryPhoto
from app.schemas.itinerary import (
    ItineraryItemCreate, ItineraryItemUpdate, ItineraryItemResponse, GalleryPhotoResponse
)
from app.core.errors import UploadError, to_http_exception
from app.repositories.sql import SqlItemRepository, SqlPhotoRepository
from app.services.storage_service import ObjectStorage, build_upload_path, validate_image
from app.api.dependencies import get_current_user, get_storage
from app.api.routes.trips import check_trip_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips/{trip_id}/items", tags=["itinerary"])


def get_item(trip_id: int, item_id: int, db: Session) -> ItineraryItem:
    """Item of a trip or 404."""
    item = db.query(ItineraryItem).filter(
        ItineraryItem.id == item_id,
        ItineraryItem.trip_id == trip_id
    ).first()
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Itinerary item not found"
        )
    return item


async def store_upload(file: UploadFile, folder: str, storage: ObjectStorage) -> str:
    """Validate and store one uploaded image, returning its public URL."""
    content = await file.read()
    validate_image(file.filename, file.content_type, len(content))
    return storage.upload(content, build_upload_path(folder, file.filename))


@router.get("", response_model=List[ItineraryItemResponse])
async def list_items(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List items ordered by day, then start time (untimed items last)."""
    check_trip_access(trip_id, current_user, db)
    return SqlItemRepository(db).list_for_trip(trip_id)


@router.post("", response_model=ItineraryItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    trip_id: int,
    item_data: ItineraryItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an item to the itinerary."""
    check_trip_access(trip_id, current_user, db, require_edit=True)

    item = ItineraryItem(trip_id=trip_id, **item_data.model_dump())
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@router.put("/{item_id}", response_model=ItineraryItemResponse)
async def update_item(
    trip_id: int,
    item_id: int,
    item_data: ItineraryItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update an itinerary item."""
    check_trip_access(trip_id, current_user, db, require_edit=True)
    item = get_item(trip_id, item_id, db)

    for field, value in item_data.model_dump(exclude_unset=True).items():
        setattr(item, field, value)

    db.commit()
    db.refresh(item)
    return item


@router.delete("/{item_id}")
async def delete_item(
    trip_id: int,
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an itinerary item and its gallery photos."""
    check_trip_access(trip_id, current_user, db, require_edit=True)
    item = get_item(trip_id, item_id, db)

    db.delete(item)
    db.commit()
    return {"message": "Item deleted successfully"}


@router.post("/{item_id}/cover", response_model=ItineraryItemResponse)
async def upload_cover_image(
    trip_id: int,
    item_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage)
):
    """Upload and set the item's single cover image."""
    check_trip_access(trip_id, current_user, db, require_edit=True)
    item = get_item(trip_id, item_id, db)

    try:
        item.image_url = await store_upload(file, f"items/{trip_id}", storage)
    except UploadError as e:
        raise to_http_exception(e)

    db.commit()
    db.refresh(item)
    return item


@router.get("/{item_id}/photos", response_model=List[GalleryPhotoResponse])
async def list_gallery_photos(
    trip_id: int,
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List gallery photos of an item."""
    check_trip_access(trip_id, current_user, db)
    get_item(trip_id, item_id, db)
    return SqlPhotoRepository(db).list_for_items([item_id])


@router.post("/{item_id}/photos", status_code=status.HTTP_201_CREATED)
async def upload_gallery_photos(
    trip_id: int,
    item_id: int,
    files: List[UploadFile] = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage)
):
    """Upload gallery photos one at a time, inserting each row immediately.

    A failed file is skipped; the rest of the batch continues and the
    failures are reported once in the response.
    """
    check_trip_access(trip_id, current_user, db, require_edit=True)
    get_item(trip_id, item_id, db)
    photos_repo = SqlPhotoRepository(db)

    uploaded: List[GalleryPhoto] = []
    failed: List[str] = []
    for file in files:
        try:
            url = await store_upload(file, f"gallery/{item_id}", storage)
            uploaded.append(photos_repo.add(item_id, url))
        except Exception as e:
            logger.error(f"Error uploading gallery photo {file.filename} for item {item_id}: {e}")
            failed.append(file.filename)

    if files and not uploaded:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Photo upload failed: {', '.join(failed)}"
        )

    return {
        "photos": [GalleryPhotoResponse.model_validate(p) for p in uploaded],
        "failed": failed,
        "message": f"{len(failed)} photos failed to upload" if failed else "Photos uploaded successfully"
    }


@router.delete("/{item_id}/photos/{photo_id}")
async def delete_gallery_photo(
    trip_id: int,
    item_id: int,
    photo_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete one gallery photo."""
    check_trip_access(trip_id, current_user, db, require_edit=True)
    get_item(trip_id, item_id, db)

    photo = db.query(GalleryPhoto).filter(
        GalleryPhoto.id == photo_id,
        GalleryPhoto.trip_item_id == item_id
    ).first()
    if not photo:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Photo not found"
        )

    SqlPhotoRepository(db).delete(photo_id)
    return {"message": "Photo deleted successfully"}
