"""
SQLAlchemy implementations of the repository interfaces.
"""
from sqlalchemy import case, func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Iterable, List, Optional
import logging
from app.models.trip import Trip
from app.models.itinerary import ItineraryItem, GalleryPhoto
from app.models.memoir import Memoir
from app.repositories.interface import (
    TripRepository, ItemRepository, PhotoRepository, MemoirRepository
)

logger = logging.getLogger(__name__)


class SqlTripRepository(TripRepository):
    def __init__(self, db: Session):
        self.db = db

    def get(self, trip_id: int) -> Optional[Trip]:
        return self.db.query(Trip).filter(Trip.id == trip_id).first()


class SqlItemRepository(ItemRepository):
    def __init__(self, db: Session):
        self.db = db

    def list_for_trip(self, trip_id: int) -> List[ItineraryItem]:
        # Items without a start time sort last within their day
        return self.db.query(ItineraryItem).filter(
            ItineraryItem.trip_id == trip_id
        ).order_by(
            func.coalesce(ItineraryItem.day_index, 0).asc(),
            case((ItineraryItem.start_time.is_(None), 1), else_=0).asc(),
            ItineraryItem.start_time.asc(),
            ItineraryItem.id.asc()
        ).all()


class SqlPhotoRepository(PhotoRepository):
    def __init__(self, db: Session):
        self.db = db

    def list_for_items(self, item_ids: Iterable[int]) -> List[GalleryPhoto]:
        ids = list(item_ids)
        if not ids:
            return []
        return self.db.query(GalleryPhoto).filter(
            GalleryPhoto.trip_item_id.in_(ids)
        ).order_by(GalleryPhoto.id.asc()).all()

    def add(self, item_id: int, url: str) -> GalleryPhoto:
        photo = GalleryPhoto(trip_item_id=item_id, url=url)
        self.db.add(photo)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(photo)
        return photo

    def delete(self, photo_id: int) -> bool:
        photo = self.db.query(GalleryPhoto).filter(GalleryPhoto.id == photo_id).first()
        if not photo:
            return False
        self.db.delete(photo)
        self.db.commit()
        return True


class SqlMemoirRepository(MemoirRepository):
    def __init__(self, db: Session):
        self.db = db

    def get_for_trip(self, trip_id: int) -> Optional[Memoir]:
        return self.db.query(Memoir).filter(Memoir.trip_id == trip_id).first()

    def create(self, trip_id: int, title: str, photos: List[dict]) -> Memoir:
        memoir = Memoir(trip_id=trip_id, title=title, photos=photos)
        self.db.add(memoir)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(memoir)
        logger.info(f"Created memoir {memoir.id} for trip {trip_id} with {len(photos)} photos")
        return memoir

    def replace(self, memoir_id: int, title: str, photos: List[dict]) -> Memoir:
        memoir = self.db.query(Memoir).filter(Memoir.id == memoir_id).first()
        if not memoir:
            raise LookupError(f"Memoir {memoir_id} not found")
        # New list object so the JSON column is flagged as changed
        memoir.title = title
        memoir.photos = list(photos)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(memoir)
        return memoir
