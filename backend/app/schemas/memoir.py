"""
Pydantic schemas for the memoir document.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date
from enum import Enum
from app.schemas.itinerary import ItineraryItemResponse


class PhotoSource(str, Enum):
    """Where a memoir photo came from."""
    COVER = "cover"
    GALLERY = "gallery"
    UPLOAD = "upload"


class PhotoEntry(BaseModel):
    """One photo in a memoir. Serialized with the `itemId` key."""
    url: str
    caption: str = ""
    order: int = 0
    source: PhotoSource
    item_id: Optional[int] = Field(None, alias="itemId")
    
    class Config:
        populate_by_name = True
    
    def to_record(self) -> dict:
        """JSON-ready dict in the persisted layout."""
        return self.model_dump(by_alias=True, mode="json")


class DailyJournal(BaseModel):
    """Derived per-day narrative. Recomputed on every load, never stored."""
    day_index: int
    date: date
    content: str
    items: List[ItineraryItemResponse] = []


class NotificationResponse(BaseModel):
    """User-visible notification attached to a response."""
    kind: str
    operation: str
    message: str


class MemoirResponse(BaseModel):
    """Schema for the memoir view."""
    id: int
    trip_id: int
    trip_title: str
    start_date: date
    end_date: date
    title: str
    photos: List[PhotoEntry] = []
    journals: List[DailyJournal] = []
    auto_repaired: bool = False  # Photos were re-aggregated in memory, not yet saved


class MemoirDraftResponse(MemoirResponse):
    """Schema for an edit-mode draft."""
    editing: bool = True
    revision: int = 0
    notifications: List[NotificationResponse] = []


class MemoirTitleUpdate(BaseModel):
    """Schema for renaming a memoir draft."""
    title: str = Field(..., min_length=1)


class CaptionUpdate(BaseModel):
    """Schema for editing one photo caption."""
    caption: str = ""


class RegenerateRequest(BaseModel):
    """Regenerate discards unsaved edits and must be confirmed."""
    confirm: bool = False
