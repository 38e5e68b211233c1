"""
Pydantic schemas for itinerary items and gallery photos.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, time as dt_time
from decimal import Decimal
from app.models.itinerary import ItemType


class ItineraryItemBase(BaseModel):
    """Base itinerary item schema."""
    type: ItemType = ItemType.ACTIVITY
    title: str
    day_index: int = Field(0, ge=0)
    start_time: Optional[dt_time] = None
    end_time: Optional[dt_time] = None
    location_name: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    cost_amount: Optional[Decimal] = None


class ItineraryItemCreate(ItineraryItemBase):
    """Schema for itinerary item creation."""
    pass


class ItineraryItemUpdate(BaseModel):
    """Schema for itinerary item update."""
    type: Optional[ItemType] = None
    title: Optional[str] = None
    day_index: Optional[int] = Field(None, ge=0)
    start_time: Optional[dt_time] = None
    end_time: Optional[dt_time] = None
    location_name: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    cost_amount: Optional[Decimal] = None
    
    @field_validator("type", "title")
    @classmethod
    def reject_null(cls, v, info):
        """Omit a field to keep it; type and title cannot be cleared."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ItineraryItemResponse(ItineraryItemBase):
    """Schema for itinerary item response."""
    id: int
    trip_id: int
    day_index: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class GalleryPhotoResponse(BaseModel):
    """Schema for gallery photo response."""
    id: int
    trip_item_id: int
    url: str
    created_at: datetime
    
    class Config:
        from_attributes = True
