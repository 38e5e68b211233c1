"""
Itinerary item and gallery photo models.
"""
from sqlalchemy import Column, String, Text, Time, Numeric, Enum as SQLEnum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class ItemType(str, enum.Enum):
    """Kind of itinerary entry."""
    ACTIVITY = "activity"
    FOOD = "food"
    TRANSPORT = "transport"
    LODGING = "lodging"


class ItineraryItem(BaseModel):
    """A single scheduled entry within a trip, assigned to a day index."""
    __tablename__ = "trip_items"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    day_index = Column(Integer, nullable=True, default=0, index=True)  # Offset from trip start date
    type = Column(SQLEnum(ItemType), default=ItemType.ACTIVITY, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    location_name = Column(String(200), nullable=True)
    address = Column(String(500), nullable=True)
    image_url = Column(String(500), nullable=True)  # Cover image
    cost_amount = Column(Numeric(15, 2), nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="items")
    photos = relationship("GalleryPhoto", back_populates="item", cascade="all, delete-orphan")


class GalleryPhoto(BaseModel):
    """Supplementary image attached to an itinerary item."""
    __tablename__ = "trip_item_photos"
    
    trip_item_id = Column(Integer, ForeignKey("trip_items.id"), nullable=False, index=True)
    url = Column(String(500), nullable=False)
    
    # Relationships
    item = relationship("ItineraryItem", back_populates="photos")
