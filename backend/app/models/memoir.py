"""
Memoir model: the editable photo document of a trip.
"""
from sqlalchemy import Column, String, ForeignKey, Integer, JSON
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Memoir(BaseModel):
    """One memoir per trip. Photos are stored as a single JSON list."""
    __tablename__ = "trip_memories"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, unique=True, index=True)
    title = Column(String(300), nullable=False)
    photos = Column(JSON, nullable=False, default=list)  # [{url, caption, order, source, itemId}]
    
    # Relationships
    trip = relationship("Trip", back_populates="memoir")
