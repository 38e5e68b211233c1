"""
Trip model for collaborative trip planning.
"""
from sqlalchemy import Column, String, Date, Enum as SQLEnum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class CollaboratorRole(str, enum.Enum):
    """Role a user holds on a trip."""
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


class Trip(BaseModel):
    """Trip model owned by exactly one user."""
    __tablename__ = "trips"
    
    title = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    
    # Relationships
    owner = relationship("User", back_populates="owned_trips")
    collaborators = relationship("TripCollaborator", back_populates="trip", cascade="all, delete-orphan")
    items = relationship("ItineraryItem", back_populates="trip", cascade="all, delete-orphan")
    memoir = relationship("Memoir", back_populates="trip", uselist=False, cascade="all, delete-orphan")


class TripCollaborator(BaseModel):
    """Non-owner user granted editor or viewer access to a trip."""
    __tablename__ = "collaborators"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(SQLEnum(CollaboratorRole), default=CollaboratorRole.VIEWER, nullable=False)
    
    # Relationships
    trip = relationship("Trip", back_populates="collaborators")
    user = relationship("User", back_populates="collaborations")
    
    __table_args__ = (
        UniqueConstraint('trip_id', 'user_id', name='uq_trip_collaborator'),
    )
