"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.trip import Trip, TripCollaborator, CollaboratorRole
from app.models.itinerary import ItineraryItem, GalleryPhoto, ItemType
from app.models.memoir import Memoir

__all__ = [
    "User",
    "Trip",
    "TripCollaborator",
    "CollaboratorRole",
    "ItineraryItem",
    "GalleryPhoto",
    "ItemType",
    "Memoir",
]
