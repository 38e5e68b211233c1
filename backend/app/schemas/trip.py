"""
Pydantic schemas for Trip entity.
"""
from pydantic import BaseModel, EmailStr, model_validator
from typing import List, Optional
from datetime import date, datetime
from app.models.trip import CollaboratorRole


class TripBase(BaseModel):
    """Base trip schema."""
    title: str
    start_date: date
    end_date: date


class TripCreate(TripBase):
    """Schema for trip creation."""
    
    @model_validator(mode="after")
    def check_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TripUpdate(BaseModel):
    """Schema for trip update."""
    title: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    owner_id: int
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class CollaboratorResponse(BaseModel):
    """Schema for trip collaborator response."""
    user_id: int
    username: str
    email: str
    full_name: Optional[str] = None
    role: CollaboratorRole


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with collaborators."""
    role: CollaboratorRole  # Role of the requesting user
    collaborators: List[CollaboratorResponse] = []


class CollaboratorInvite(BaseModel):
    """Schema for collaborator invitation."""
    email: EmailStr
    role: CollaboratorRole = CollaboratorRole.VIEWER


class CollaboratorRoleUpdate(BaseModel):
    """Schema for changing a collaborator's role."""
    role: CollaboratorRole
