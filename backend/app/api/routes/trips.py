"""
Trip management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
import logging
from app.db.session import get_db
from app.models.user import User
from app.models.trip import Trip, TripCollaborator, CollaboratorRole
from app.schemas.trip import (
    TripCreate, TripUpdate, TripResponse, TripDetailResponse,
    CollaboratorInvite, CollaboratorRoleUpdate, CollaboratorResponse
)
from app.core.session import SessionContext
from app.api.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


def get_trip_role(trip: Trip, user_id: int, db: Session) -> Optional[CollaboratorRole]:
    """Role of a user on a trip, or None if they have no access."""
    if trip.owner_id == user_id:
        return CollaboratorRole.OWNER
    collaborator = db.query(TripCollaborator).filter(
        TripCollaborator.trip_id == trip.id,
        TripCollaborator.user_id == user_id
    ).first()
    return collaborator.role if collaborator else None


def check_trip_access(
    trip_id: int,
    current_user: User,
    db: Session,
    require_edit: bool = False,
    require_owner: bool = False
) -> Tuple[Trip, SessionContext]:
    """Check the user's access to a trip and return it with the session context."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )

    role = get_trip_role(trip, current_user.id, db)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to this trip"
        )

    context = SessionContext(
        user_id=current_user.id,
        username=current_user.username,
        trip_id=trip.id,
        role=role
    )
    if require_owner and not context.is_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the trip owner can do this"
        )
    if require_edit and not context.can_edit:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Editor access required"
        )

    return trip, context


def _collaborator_response(collaborator: TripCollaborator) -> CollaboratorResponse:
    return CollaboratorResponse(
        user_id=collaborator.user.id,
        username=collaborator.user.username,
        email=collaborator.user.email,
        full_name=collaborator.user.full_name,
        role=collaborator.role
    )


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new trip owned by the current user."""
    new_trip = Trip(
        title=trip_data.title,
        start_date=trip_data.start_date,
        end_date=trip_data.end_date,
        owner_id=current_user.id
    )
    db.add(new_trip)
    db.commit()
    db.refresh(new_trip)

    logger.info(f"User {current_user.id} created trip {new_trip.id}")
    return new_trip


@router.get("", response_model=List[TripResponse])
async def list_trips(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List trips the current user owns or collaborates on."""
    collaborating = db.query(TripCollaborator.trip_id).filter(
        TripCollaborator.user_id == current_user.id
    )
    trips = db.query(Trip).filter(
        or_(Trip.owner_id == current_user.id, Trip.id.in_(collaborating))
    ).order_by(Trip.start_date.desc()).all()
    return trips


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get trip details with collaborators."""
    trip, context = check_trip_access(trip_id, current_user, db)

    return TripDetailResponse(
        id=trip.id,
        title=trip.title,
        start_date=trip.start_date,
        end_date=trip.end_date,
        owner_id=trip.owner_id,
        created_at=trip.created_at,
        updated_at=trip.updated_at,
        role=context.role,
        collaborators=[_collaborator_response(c) for c in trip.collaborators]
    )


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update trip title or dates (owner or editor)."""
    trip, _ = check_trip_access(trip_id, current_user, db, require_edit=True)

    update_data = trip_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is not None:
            setattr(trip, field, value)

    if trip.end_date < trip.start_date:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date"
        )

    db.commit()
    db.refresh(trip)
    return trip


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a trip with its items, photos, collaborators and memoir (owner only)."""
    trip, _ = check_trip_access(trip_id, current_user, db, require_owner=True)

    db.delete(trip)
    db.commit()

    logger.info(f"User {current_user.id} deleted trip {trip_id}")
    return {"message": "Trip deleted successfully"}


@router.get("/{trip_id}/collaborators", response_model=List[CollaboratorResponse])
async def list_collaborators(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List collaborators of a trip."""
    trip, _ = check_trip_access(trip_id, current_user, db)
    return [_collaborator_response(c) for c in trip.collaborators]


@router.post("/{trip_id}/collaborators", response_model=CollaboratorResponse, status_code=status.HTTP_201_CREATED)
async def invite_collaborator(
    trip_id: int,
    invite: CollaboratorInvite,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Invite a registered user by email as editor or viewer."""
    trip, _ = check_trip_access(trip_id, current_user, db, require_edit=True)

    if invite.role == CollaboratorRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A trip has exactly one owner"
        )

    user = db.query(User).filter(User.email == invite.email).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No registered user with this email"
        )

    if user.id == trip.owner_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The owner is already part of this trip"
        )

    existing = db.query(TripCollaborator).filter(
        TripCollaborator.trip_id == trip_id,
        TripCollaborator.user_id == user.id
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already a collaborator"
        )

    collaborator = TripCollaborator(trip_id=trip_id, user_id=user.id, role=invite.role)
    db.add(collaborator)
    db.commit()
    db.refresh(collaborator)

    return _collaborator_response(collaborator)


def _get_collaborator(trip_id: int, user_id: int, db: Session) -> TripCollaborator:
    collaborator = db.query(TripCollaborator).filter(
        TripCollaborator.trip_id == trip_id,
        TripCollaborator.user_id == user_id
    ).first()
    if not collaborator:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Collaborator not found"
        )
    return collaborator


@router.put("/{trip_id}/collaborators/{user_id}", response_model=CollaboratorResponse)
async def change_collaborator_role(
    trip_id: int,
    user_id: int,
    update: CollaboratorRoleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change a collaborator's role (owner only)."""
    check_trip_access(trip_id, current_user, db, require_owner=True)

    if update.role == CollaboratorRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A trip has exactly one owner"
        )

    collaborator = _get_collaborator(trip_id, user_id, db)
    collaborator.role = update.role
    db.commit()
    db.refresh(collaborator)

    return _collaborator_response(collaborator)


@router.delete("/{trip_id}/collaborators/{user_id}")
async def remove_collaborator(
    trip_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a collaborator from the trip (owner only)."""
    check_trip_access(trip_id, current_user, db, require_owner=True)

    collaborator = _get_collaborator(trip_id, user_id, db)
    db.delete(collaborator)
    db.commit()

    return {"message": "Collaborator removed successfully"}
