"""
Shared FastAPI dependencies: current user, repositories, memoir assembler.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.security import decode_access_token
from app.models.user import User
from app.repositories.sql import (
    SqlTripRepository, SqlItemRepository, SqlPhotoRepository, SqlMemoirRepository
)
from app.services.memoir_service import MemoirAssembler
from app.services.storage_service import LocalObjectStorage, ObjectStorage

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the bearer token to an active user."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )
    
    payload = decode_access_token(credentials.credentials)
    if not payload or "user_id" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"}
        )
    
    user = db.query(User).filter(User.id == payload["user_id"]).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )
    return user


def get_storage() -> ObjectStorage:
    """Object storage for uploads."""
    return LocalObjectStorage()


def get_memoir_assembler(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage)
) -> MemoirAssembler:
    """Memoir assembler wired to the SQL repositories."""
    return MemoirAssembler(
        trips=SqlTripRepository(db),
        items=SqlItemRepository(db),
        photos=SqlPhotoRepository(db),
        memoirs=SqlMemoirRepository(db),
        storage=storage
    )
