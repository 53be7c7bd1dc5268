"""
Local user profile endpoints.
"""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from rentdesk.db.database import get_db
from rentdesk.db.models import Property, Tenant, User

router = APIRouter()


class UserPayload(BaseModel):
    username: str


class UserResponse(BaseModel):
    id: str
    username: str
    created_at: datetime

    class Config:
        from_attributes = True


def _clean_username(username: str) -> str:
    name = username.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Username is required")
    return name


def _ensure_unique(db: Session, username: str, user_id: str = None):
    query = db.query(User).filter(User.username == username)
    if user_id:
        query = query.filter(User.id != user_id)
    if query.first():
        raise HTTPException(status_code=409, detail="User already exists")


@router.get("/", response_model=List[UserResponse])
async def list_users(db: Session = Depends(get_db)):
    """List all users ordered by creation date."""
    return db.query(User).order_by(User.created_at.asc()).all()


@router.post("/", response_model=UserResponse, status_code=201)
async def create_user(payload: UserPayload, db: Session = Depends(get_db)):
    """Create a user."""
    username = _clean_username(payload.username)
    _ensure_unique(db, username)

    user = User(username=username)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, payload: UserPayload, db: Session = Depends(get_db)):
    """Rename a user."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    username = _clean_username(payload.username)
    _ensure_unique(db, username, user_id)

    user.username = username
    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}")
async def delete_user(user_id: str, db: Session = Depends(get_db)):
    """Delete a user together with their properties."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    properties = db.query(Property).filter(Property.user_id == user_id).all()
    for prop in properties:
        db.delete(prop)
    db.flush()
    db.query(Tenant).filter(Tenant.user_id == user_id).delete(synchronize_session=False)
    db.delete(user)
    db.commit()

    return {"deleted": True, "id": user_id, "properties_deleted": len(properties)}
