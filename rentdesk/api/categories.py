"""
Expense and income categories.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from rentdesk.db.database import get_db
from rentdesk.db.models import Category

router = APIRouter()

CATEGORY_TYPES = ("expense", "income")


class CategoryPayload(BaseModel):
    category_type: str
    name: str


class CategoryResponse(BaseModel):
    id: int
    category_type: str
    name: str

    class Config:
        from_attributes = True


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(category_type: str, db: Session = Depends(get_db)):
    """List categories of one type by name."""
    if category_type not in CATEGORY_TYPES:
        raise HTTPException(status_code=400, detail="Invalid category type")
    return (
        db.query(Category)
        .filter(Category.category_type == category_type)
        .order_by(Category.name.asc())
        .all()
    )


@router.post("/", response_model=CategoryResponse)
async def upsert_category(payload: CategoryPayload, db: Session = Depends(get_db)):
    """Return the named category, creating it if needed."""
    if payload.category_type not in CATEGORY_TYPES:
        raise HTTPException(status_code=400, detail="Invalid category type")
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Category name is required")

    category = (
        db.query(Category)
        .filter(Category.category_type == payload.category_type, Category.name == name)
        .first()
    )
    if category:
        return category

    category = Category(category_type=payload.category_type, name=name)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category
