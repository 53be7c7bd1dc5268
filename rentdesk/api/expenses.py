"""
Expense endpoints.
"""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from rentdesk.db.database import get_db
from rentdesk.db.models import Expense, Property

router = APIRouter()


class ExpenseCreate(BaseModel):
    """Schema for creating an expense."""

    property_id: str
    date: dt.date
    category: str
    description: Optional[str] = None
    amount: float = Field(ge=0)
    is_recurring: bool = False
    frequency: Optional[str] = None


class ExpenseUpdate(BaseModel):
    """Schema for updating an expense."""

    date: Optional[dt.date] = None
    category: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    is_recurring: Optional[bool] = None
    frequency: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: str
    property_id: str
    date: dt.date
    category: str
    description: Optional[str]
    amount: float
    is_recurring: bool
    frequency: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True


@router.post("/", response_model=ExpenseResponse, status_code=201)
async def create_expense(expense_data: ExpenseCreate, db: Session = Depends(get_db)):
    """Record an expense for a property."""
    if not db.query(Property).filter(Property.id == expense_data.property_id).first():
        raise HTTPException(status_code=404, detail="Property not found")

    category = expense_data.category.strip()
    if not category:
        raise HTTPException(status_code=400, detail="Category is required")

    expense = Expense(**expense_data.model_dump(exclude={"category"}), category=category)
    db.add(expense)
    db.commit()
    db.refresh(expense)
    return expense


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: str, expense_data: ExpenseUpdate, db: Session = Depends(get_db)
):
    """Update an expense."""
    update_data = expense_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="Nothing to update")

    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    for field, value in update_data.items():
        setattr(expense, field, value)

    db.commit()
    db.refresh(expense)
    return expense


@router.delete("/{expense_id}")
async def delete_expense(expense_id: str, db: Session = Depends(get_db)):
    """Delete an expense."""
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    db.delete(expense)
    db.commit()
    return {"deleted": True, "id": expense_id}
