"""
Income endpoints.
"""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from rentdesk.db.database import get_db
from rentdesk.db.models import Income, Lease, Property

router = APIRouter()


class IncomeCreate(BaseModel):
    """Schema for recording an income."""

    property_id: str
    lease_id: Optional[str] = None
    date: dt.date
    amount: float = Field(ge=0)
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class IncomeUpdate(BaseModel):
    """Schema for updating an income."""

    lease_id: Optional[str] = None
    date: Optional[dt.date] = None
    amount: Optional[float] = Field(default=None, ge=0)
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class IncomeResponse(BaseModel):
    id: str
    property_id: str
    lease_id: Optional[str]
    date: dt.date
    amount: float
    payment_method: Optional[str]
    notes: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True


def _check_lease(db: Session, lease_id: Optional[str]):
    if lease_id and not db.query(Lease).filter(Lease.id == lease_id).first():
        raise HTTPException(status_code=404, detail="Lease not found")


@router.post("/", response_model=IncomeResponse, status_code=201)
async def create_income(income_data: IncomeCreate, db: Session = Depends(get_db)):
    """Record an income for a property."""
    if not db.query(Property).filter(Property.id == income_data.property_id).first():
        raise HTTPException(status_code=404, detail="Property not found")
    _check_lease(db, income_data.lease_id)

    income = Income(**income_data.model_dump())
    db.add(income)
    db.commit()
    db.refresh(income)
    return income


@router.put("/{income_id}", response_model=IncomeResponse)
async def update_income(
    income_id: str, income_data: IncomeUpdate, db: Session = Depends(get_db)
):
    """Update an income."""
    update_data = income_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="Nothing to update")

    income = db.query(Income).filter(Income.id == income_id).first()
    if not income:
        raise HTTPException(status_code=404, detail="Income not found")
    _check_lease(db, update_data.get("lease_id"))

    for field, value in update_data.items():
        setattr(income, field, value)

    db.commit()
    db.refresh(income)
    return income


@router.delete("/{income_id}")
async def delete_income(income_id: str, db: Session = Depends(get_db)):
    """Delete an income."""
    income = db.query(Income).filter(Income.id == income_id).first()
    if not income:
        raise HTTPException(status_code=404, detail="Income not found")

    db.delete(income)
    db.commit()
    return {"deleted": True, "id": income_id}
