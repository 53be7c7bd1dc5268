"""
Credit (loan) endpoints.
"""

import datetime as dt
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from rentdesk.calculations.amortization import (
    calculate_remaining_balance,
    calculate_total_interest,
    credit_end_date,
    generate_amortization_schedule,
)
from rentdesk.db.database import get_db
from rentdesk.exceptions import NotFoundError, ValidationError
from rentdesk.services import credits as credit_service

router = APIRouter()


class CreditSave(BaseModel):
    """Schema for creating, updating or refinancing a credit."""

    id: Optional[str] = None
    user_id: str
    property_id: str
    credit_type: Optional[str] = None
    down_payment: Optional[float] = None
    principal: Optional[float] = None
    annual_rate: Optional[float] = None
    duration_months: Optional[int] = None
    start_date: Optional[dt.date] = None
    insurance_monthly: Optional[float] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None
    supersedes_id: Optional[str] = None


class CreditResponse(BaseModel):
    id: str
    user_id: str
    property_id: str
    credit_type: Optional[str]
    down_payment: Optional[float]
    principal: Optional[float]
    annual_rate: Optional[float]
    duration_months: Optional[int]
    start_date: Optional[dt.date]
    monthly_payment: Optional[float]
    insurance_monthly: Optional[float]
    monthly_amount: Optional[float]
    notes: Optional[str]
    is_active: bool
    supersedes_id: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True


@router.post("/", response_model=CreditResponse)
async def save_credit(credit_data: CreditSave, db: Session = Depends(get_db)):
    """Create, update or refinance a credit."""
    try:
        return credit_service.save_credit(db, credit_data.model_dump())
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{credit_id}", response_model=CreditResponse)
async def get_credit(credit_id: str, db: Session = Depends(get_db)):
    """Get a credit by ID."""
    try:
        return credit_service.get_credit(db, credit_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{credit_id}")
async def delete_credit(credit_id: str, db: Session = Depends(get_db)):
    """Delete a credit."""
    try:
        credit_service.delete_credit(db, credit_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"deleted": True, "id": credit_id}


@router.get("/{credit_id}/schedule")
async def get_credit_schedule(credit_id: str, db: Session = Depends(get_db)):
    """Repayment schedule of a credit."""
    try:
        credit = credit_service.get_credit(db, credit_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    schedule = generate_amortization_schedule(
        principal=credit.principal or 0,
        annual_rate=credit.annual_rate or 0,
        duration_months=credit.duration_months or 0,
        start_date=credit.start_date,
    )
    end = credit_end_date(credit)

    payments_made = 0
    if credit.start_date and credit.duration_months:
        elapsed = relativedelta(dt.date.today(), credit.start_date)
        months = elapsed.years * 12 + elapsed.months + 1
        payments_made = min(max(months, 0), credit.duration_months)

    return {
        "credit_id": credit.id,
        "end_date": end.date().isoformat() if end else None,
        "payments_made": payments_made,
        "remaining_balance": calculate_remaining_balance(
            credit.principal or 0,
            credit.annual_rate or 0,
            credit.duration_months or 0,
            payments_made,
        ),
        "schedule": schedule,
        "total_interest": calculate_total_interest(schedule),
        "total_principal": sum(row["principal"] for row in schedule),
    }
