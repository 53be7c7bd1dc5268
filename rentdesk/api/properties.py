"""
Property management API endpoints.
"""

import datetime as dt
from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field
from typing import Optional, List
from sqlalchemy.orm import Session

from rentdesk.api.credits import CreditResponse
from rentdesk.api.expenses import ExpenseResponse
from rentdesk.api.incomes import IncomeResponse
from rentdesk.db.database import get_db
from rentdesk.db.models import Amortization, Expense, Income, Lease, Property, User
from rentdesk.services import credits as credit_service
from rentdesk.services import finance

router = APIRouter()

PROPERTY_STATUSES = ("active", "archived")


class PropertyCreate(BaseModel):
    """Schema for creating a property."""

    user_id: str
    name: str
    address: Optional[str] = None
    property_type: Optional[str] = None
    surface: Optional[float] = None
    base_rent: Optional[float] = None
    base_charges: Optional[float] = None
    purchase_price: Optional[float] = None


class PropertyUpdate(BaseModel):
    """Schema for updating a property."""

    name: Optional[str] = None
    address: Optional[str] = None
    property_type: Optional[str] = None
    surface: Optional[float] = None
    base_rent: Optional[float] = None
    base_charges: Optional[float] = None
    purchase_price: Optional[float] = None
    status: Optional[str] = None


class PropertyResponse(BaseModel):
    """Schema for property response."""

    id: str
    user_id: str
    name: str
    address: Optional[str]
    property_type: Optional[str]
    surface: Optional[float]
    base_rent: Optional[float]
    base_charges: Optional[float]
    purchase_price: Optional[float]
    status: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PropertyListResponse(BaseModel):
    """Response for listing properties."""

    properties: List[PropertyResponse]
    total: int


class AmortizationCreate(BaseModel):
    start_date: dt.date
    end_date: dt.date
    amount: float = Field(ge=0)
    category: str


class AmortizationResponse(BaseModel):
    id: str
    property_id: str
    start_date: dt.date
    end_date: dt.date
    amount: float
    category: str

    class Config:
        from_attributes = True


def property_to_response(prop: Property) -> PropertyResponse:
    """Convert Property model to response schema."""
    return PropertyResponse(
        id=prop.id,
        user_id=prop.user_id,
        name=prop.name,
        address=prop.address,
        property_type=prop.property_type,
        surface=prop.surface,
        base_rent=prop.base_rent,
        base_charges=prop.base_charges,
        purchase_price=prop.purchase_price,
        status=prop.status or "active",
        created_at=prop.created_at.isoformat() if prop.created_at else None,
        updated_at=prop.updated_at.isoformat() if prop.updated_at else None,
    )


def _get_property(db: Session, property_id: str) -> Property:
    db_property = db.query(Property).filter(Property.id == property_id).first()
    if not db_property:
        raise HTTPException(status_code=404, detail="Property not found")
    return db_property


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


@router.get("/", response_model=PropertyListResponse)
async def list_properties(
    user_id: str,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """List a user's properties, newest first."""
    query = db.query(Property).filter(Property.user_id == user_id)

    if status:
        query = query.filter(Property.status == status)

    properties = query.order_by(Property.created_at.desc()).all()

    return PropertyListResponse(
        properties=[property_to_response(p) for p in properties],
        total=len(properties),
    )


@router.post("/", response_model=PropertyResponse, status_code=201)
async def create_property(
    property_data: PropertyCreate,
    db: Session = Depends(get_db),
):
    """Create a new property."""
    if not db.query(User).filter(User.id == property_data.user_id).first():
        raise HTTPException(status_code=404, detail="User not found")

    name = property_data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Property name is required")

    db_property = Property(
        user_id=property_data.user_id,
        name=name,
        address=_strip_or_none(property_data.address),
        property_type=_strip_or_none(property_data.property_type),
        surface=property_data.surface,
        base_rent=property_data.base_rent,
        base_charges=property_data.base_charges,
        purchase_price=property_data.purchase_price,
        status="active",
    )

    db.add(db_property)
    db.commit()
    db.refresh(db_property)

    return property_to_response(db_property)


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: str,
    db: Session = Depends(get_db),
):
    """Get a property by ID."""
    return property_to_response(_get_property(db, property_id))


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: str,
    property_data: PropertyUpdate,
    db: Session = Depends(get_db),
):
    """Update a property."""
    update_data = property_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="Nothing to update")

    if "status" in update_data and update_data["status"] not in PROPERTY_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid property status")

    if "name" in update_data:
        name = (update_data["name"] or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Property name is required")
        update_data["name"] = name

    for field in ("address", "property_type"):
        if field in update_data:
            update_data[field] = _strip_or_none(update_data[field])

    db_property = _get_property(db, property_id)

    # Update only provided fields
    for field, value in update_data.items():
        setattr(db_property, field, value)

    db.commit()
    db.refresh(db_property)

    return property_to_response(db_property)


@router.delete("/{property_id}")
async def delete_property(
    property_id: str,
    db: Session = Depends(get_db),
):
    """Delete a property and its financial records."""
    db_property = _get_property(db, property_id)

    db.delete(db_property)
    db.commit()

    return {"deleted": True, "id": property_id}


@router.get("/{property_id}/expenses", response_model=List[ExpenseResponse])
async def list_property_expenses(
    property_id: str,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """List a property's expenses, optionally for one year."""
    _get_property(db, property_id)
    query = db.query(Expense).filter(Expense.property_id == property_id)
    if year:
        query = query.filter(
            Expense.date >= dt.date(year, 1, 1), Expense.date <= dt.date(year, 12, 31)
        )
    return query.order_by(Expense.date.asc()).all()


@router.get("/{property_id}/incomes", response_model=List[IncomeResponse])
async def list_property_incomes(
    property_id: str,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """List a property's incomes, optionally for one year."""
    _get_property(db, property_id)
    query = db.query(Income).filter(Income.property_id == property_id)
    if year:
        query = query.filter(
            Income.date >= dt.date(year, 1, 1), Income.date <= dt.date(year, 12, 31)
        )
    return query.order_by(Income.date.asc()).all()


@router.get("/{property_id}/credits", response_model=List[CreditResponse])
async def list_property_credits(
    property_id: str,
    db: Session = Depends(get_db),
):
    """List a property's credits after deactivating finished ones."""
    _get_property(db, property_id)
    finance.sweep_finished_credits(db)
    return credit_service.list_credits_by_property(db, property_id)


@router.get("/{property_id}/credits/active", response_model=Optional[CreditResponse])
async def get_property_active_credit(
    property_id: str,
    db: Session = Depends(get_db),
):
    """The property's active credit, or null."""
    _get_property(db, property_id)
    finance.sweep_finished_credits(db)
    return credit_service.get_active_credit(db, property_id)


@router.get("/{property_id}/amortizations", response_model=List[AmortizationResponse])
async def list_property_amortizations(
    property_id: str,
    db: Session = Depends(get_db),
):
    """List a property's depreciation lines."""
    _get_property(db, property_id)
    return (
        db.query(Amortization)
        .filter(Amortization.property_id == property_id)
        .order_by(Amortization.start_date.asc())
        .all()
    )


@router.post(
    "/{property_id}/amortizations", response_model=AmortizationResponse, status_code=201
)
async def create_property_amortization(
    property_id: str,
    amortization_data: AmortizationCreate,
    db: Session = Depends(get_db),
):
    """Add a depreciation line to a property."""
    _get_property(db, property_id)
    if amortization_data.end_date < amortization_data.start_date:
        raise HTTPException(status_code=400, detail="End date precedes start date")

    amortization = Amortization(property_id=property_id, **amortization_data.model_dump())
    db.add(amortization)
    db.commit()
    db.refresh(amortization)
    return amortization


@router.get("/{property_id}/leases")
async def list_property_leases(
    property_id: str,
    db: Session = Depends(get_db),
):
    """List a property's leases with their tenants."""
    _get_property(db, property_id)
    leases = (
        db.query(Lease)
        .filter(Lease.property_id == property_id)
        .order_by(Lease.start_date.desc())
        .all()
    )

    return {
        "property_id": property_id,
        "leases": [
            {
                "id": lease.id,
                "tenant_id": lease.tenant_id,
                "tenant_name": lease.tenant.full_name if lease.tenant else None,
                "start_date": lease.start_date.isoformat(),
                "end_date": lease.end_date.isoformat() if lease.end_date else None,
                "rent": lease.rent,
                "charges": lease.charges,
                "deposit": lease.deposit,
                "frequency": lease.frequency,
                "status": lease.status,
            }
            for lease in leases
        ],
        "total": len(leases),
    }
