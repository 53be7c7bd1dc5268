"""
Tenants and leases.
"""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from rentdesk.db.database import get_db
from rentdesk.db.models import Lease, Property, Tenant, User

router = APIRouter()


class TenantCreate(BaseModel):
    user_id: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    tenant_type: Optional[str] = None
    notes: Optional[str] = None


class TenantResponse(BaseModel):
    id: str
    user_id: str
    full_name: str
    email: Optional[str]
    phone: Optional[str]
    tenant_type: Optional[str]
    notes: Optional[str]

    class Config:
        from_attributes = True


class LeaseCreate(BaseModel):
    property_id: str
    tenant_id: str
    start_date: dt.date
    end_date: Optional[dt.date] = None
    rent: float = Field(ge=0)
    charges: float = Field(default=0.0, ge=0)
    deposit: Optional[float] = None
    frequency: str = "monthly"
    status: str = "active"


class LeaseResponse(BaseModel):
    id: str
    property_id: str
    tenant_id: str
    start_date: dt.date
    end_date: Optional[dt.date]
    rent: float
    charges: float
    deposit: Optional[float]
    frequency: str
    status: str

    class Config:
        from_attributes = True


@router.get("/tenants", response_model=List[TenantResponse])
async def list_tenants(user_id: str, db: Session = Depends(get_db)):
    """List a user's tenants by name."""
    return (
        db.query(Tenant)
        .filter(Tenant.user_id == user_id)
        .order_by(Tenant.full_name.asc())
        .all()
    )


@router.post("/tenants", response_model=TenantResponse, status_code=201)
async def create_tenant(tenant_data: TenantCreate, db: Session = Depends(get_db)):
    """Create a tenant."""
    if not db.query(User).filter(User.id == tenant_data.user_id).first():
        raise HTTPException(status_code=404, detail="User not found")

    full_name = tenant_data.full_name.strip()
    if not full_name:
        raise HTTPException(status_code=400, detail="Tenant name is required")

    tenant = Tenant(**tenant_data.model_dump(exclude={"full_name"}), full_name=full_name)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@router.post("/", response_model=LeaseResponse, status_code=201)
async def create_lease(lease_data: LeaseCreate, db: Session = Depends(get_db)):
    """Create a lease between a property and a tenant."""
    if not db.query(Property).filter(Property.id == lease_data.property_id).first():
        raise HTTPException(status_code=404, detail="Property not found")
    if not db.query(Tenant).filter(Tenant.id == lease_data.tenant_id).first():
        raise HTTPException(status_code=404, detail="Tenant not found")
    if lease_data.end_date and lease_data.end_date < lease_data.start_date:
        raise HTTPException(status_code=400, detail="End date precedes start date")

    lease = Lease(**lease_data.model_dump())
    db.add(lease)
    db.commit()
    db.refresh(lease)
    return lease
