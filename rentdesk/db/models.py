"""
SQLAlchemy ORM models for rental properties and their finances.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
import uuid

Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


class AuditMixin:
    """Mixin for audit fields on all models."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class User(AuditMixin, Base):
    """Local profile owning properties and credits."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    username = Column(String(255), unique=True, nullable=False, index=True)

    # Relationships
    properties = relationship(
        "Property",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )


class Property(AuditMixin, Base):
    """A rental property."""

    __tablename__ = "properties"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    address = Column(String(255))
    property_type = Column(String(50))
    surface = Column(Float)

    # Theoretical monthly rent and charges
    base_rent = Column(Float)
    base_charges = Column(Float)

    purchase_price = Column(Float)

    # active | archived
    status = Column(String(20), default="active", nullable=False)

    # Relationships
    owner = relationship("User", back_populates="properties")
    expenses = relationship(
        "Expense", back_populates="property", cascade="all, delete-orphan", lazy="dynamic"
    )
    incomes = relationship(
        "Income", back_populates="property", cascade="all, delete-orphan", lazy="dynamic"
    )
    credits = relationship(
        "Credit", back_populates="property", cascade="all, delete-orphan", lazy="dynamic"
    )
    leases = relationship(
        "Lease", back_populates="property", cascade="all, delete-orphan", lazy="dynamic"
    )
    amortizations = relationship(
        "Amortization",
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )


class Tenant(AuditMixin, Base):
    """A tenant renting one or more properties."""

    __tablename__ = "tenants"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255))
    phone = Column(String(50))
    tenant_type = Column(String(50))
    notes = Column(Text)

    leases = relationship("Lease", back_populates="tenant", lazy="dynamic")


class Lease(AuditMixin, Base):
    """Lease binding a tenant to a property."""

    __tablename__ = "leases"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id = Column(String, ForeignKey("tenants.id"), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date)

    rent = Column(Float, nullable=False)
    charges = Column(Float, default=0.0, nullable=False)
    deposit = Column(Float)
    frequency = Column(String(20), default="monthly", nullable=False)
    status = Column(String(20), default="active", nullable=False)

    # Relationships
    property = relationship("Property", back_populates="leases")
    tenant = relationship("Tenant", back_populates="leases")


class Expense(AuditMixin, Base):
    """Dated expense for a property, optionally recurring."""

    __tablename__ = "expenses"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text)
    amount = Column(Float, nullable=False)

    # Recurring expenses are spread over the year by frequency
    is_recurring = Column(Boolean, default=False, nullable=False)
    frequency = Column(String(20))

    property = relationship("Property", back_populates="expenses")


class Income(AuditMixin, Base):
    """Dated income (rent received) for a property."""

    __tablename__ = "incomes"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)
    lease_id = Column(String, ForeignKey("leases.id"), nullable=True)
    date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    payment_method = Column(String(50))
    notes = Column(Text)

    property = relationship("Property", back_populates="incomes")


class Credit(AuditMixin, Base):
    """Loan financing a property."""

    __tablename__ = "credits"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)

    credit_type = Column(String(50), default="standard")
    down_payment = Column(Float)
    principal = Column(Float)
    annual_rate = Column(Float)  # decimal, 0.032 for 3.2%
    duration_months = Column(Integer)
    start_date = Column(Date)

    # Derived on save
    monthly_payment = Column(Float)
    insurance_monthly = Column(Float)
    monthly_amount = Column(Float)

    notes = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)

    # Credit this one refinanced
    supersedes_id = Column(String, ForeignKey("credits.id"), nullable=True)

    property = relationship("Property", back_populates="credits")
    supersedes = relationship("Credit", remote_side=[id])


class Category(Base):
    """Named expense or income category."""

    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("category_type", "name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_type = Column(String(20), nullable=False)  # expense | income
    name = Column(String(100), nullable=False)


class Amortization(AuditMixin, Base):
    """Accounting depreciation line for a property."""

    __tablename__ = "amortizations"

    id = Column(String, primary_key=True, default=generate_uuid)
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String(100), nullable=False)

    property = relationship("Property", back_populates="amortizations")


class SchemaVersion(Base):
    """Schema upgrade steps applied to this database."""

    __tablename__ = "schema_version"

    version = Column(Integer, primary_key=True)
    description = Column(String(255), nullable=False)
    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)
