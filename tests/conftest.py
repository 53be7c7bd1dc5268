"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from rentdesk.main import app
from rentdesk.db.database import Database, get_db
# Import all models to ensure all tables are created
from rentdesk.db.models import (
    Base, User, Property, Tenant, Lease, Expense, Income, Credit, Category, Amortization
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


# Create a shared test database engine
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
test_database = Database(test_engine)


def override_get_db():
    """Override database dependency for testing."""
    db = test_database.session()
    try:
        yield db
    finally:
        db.close()


# Override the dependency globally for all tests
app.dependency_overrides[get_db] = override_get_db
app.state.database = test_database


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and drop after."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Create database session for test setup."""
    db = test_database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def test_user(db_session):
    """Create a test user."""
    user = User(username="alice")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_property(db_session, test_user):
    """Create a test property."""
    prop = Property(
        user_id=test_user.id,
        name="Studio Bellecour",
        address="3 place Bellecour, Lyon",
        property_type="apartment",
        surface=28.0,
        base_rent=650.0,
        base_charges=40.0,
        purchase_price=120000.0,
    )
    db_session.add(prop)
    db_session.commit()
    db_session.refresh(prop)
    return prop
