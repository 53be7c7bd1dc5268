"""
API routes for rental property finances.
"""

from fastapi import APIRouter

from rentdesk.api import (
    calculations,
    categories,
    credits,
    expenses,
    finances,
    incomes,
    leases,
    properties,
    users,
)

router = APIRouter()

# Include sub-routers
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(properties.router, prefix="/properties", tags=["properties"])
router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
router.include_router(incomes.router, prefix="/incomes", tags=["incomes"])
router.include_router(credits.router, prefix="/credits", tags=["credits"])
router.include_router(leases.router, prefix="/leases", tags=["leases"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(finances.router, prefix="/finances", tags=["finances"])
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
