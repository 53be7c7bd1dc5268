"""
Financial dashboards for properties and portfolios.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from rentdesk.config import get_settings
from rentdesk.db.database import get_db
from rentdesk.exceptions import NotFoundError
from rentdesk.services import exporter, finance

router = APIRouter()


class CashflowRow(BaseModel):
    month: int
    income: float
    expenses: float
    credit: float
    cashflow: float


class MonthlyStat(CashflowRow):
    vacancy: int
    status: str


class CategoryTotal(BaseModel):
    category: str
    total: float


class AnnualSummary(BaseModel):
    property_id: str
    year: int
    total_rents_received: float
    total_expenses: float
    expense_breakdown: List[CategoryTotal]
    annual_credit: float
    vacancy_cost: float
    gross_yield: Optional[float] = None
    net_yield: Optional[float] = None


class VacancyReport(BaseModel):
    vacant_months: List[int]
    vacancy_rate: float


class YearRange(BaseModel):
    min_year: int
    max_year: int


def _year(year: Optional[int]) -> int:
    return year if year else date.today().year


@router.get("/properties/{property_id}/monthly-stats", response_model=List[MonthlyStat])
async def get_monthly_stats(
    property_id: str, year: Optional[int] = None, db: Session = Depends(get_db)
):
    """Monthly rows with vacancy flag and payment status."""
    try:
        return finance.property_cashflow(db, property_id, _year(year))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/properties/{property_id}/cashflow", response_model=List[CashflowRow])
async def get_cashflow(
    property_id: str, year: Optional[int] = None, db: Session = Depends(get_db)
):
    """Monthly cashflow of a property."""
    try:
        return finance.property_cashflow(db, property_id, _year(year))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/properties/{property_id}/summary", response_model=AnnualSummary)
async def get_summary(
    property_id: str,
    year: Optional[int] = None,
    purchase_price: Optional[float] = None,
    db: Session = Depends(get_db),
):
    """Annual totals and yields; ``purchase_price`` overrides the stored one."""
    try:
        return finance.property_summary(
            db, property_id, _year(year), purchase_price=purchase_price
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/properties/{property_id}/vacancy", response_model=VacancyReport)
async def get_vacancy(
    property_id: str, year: Optional[int] = None, db: Session = Depends(get_db)
):
    try:
        return finance.property_vacancy(db, property_id, _year(year))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/properties/{property_id}/year-range", response_model=YearRange)
async def get_year_range(property_id: str, db: Session = Depends(get_db)):
    try:
        return finance.year_range(db, property_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/properties/{property_id}/export")
async def export_finances(
    property_id: str,
    year: Optional[int] = None,
    purchase_price: Optional[float] = None,
    db: Session = Depends(get_db),
):
    """Write the year's finance workbook to the export directory."""
    year = _year(year)
    try:
        report = finance.property_report(db, property_id, year, purchase_price)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    prop = report["property"]
    path = exporter.save_finance_workbook(
        get_settings().export_dir,
        prop.id,
        prop.name,
        year,
        report["summary"],
        report["rows"],
        report["vacancy"],
    )
    return {"path": str(path)}


@router.get("/portfolio")
async def get_portfolio(
    user_id: str, year: Optional[int] = None, db: Session = Depends(get_db)
):
    """Rollup of a user's non-archived properties."""
    return finance.portfolio_dashboard(db, user_id, _year(year))
