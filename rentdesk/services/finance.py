"""
Financial dashboards.

Reads a property's incomes, expenses and credits, then hands them to the
pure calculation modules. All storage reads happen before aggregation.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from rentdesk.calculations import cashflow, portfolio, summary
from rentdesk.calculations.cashflow import CreditTerms, Movement
from rentdesk.calculations.summary import PropertyFacts
from rentdesk.config import get_settings
from rentdesk.db.models import Expense, Income, Property
from rentdesk.exceptions import NotFoundError
from rentdesk.services import credits as credit_service

logger = logging.getLogger(__name__)


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def get_property(db: Session, property_id: str) -> Property:
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise NotFoundError("Property not found")
    return prop


def property_facts(prop: Property) -> PropertyFacts:
    return PropertyFacts(
        id=prop.id,
        name=prop.name,
        purchase_price=prop.purchase_price,
        base_rent=prop.base_rent,
        status=prop.status,
    )


def load_incomes(db: Session, property_id: str, year: int) -> List[Movement]:
    start, end = year_bounds(year)
    rows = (
        db.query(Income)
        .filter(Income.property_id == property_id, Income.date >= start, Income.date <= end)
        .all()
    )
    return [Movement(date=row.date, amount=row.amount) for row in rows]


def load_expenses(db: Session, property_id: str, year: int) -> List[Movement]:
    """The year's dated expenses plus every recurring expense started by year end."""
    start, end = year_bounds(year)
    rows = (
        db.query(Expense)
        .filter(
            Expense.property_id == property_id,
            or_(
                and_(Expense.is_recurring == False, Expense.date >= start, Expense.date <= end),
                and_(Expense.is_recurring == True, Expense.date <= end),
            ),
        )
        .all()
    )
    return [
        Movement(
            date=row.date,
            amount=row.amount,
            category=row.category,
            is_recurring=bool(row.is_recurring),
            frequency=row.frequency,
        )
        for row in rows
    ]


def load_credits(db: Session, property_id: str) -> List[CreditTerms]:
    return [
        credit_service.to_terms(credit)
        for credit in credit_service.list_credits_by_property(db, property_id)
    ]


def sweep_finished_credits(db: Session, sweep: Optional[bool] = None):
    """Deactivate finished credits when enabled, by default per ``sweep_on_read``."""
    if sweep is None:
        sweep = get_settings().sweep_on_read
    if sweep:
        credit_service.mark_finished_credits_inactive(db)


def property_cashflow(
    db: Session, property_id: str, year: int, sweep: Optional[bool] = None
) -> List[Dict]:
    """Monthly cashflow rows of a property for a year."""
    get_property(db, property_id)
    sweep_finished_credits(db, sweep)
    return cashflow.monthly_cashflow(
        year,
        load_incomes(db, property_id, year),
        load_expenses(db, property_id, year),
        load_credits(db, property_id),
    )


def property_vacancy(db: Session, property_id: str, year: int) -> Dict:
    """Vacant months and vacancy rate of a property for a year."""
    get_property(db, property_id)
    return cashflow.vacancy_report(
        cashflow.monthly_cashflow(year, load_incomes(db, property_id, year), [], [])
    )


def property_summary(
    db: Session,
    property_id: str,
    year: int,
    purchase_price: Optional[float] = None,
    sweep: Optional[bool] = None,
) -> Dict:
    """Annual summary of a property."""
    prop = get_property(db, property_id)
    sweep_finished_credits(db, sweep)

    expenses = load_expenses(db, property_id, year)
    rows = cashflow.monthly_cashflow(
        year,
        load_incomes(db, property_id, year),
        expenses,
        load_credits(db, property_id),
    )
    return summary.annual_summary(
        property_facts(prop), year, rows, expenses, purchase_price=purchase_price
    )


def property_report(
    db: Session, property_id: str, year: int, purchase_price: Optional[float] = None
) -> Dict:
    """Everything the spreadsheet export needs, from one consistent read."""
    prop = get_property(db, property_id)
    sweep_finished_credits(db, None)

    expenses = load_expenses(db, property_id, year)
    rows = cashflow.monthly_cashflow(
        year,
        load_incomes(db, property_id, year),
        expenses,
        load_credits(db, property_id),
    )
    return {
        "property": prop,
        "rows": rows,
        "summary": summary.annual_summary(
            property_facts(prop), year, rows, expenses, purchase_price=purchase_price
        ),
        "vacancy": cashflow.vacancy_report(rows),
    }


def year_range(db: Session, property_id: str) -> Dict:
    """First and last year holding any income or expense of a property."""
    get_property(db, property_id)

    income_min, income_max = (
        db.query(func.min(Income.date), func.max(Income.date))
        .filter(Income.property_id == property_id)
        .one()
    )
    expense_min, expense_max = (
        db.query(func.min(Expense.date), func.max(Expense.date))
        .filter(Expense.property_id == property_id)
        .one()
    )

    firsts = [d for d in (income_min, expense_min) if d is not None]
    lasts = [d for d in (income_max, expense_max) if d is not None]
    current = date.today().year

    return {
        "min_year": min(firsts).year if firsts else current,
        "max_year": max(lasts).year if lasts else current,
    }


def portfolio_dashboard(
    db: Session, user_id: str, year: int, sweep: Optional[bool] = None
) -> Dict:
    """Portfolio rollup over a user's non-archived properties."""
    sweep_finished_credits(db, sweep)

    properties = (
        db.query(Property)
        .filter(Property.user_id == user_id, Property.status != "archived")
        .order_by(Property.created_at)
        .all()
    )

    stats = []
    for prop in properties:
        expenses = load_expenses(db, prop.id, year)
        rows = cashflow.monthly_cashflow(
            year,
            load_incomes(db, prop.id, year),
            expenses,
            load_credits(db, prop.id),
        )
        stats.append(
            portfolio.PropertyStats(
                property_id=prop.id,
                property_name=prop.name,
                rows=rows,
                expense_breakdown=summary.expense_breakdown(expenses, year),
            )
        )

    logger.debug(f"Portfolio rollup for user {user_id}, {year}: {len(stats)} properties")
    result = portfolio.rollup_portfolio(stats)
    result["year"] = year
    return result
