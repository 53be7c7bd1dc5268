"""
Monthly Cash Flow Calculations

Buckets a property's incomes, expenses and credit charges into the twelve
months of a year and derives cashflow, vacancy and payment status.
All functions are pure: records are fetched beforehand and passed in.
"""

from typing import Any, List, Dict, Optional
from datetime import date
from dataclasses import dataclass

from rentdesk.calculations.amortization import (
    DateLike,
    is_credit_finished,
    parse_date,
    total_monthly_charge,
)

MONTHS = range(1, 13)

# Recurring expense frequency -> divisor applied to the amount each month
FREQUENCY_DIVISORS = {
    "monthly": 1,
    "quarterly": 3,
    "yearly": 12,
    "annually": 12,
    "annuel": 12,
}


@dataclass
class Movement:
    """A dated income or expense."""

    date: date
    amount: float
    category: Optional[str] = None
    is_recurring: bool = False
    frequency: Optional[str] = None


@dataclass
class CreditTerms:
    """The part of a credit needed to charge it against a month."""

    monthly_payment: Optional[float]
    insurance_monthly: Optional[float]
    start_date: DateLike
    duration_months: Optional[int]
    is_active: bool = True
    monthly_amount: Optional[float] = None


def month_index(year: int, month: int) -> int:
    return year * 12 + (month - 1)


def base_monthly_credit(credit: CreditTerms) -> float:
    """Monthly charge of one credit, insurance included."""
    monthly = credit.monthly_payment
    if monthly is None:
        monthly = credit.monthly_amount
    return total_monthly_charge(monthly, credit.insurance_monthly)


def is_credit_active_for_month(credit: CreditTerms, year: int, month: int) -> bool:
    """
    Check whether a credit is charged in a given month.

    An inactive credit is never charged. A credit without a usable start
    date or duration is charged every month. Otherwise the month must fall
    inside the repayment window and the term must not be over on the
    first day of the month.
    """
    if not credit or not credit.is_active:
        return False
    if is_credit_finished(credit, date(year, month, 1)):
        return False
    if not credit.start_date or not credit.duration_months or credit.duration_months <= 0:
        return True

    start = parse_date(credit.start_date)
    if start is None:
        return True

    start_idx = month_index(start.year, start.month)
    end_idx = start_idx + int(credit.duration_months) - 1
    current_idx = month_index(year, month)
    return start_idx <= current_idx <= end_idx


def credit_for_month(credits: List[CreditTerms], year: int, month: int) -> float:
    """Sum the charges of every credit active in the month."""
    return sum(
        base_monthly_credit(credit)
        for credit in credits
        if is_credit_active_for_month(credit, year, month)
    )


def recurring_per_month(expense: Movement) -> float:
    """Monthly share of a recurring expense."""
    frequency = (expense.frequency or "monthly").strip().lower()
    divisor = FREQUENCY_DIVISORS.get(frequency, 1)
    return expense.amount / divisor


def expand_recurring(expenses: List[Movement], year: int) -> Dict[str, Any]:
    """
    Spread recurring expenses over the months of a year.

    A recurring expense applies from the month of its date onward.

    Returns:
        Dict with ``monthly`` (12 amounts), ``by_category`` and ``annual``
    """
    monthly = [0.0] * 12
    by_category: Dict[str, float] = {}

    for expense in expenses:
        if not expense.is_recurring:
            continue
        if expense.date.year > year:
            continue
        first_month = expense.date.month if expense.date.year == year else 1
        per_month = recurring_per_month(expense)
        category = expense.category or "other"

        for month in range(first_month, 13):
            monthly[month - 1] += per_month
            by_category[category] = by_category.get(category, 0.0) + per_month

    return {"monthly": monthly, "by_category": by_category, "annual": sum(monthly)}


def _bucket_by_month(movements: List[Movement], year: int) -> List[float]:
    totals = [0.0] * 12
    for movement in movements:
        if movement.is_recurring or movement.date.year != year:
            continue
        totals[movement.date.month - 1] += movement.amount or 0.0
    return totals


def classify_payment_status(income: float, expected: float) -> str:
    """
    Classify a month as paid, partial or unpaid.

    Args:
        income: Income received in the month
        expected: Amount the income should cover (expenses + credit)
    """
    if income <= 0:
        return "unpaid"
    if income >= expected:
        return "paid"
    return "partial"


def monthly_cashflow(
    year: int,
    incomes: List[Movement],
    expenses: List[Movement],
    credits: List[CreditTerms],
) -> List[Dict]:
    """
    Compute the twelve monthly cashflow rows of a property.

    Returns:
        One row per month with income, expenses, credit, cashflow,
        vacancy (1 when no income) and payment status
    """
    income_by_month = _bucket_by_month(incomes, year)
    expense_by_month = _bucket_by_month(expenses, year)
    recurring = expand_recurring(expenses, year)

    rows = []
    for month in MONTHS:
        income = income_by_month[month - 1]
        expense_total = expense_by_month[month - 1] + recurring["monthly"][month - 1]
        credit = credit_for_month(credits, year, month)

        rows.append(
            {
                "month": month,
                "income": income,
                "expenses": expense_total,
                "credit": credit,
                "cashflow": income - expense_total - credit,
                "vacancy": 1 if income <= 0 else 0,
                "status": classify_payment_status(income, expense_total + credit),
            }
        )

    return rows


def vacant_months(rows: List[Dict]) -> List[int]:
    """Months with no income."""
    return [row["month"] for row in rows if row["income"] <= 0]


def vacancy_rate(rows: List[Dict]) -> float:
    """Share of the year's twelve months that were vacant."""
    return len(vacant_months(rows)) / 12


def vacancy_report(rows: List[Dict]) -> Dict:
    return {"vacant_months": vacant_months(rows), "vacancy_rate": vacancy_rate(rows)}


def sum_rows(rows: List[Dict], field: str) -> float:
    """Sum a field across monthly rows."""
    return sum(row.get(field, 0.0) for row in rows)
