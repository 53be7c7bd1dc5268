"""
Annual Summary Calculations

Yearly totals, expense breakdown, vacancy cost and yields for one property.
"""

from typing import List, Dict, Optional
from dataclasses import dataclass

from rentdesk.calculations.cashflow import (
    Movement,
    expand_recurring,
    sum_rows,
    vacant_months,
)


@dataclass
class PropertyFacts:
    """Property attributes the financial summaries depend on."""

    id: str
    name: str
    purchase_price: Optional[float] = None
    base_rent: Optional[float] = None
    status: str = "active"


def expense_breakdown(expenses: List[Movement], year: int) -> List[Dict]:
    """
    Group a year's expenses by category.

    Dated expenses count in their own year; recurring ones are spread over
    the months they apply to.

    Returns:
        ``{"category", "total"}`` rows sorted by descending total
    """
    totals: Dict[str, float] = {}
    for expense in expenses:
        if expense.is_recurring or expense.date.year != year:
            continue
        category = expense.category or "other"
        totals[category] = totals.get(category, 0.0) + (expense.amount or 0.0)

    for category, total in expand_recurring(expenses, year)["by_category"].items():
        totals[category] = totals.get(category, 0.0) + total

    return sorted(
        ({"category": category, "total": total} for category, total in totals.items()),
        key=lambda item: item["total"],
        reverse=True,
    )


def calculate_yield(amount: float, purchase_price: Optional[float]) -> Optional[float]:
    """Express an annual amount as a percentage of purchase price."""
    if purchase_price is None or purchase_price <= 0:
        return None
    return (amount / purchase_price) * 100


def calculate_vacancy_cost(vacant_month_count: int, base_rent: Optional[float]) -> float:
    """Estimated rent lost over vacant months."""
    if not base_rent or base_rent <= 0:
        return 0.0
    return vacant_month_count * base_rent


def annual_summary(
    prop: PropertyFacts,
    year: int,
    rows: List[Dict],
    expenses: List[Movement],
    purchase_price: Optional[float] = None,
) -> Dict:
    """
    Aggregate a property's year.

    Args:
        prop: Property facts (purchase price, base rent)
        year: Calendar year
        rows: The year's monthly cashflow rows
        expenses: Expenses used for the category breakdown
        purchase_price: Optional override of prop.purchase_price

    Returns:
        Summary dict; yields are None when the purchase price is unknown
    """
    price = purchase_price if purchase_price is not None else prop.purchase_price

    total_rents = sum_rows(rows, "income")
    total_expenses = sum_rows(rows, "expenses")
    annual_credit = sum_rows(rows, "credit")
    vacancy_cost = calculate_vacancy_cost(len(vacant_months(rows)), prop.base_rent)

    net_income = total_rents - total_expenses - annual_credit - vacancy_cost

    return {
        "property_id": prop.id,
        "year": year,
        "total_rents_received": total_rents,
        "total_expenses": total_expenses,
        "expense_breakdown": expense_breakdown(expenses, year),
        "annual_credit": annual_credit,
        "vacancy_cost": vacancy_cost,
        "gross_yield": calculate_yield(total_rents, price),
        "net_yield": calculate_yield(net_income, price),
    }
