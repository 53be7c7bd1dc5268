"""
Portfolio Calculations

Rolls per-property monthly rows up into portfolio-wide figures, ranks
properties by cashflow and raises dashboard alerts.
"""

from typing import List, Dict
from dataclasses import dataclass, field

import numpy as np

from rentdesk.calculations.cashflow import sum_rows

MONTHLY_FIELDS = ["income", "expenses", "credit", "cashflow", "vacancy"]

# Alert thresholds
HIGH_VACANCY_RATE = 0.2
THIN_MARGIN_RATIO = 0.1
LOW_OCCUPANCY_RATE = 0.85


@dataclass
class PropertyStats:
    """Monthly rows of one property for the year being rolled up."""

    property_id: str
    property_name: str
    rows: List[Dict]
    expense_breakdown: List[Dict] = field(default_factory=list)


def _as_matrix(rows: List[Dict]) -> np.ndarray:
    """12 x len(MONTHLY_FIELDS) matrix, missing months filled with zeros."""
    matrix = np.zeros((12, len(MONTHLY_FIELDS)))
    for row in rows:
        for col, name in enumerate(MONTHLY_FIELDS):
            matrix[row["month"] - 1, col] = row.get(name, 0.0)
    return matrix


def aggregate_monthly(stats: List[PropertyStats]) -> List[Dict]:
    """
    Sum monthly rows element-wise across properties.

    Each month also carries ``occupancy``: one minus the average vacancy
    of the properties that month.
    """
    if not stats:
        return []

    stacked = np.stack([_as_matrix(entry.rows) for entry in stats])
    totals = stacked.sum(axis=0)
    count = len(stats)

    monthly = []
    for month in range(1, 13):
        values = dict(zip(MONTHLY_FIELDS, totals[month - 1].tolist()))
        monthly.append(
            {
                "month": month,
                "income": values["income"],
                "expenses": values["expenses"],
                "credit": values["credit"],
                "cashflow": values["cashflow"],
                "vacant_properties": int(values["vacancy"]),
                "occupancy": 1 - values["vacancy"] / count,
            }
        )
    return monthly


def property_performance(entry: PropertyStats) -> Dict:
    """Annual totals and vacancy rate of one property."""
    return {
        "property_id": entry.property_id,
        "property_name": entry.property_name,
        "income": sum_rows(entry.rows, "income"),
        "expenses": sum_rows(entry.rows, "expenses"),
        "credit": sum_rows(entry.rows, "credit"),
        "cashflow": sum_rows(entry.rows, "cashflow"),
        "vacancy_rate": sum_rows(entry.rows, "vacancy") / 12,
    }


def rank_performances(stats: List[PropertyStats]) -> List[Dict]:
    """Property performances sorted by descending annual cashflow."""
    performances = [property_performance(entry) for entry in stats]
    return sorted(performances, key=lambda p: p["cashflow"], reverse=True)


def portfolio_vacancy_rate(stats: List[PropertyStats]) -> float:
    """Vacant months across all properties over 12 x property count."""
    if not stats:
        return 0.0
    vacant = sum(sum_rows(entry.rows, "vacancy") for entry in stats)
    return vacant / (12 * len(stats))


def calculate_kpis(monthly: List[Dict], performances: List[Dict]) -> Dict:
    net_cashflow = sum(p["cashflow"] for p in performances)
    return {
        "total_income": sum(p["income"] for p in performances),
        "total_expenses": sum(p["expenses"] for p in performances),
        "total_credit": sum(p["credit"] for p in performances),
        "net_cashflow": net_cashflow,
        "average_monthly_cashflow": net_cashflow / len(monthly) if monthly else 0.0,
        "occupancy_rate": (
            sum(m["occupancy"] for m in monthly) / len(monthly) if monthly else 0.0
        ),
    }


def build_alerts(performances: List[Dict], kpis: Dict) -> List[Dict]:
    """
    Flag properties and portfolio figures that need attention.

    Returns:
        Alerts with ``level`` (danger/warning/info), ``code``, optional
        ``property_id`` and a human readable ``message``
    """
    alerts = []
    for p in performances:
        if p["cashflow"] < 0:
            alerts.append(
                {
                    "level": "danger",
                    "code": "negative_cashflow",
                    "property_id": p["property_id"],
                    "message": f"{p['property_name']}: negative cashflow of {p['cashflow']:,.2f}",
                }
            )
        if p["vacancy_rate"] > HIGH_VACANCY_RATE:
            alerts.append(
                {
                    "level": "warning",
                    "code": "high_vacancy",
                    "property_id": p["property_id"],
                    "message": f"{p['property_name']}: vacancy rate {round(p['vacancy_rate'] * 100)}%",
                }
            )
        if p["expenses"] > 0 and p["cashflow"] < p["expenses"] * THIN_MARGIN_RATIO:
            margin = round(p["cashflow"] / p["expenses"] * 100)
            alerts.append(
                {
                    "level": "info",
                    "code": "thin_margin",
                    "property_id": p["property_id"],
                    "message": f"{p['property_name']}: cashflow is {margin}% of expenses",
                }
            )

    if not performances:
        return alerts

    if kpis["occupancy_rate"] < LOW_OCCUPANCY_RATE:
        alerts.append(
            {
                "level": "warning",
                "code": "low_occupancy",
                "property_id": None,
                "message": f"Portfolio occupancy at {round(kpis['occupancy_rate'] * 100)}%",
            }
        )
    if kpis["net_cashflow"] < 0:
        alerts.append(
            {
                "level": "danger",
                "code": "portfolio_negative_cashflow",
                "property_id": None,
                "message": "Portfolio net cashflow is negative",
            }
        )
    return alerts


def merge_breakdowns(stats: List[PropertyStats]) -> List[Dict]:
    """Combine per-property expense breakdowns, largest category first."""
    totals: Dict[str, float] = {}
    for entry in stats:
        for item in entry.expense_breakdown:
            totals[item["category"]] = totals.get(item["category"], 0.0) + item["total"]
    return sorted(
        ({"category": c, "total": t} for c, t in totals.items()),
        key=lambda item: item["total"],
        reverse=True,
    )


def rollup_portfolio(stats: List[PropertyStats]) -> Dict:
    """
    Build the portfolio dashboard from per-property monthly rows.

    Args:
        stats: One entry per active property

    Returns:
        Dict with monthly aggregates, ranked performances, KPIs,
        portfolio vacancy rate, merged expense breakdown and alerts
    """
    monthly = aggregate_monthly(stats)
    performances = rank_performances(stats)
    kpis = calculate_kpis(monthly, performances)

    return {
        "monthly": monthly,
        "performances": performances,
        "kpis": kpis,
        "vacancy_rate": portfolio_vacancy_rate(stats),
        "expense_breakdown": merge_breakdowns(stats),
        "alerts": build_alerts(performances, kpis),
    }
