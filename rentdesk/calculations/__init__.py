"""
Financial Calculation Engine

Amortization of property credits and aggregation of incomes, expenses and
credit charges into monthly, annual and portfolio figures.
"""

from rentdesk.calculations import amortization, cashflow, summary, portfolio

__all__ = ["amortization", "cashflow", "summary", "portfolio"]
