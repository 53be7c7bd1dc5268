"""
Spreadsheet export of a property's yearly finances.

Renders a Summary / Monthly / Categories workbook with openpyxl.
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)

MONTHLY_HEADERS = ["Month", "Income", "Expenses", "Credit (incl. insurance)", "Cashflow"]
CATEGORY_HEADERS = ["Category", "Total"]


def _fit_columns(sheet: Worksheet, min_width: int):
    """Widen each column to its longest value, never below min_width."""
    for index, column in enumerate(sheet.iter_cols(values_only=True), start=1):
        lengths = [len(str(value)) for value in column if value is not None]
        sheet.column_dimensions[get_column_letter(index)].width = max([min_width] + lengths)


def _bold_row(sheet: Worksheet, row: int):
    for cell in sheet[row]:
        cell.font = Font(bold=True)


def build_finance_workbook(
    property_label: str,
    year: int,
    summary: Dict,
    rows: List[Dict],
    vacancy: Dict,
) -> Workbook:
    """
    Build the finance workbook for one property and year.

    Args:
        property_label: Property name or id shown on the summary sheet
        year: Calendar year
        summary: Annual summary
        rows: Monthly cashflow rows
        vacancy: Vacancy report (vacant months, vacancy rate)
    """
    workbook = Workbook()

    summary_sheet = workbook.active
    summary_sheet.title = "Summary"
    summary_sheet.append(["Property", property_label])
    summary_sheet.append(["Year", year])
    summary_sheet.append([])
    summary_sheet.append(["Total income", summary["total_rents_received"]])
    summary_sheet.append(["Total expenses", summary["total_expenses"]])
    summary_sheet.append(["Annual credit", summary["annual_credit"]])
    summary_sheet.append(["Vacancy cost", summary["vacancy_cost"]])
    summary_sheet.append(
        ["Gross yield", summary["gross_yield"] if summary["gross_yield"] is not None else "-"]
    )
    summary_sheet.append(
        ["Net yield", summary["net_yield"] if summary["net_yield"] is not None else "-"]
    )
    summary_sheet.append(
        ["Vacancy rate", f"{round((vacancy.get('vacancy_rate') or 0) * 100)}%"]
    )
    _fit_columns(summary_sheet, 14)

    monthly = workbook.create_sheet("Monthly")
    monthly.append(MONTHLY_HEADERS)
    _bold_row(monthly, 1)
    for row in rows:
        monthly.append(
            [row["month"], row["income"], row["expenses"], row["credit"], row["cashflow"]]
        )
    _fit_columns(monthly, 10)

    categories = workbook.create_sheet("Categories")
    categories.append(CATEGORY_HEADERS)
    _bold_row(categories, 1)
    for item in summary.get("expense_breakdown") or []:
        categories.append([item["category"], item["total"]])
    _fit_columns(categories, 12)

    return workbook


def export_filename(property_id: str, year: int) -> str:
    return f"finances-{property_id}-{year}.xlsx"


def save_finance_workbook(
    export_dir: Union[str, Path],
    property_id: str,
    property_label: str,
    year: int,
    summary: Dict,
    rows: List[Dict],
    vacancy: Dict,
) -> Path:
    """Write the finance workbook and return its path."""
    directory = Path(export_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(property_id, year)

    workbook = build_finance_workbook(property_label, year, summary, rows, vacancy)
    workbook.save(path)
    logger.info(f"Finance workbook written to {path}")
    return path
