"""
Loan Amortization Calculations

Monthly payment, total monthly charge and loan completion status for the
credits financing a property, plus the full repayment schedule.

Payment and charge functions never raise on bad numeric input: anything
missing, non-finite or out of range degrades to 0 so the result is always
displayable.
"""

import math
from typing import Any, List, Dict, Optional, Union
from datetime import date, datetime
from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

DateLike = Union[str, date, datetime, None]


def _as_number(value: Any) -> Optional[float]:
    """Coerce a value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def calculate_monthly_payment(
    principal: Any, annual_rate: Any, duration_months: Any
) -> float:
    """
    Calculate the fixed monthly payment of an amortized loan.

    Args:
        principal: Borrowed amount
        annual_rate: Annual interest rate as decimal (e.g., 0.04 for 4%)
        duration_months: Number of monthly installments

    Returns:
        Monthly payment (capital + interest), 0 when inputs are unusable
    """
    principal = _as_number(principal)
    duration = _as_number(duration_months)
    rate = _as_number(annual_rate) or 0.0

    if not principal or principal <= 0:
        return 0.0
    if not duration or duration <= 0:
        return 0.0

    monthly_rate = rate / 12 if rate > 0 else 0.0

    if monthly_rate == 0:
        return principal / duration

    try:
        denominator = 1 - (1 + monthly_rate) ** (-duration)
    except OverflowError:
        return 0.0
    if denominator == 0:
        return 0.0

    payment = principal * monthly_rate / denominator
    if not math.isfinite(payment):
        return 0.0
    return payment


def total_monthly_charge(monthly_payment: Any, insurance_monthly: Any) -> float:
    """Monthly cash outflow of a credit: repayment plus insurance."""
    return (_as_number(monthly_payment) or 0.0) + (_as_number(insurance_monthly) or 0.0)


def _field(record: Any, name: str) -> Any:
    """Read a field from a dict or an object."""
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def parse_date(value: DateLike) -> Optional[datetime]:
    """Parse a date-like value into a naive datetime, or None if invalid."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz=None).replace(tzinfo=None)
    return parsed


def credit_end_date(credit: Any) -> Optional[datetime]:
    """
    Compute the end of a credit's term.

    The end is the start date plus ``duration_months`` calendar months.
    Returns None when the start date or duration is missing or invalid.
    """
    duration = _as_number(_field(credit, "duration_months"))
    if not duration or duration <= 0:
        return None

    start = parse_date(_field(credit, "start_date"))
    if start is None:
        return None

    return start + relativedelta(months=int(duration))


def is_credit_finished(credit: Any, reference_date: DateLike = None) -> bool:
    """
    Determine whether a credit's term has elapsed.

    Args:
        credit: Dict or object exposing ``start_date`` and ``duration_months``
        reference_date: Comparison instant, defaults to now

    Returns:
        True if reference_date is on or after the end of the term
    """
    if not credit:
        return False

    end = credit_end_date(credit)
    if end is None:
        return False

    if reference_date is None:
        now = datetime.now()
    else:
        now = parse_date(reference_date)
        if now is None:
            return False

    return now >= end


def calculate_remaining_balance(
    principal: float,
    annual_rate: float,
    duration_months: int,
    payments_completed: int,
) -> float:
    """Calculate remaining loan balance after N payments."""
    monthly_rate = annual_rate / 12 if annual_rate and annual_rate > 0 else 0.0
    payment = calculate_monthly_payment(principal, annual_rate, duration_months)

    if monthly_rate == 0:
        return max(0.0, principal - payment * payments_completed)

    balance = principal * ((1 + monthly_rate) ** payments_completed) - payment * (
        ((1 + monthly_rate) ** payments_completed - 1) / monthly_rate
    )

    return max(0.0, balance)


def generate_amortization_schedule(
    principal: float,
    annual_rate: float,
    duration_months: int,
    start_date: Optional[date] = None,
    io_months: int = 0,
) -> List[Dict]:
    """
    Generate a full repayment schedule.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal
        duration_months: Amortization period in months (after any I/O period)
        start_date: Date of first payment (defaults to today)
        io_months: Interest-only months before amortization starts

    Returns:
        List of schedule rows
    """
    schedule = []
    if not principal or principal <= 0 or not duration_months or duration_months <= 0:
        return schedule

    balance = principal
    rate = annual_rate if annual_rate and annual_rate > 0 else 0.0
    monthly_rate = rate / 12

    if start_date is None:
        start_date = date.today()

    for period in range(1, io_months + duration_months + 1):
        period_date = start_date + relativedelta(months=period - 1)

        interest = balance * monthly_rate

        if period <= io_months:
            principal_pmt = 0.0
            payment = interest
        else:
            remaining_periods = duration_months - (period - io_months - 1)
            payment = calculate_monthly_payment(balance, rate, remaining_periods)
            principal_pmt = min(payment - interest, balance)
            payment = principal_pmt + interest

        ending_balance = balance - principal_pmt

        schedule.append(
            {
                "period": period,
                "date": period_date.isoformat(),
                "beginning_balance": round(balance, 2),
                "payment": round(payment, 2),
                "interest": round(interest, 2),
                "principal": round(principal_pmt, 2),
                "ending_balance": round(max(0, ending_balance), 2),
            }
        )

        balance = max(0.0, ending_balance)

        # Stop if balance is paid off
        if balance == 0:
            break

    return schedule


def calculate_total_interest(schedule: List[Dict]) -> float:
    """Calculate total interest paid over loan term."""
    return sum(row["interest"] for row in schedule)
