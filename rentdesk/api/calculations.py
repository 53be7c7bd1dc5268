"""
Stateless loan calculation endpoints.

These endpoints accept inputs and return calculated results without
touching the database.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from rentdesk.calculations import amortization

router = APIRouter()


class LoanInput(BaseModel):
    """Loan terms."""

    principal: float
    annual_rate: float = 0.0
    duration_months: int
    insurance_monthly: Optional[float] = None


class MonthlyPaymentResponse(BaseModel):
    monthly_payment: float
    monthly_amount: float


class AmortizationInput(LoanInput):
    start_date: Optional[date] = None
    io_months: int = 0


class ScheduleRow(BaseModel):
    period: int
    date: str
    beginning_balance: float
    payment: float
    interest: float
    principal: float
    ending_balance: float


class AmortizationResponse(BaseModel):
    schedule: List[ScheduleRow]
    monthly_payment: float
    total_interest: float
    total_paid: float


@router.post("/monthly-payment", response_model=MonthlyPaymentResponse)
async def calculate_monthly_payment(inputs: LoanInput):
    """Amortized payment, and payment plus insurance."""
    payment = amortization.calculate_monthly_payment(
        inputs.principal, inputs.annual_rate, inputs.duration_months
    )
    return MonthlyPaymentResponse(
        monthly_payment=payment,
        monthly_amount=amortization.total_monthly_charge(payment, inputs.insurance_monthly),
    )


@router.post("/amortization", response_model=AmortizationResponse)
async def calculate_amortization(inputs: AmortizationInput):
    """Generate a repayment schedule."""
    schedule = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        duration_months=inputs.duration_months,
        start_date=inputs.start_date,
        io_months=inputs.io_months,
    )

    return AmortizationResponse(
        schedule=schedule,
        monthly_payment=amortization.calculate_monthly_payment(
            inputs.principal, inputs.annual_rate, inputs.duration_months
        ),
        total_interest=amortization.calculate_total_interest(schedule),
        total_paid=sum(row["payment"] for row in schedule),
    )
