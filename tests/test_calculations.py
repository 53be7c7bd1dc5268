"""
Tests for the loan amortization engine.
"""

import math

import pytest
from datetime import date, datetime
from dateutil.relativedelta import relativedelta

from rentdesk.calculations.amortization import (
    calculate_monthly_payment,
    calculate_remaining_balance,
    calculate_total_interest,
    credit_end_date,
    generate_amortization_schedule,
    is_credit_finished,
    parse_date,
    total_monthly_charge,
)


class TestMonthlyPayment:
    """Test the amortized monthly payment."""

    def test_reference_mortgage(self):
        """200k at 4% over 30 years."""
        payment = calculate_monthly_payment(200000, 0.04, 360)
        assert abs(payment - 954.83) < 0.1

    def test_zero_rate_is_straight_line(self):
        assert calculate_monthly_payment(12000, 0, 12) == 1000
        assert calculate_monthly_payment(12000, None, 24) == 500

    @pytest.mark.parametrize(
        "principal,rate,duration",
        [(100000, 0.03, 240), (5000, 0.12, 6), (350000, 0.015, 300)],
    )
    def test_positive_finite_payment(self, principal, rate, duration):
        payment = calculate_monthly_payment(principal, rate, duration)
        assert payment > 0
        assert math.isfinite(payment)
        # Interest makes the payment exceed the straight-line share
        assert payment > principal / duration

    def test_zero_principal(self):
        assert calculate_monthly_payment(0, 0.04, 360) == 0

    def test_zero_duration(self):
        assert calculate_monthly_payment(200000, 0.04, 0) == 0

    def test_vanishing_rate(self):
        # (1 + r) ** -n rounds to exactly 1.0
        assert calculate_monthly_payment(1000, 1e-20, 12) == 0

    def test_negative_inputs(self):
        assert calculate_monthly_payment(-1000, 0.04, 12) == 0
        assert calculate_monthly_payment(1000, 0.04, -12) == 0

    def test_negative_rate_treated_as_zero(self):
        assert calculate_monthly_payment(1200, -0.05, 12) == 100

    def test_unusable_values_degrade_to_zero(self):
        assert calculate_monthly_payment(None, 0.04, 12) == 0
        assert calculate_monthly_payment("abc", 0.04, 12) == 0
        assert calculate_monthly_payment(float("nan"), 0.04, 12) == 0
        assert calculate_monthly_payment(1000, 0.04, float("inf")) == 0

    def test_numeric_strings_accepted(self):
        assert calculate_monthly_payment("1200", "0", "12") == 100


class TestTotalMonthlyCharge:
    def test_payment_plus_insurance(self):
        assert total_monthly_charge(500, 25) == 525

    def test_missing_insurance(self):
        assert total_monthly_charge(500, None) == 500

    def test_missing_payment(self):
        assert total_monthly_charge(None, 30) == 30
        assert total_monthly_charge(None, None) == 0


class TestCreditCompletion:
    """Test credit end date and finished status."""

    def test_missing_fields_not_finished(self):
        assert is_credit_finished({"start_date": None, "duration_months": None}) is False

    def test_empty_credit_not_finished(self):
        assert is_credit_finished(None) is False
        assert is_credit_finished({}) is False

    def test_elapsed_term_is_finished(self):
        start = date.today() - relativedelta(months=24)
        credit = {"start_date": start.isoformat(), "duration_months": 12}
        assert is_credit_finished(credit) is True

    def test_running_term_not_finished(self):
        start = date.today() - relativedelta(months=1)
        credit = {"start_date": start.isoformat(), "duration_months": 12}
        assert is_credit_finished(credit) is False

    def test_reference_date_on_end_is_finished(self):
        credit = {"start_date": "2020-03-01", "duration_months": 12}
        assert is_credit_finished(credit, date(2021, 3, 1)) is True
        assert is_credit_finished(credit, date(2021, 2, 28)) is False

    def test_malformed_start_date(self):
        credit = {"start_date": "not a date", "duration_months": 12}
        assert is_credit_finished(credit) is False

    def test_malformed_reference_date(self):
        credit = {"start_date": "2020-01-01", "duration_months": 12}
        assert is_credit_finished(credit, "yesterday-ish") is False

    def test_zero_duration_not_finished(self):
        assert is_credit_finished({"start_date": "2020-01-01", "duration_months": 0}) is False

    def test_object_credit(self):
        class Row:
            start_date = date(2019, 6, 15)
            duration_months = 24

        assert is_credit_finished(Row(), date(2022, 1, 1)) is True

    def test_end_date_clamps_to_month_end(self):
        end = credit_end_date({"start_date": "2024-01-31", "duration_months": 1})
        assert end == datetime(2024, 2, 29)

    def test_parse_date_forms(self):
        assert parse_date("2024-05-01") == datetime(2024, 5, 1)
        assert parse_date(date(2024, 5, 1)) == datetime(2024, 5, 1)
        assert parse_date("") is None
        assert parse_date(42) is None


class TestAmortizationSchedule:
    """Test loan amortization schedules."""

    def test_schedule_length(self):
        schedule = generate_amortization_schedule(100000, 0.06, 60, date(2024, 1, 1))
        assert len(schedule) == 60
        assert schedule[0]["date"] == "2024-01-01"
        assert schedule[-1]["date"] == "2028-12-01"

    def test_schedule_pays_off_principal(self):
        schedule = generate_amortization_schedule(100000, 0.06, 60, date(2024, 1, 1))
        assert schedule[-1]["ending_balance"] == 0
        assert abs(sum(row["principal"] for row in schedule) - 100000) < 1

    def test_interest_only_periods(self):
        schedule = generate_amortization_schedule(
            100000, 0.06, 60, date(2024, 1, 1), io_months=12
        )
        assert len(schedule) == 72
        for row in schedule[:12]:
            assert row["principal"] == 0
            assert row["interest"] == 500
        assert schedule[12]["principal"] > 0

    def test_total_interest(self):
        schedule = generate_amortization_schedule(12000, 0, 12, date(2024, 1, 1))
        assert calculate_total_interest(schedule) == 0
        assert all(row["payment"] == 1000 for row in schedule)

    def test_empty_schedule(self):
        assert generate_amortization_schedule(0, 0.05, 60) == []
        assert generate_amortization_schedule(1000, 0.05, 0) == []

    def test_remaining_balance(self):
        assert calculate_remaining_balance(12000, 0, 12, 6) == 6000
        balance = calculate_remaining_balance(100000, 0.06, 60, 60)
        assert abs(balance) < 0.01
