"""
Tests for the database-backed financial dashboards.
"""

import pytest
from datetime import date

from rentdesk.db.models import Credit, Expense, Income, Property
from rentdesk.exceptions import NotFoundError
from rentdesk.services import finance


@pytest.fixture
def year_of_records(db_session, test_property):
    """Rent paid every month but March, a few expenses and a running credit."""
    for month in range(1, 13):
        if month == 3:
            continue
        db_session.add(
            Income(property_id=test_property.id, date=date(2024, month, 5), amount=650.0)
        )
    db_session.add_all(
        [
            Expense(
                property_id=test_property.id,
                date=date(2024, 11, 2),
                category="property_tax",
                amount=800.0,
            ),
            Expense(
                property_id=test_property.id,
                date=date(2023, 1, 1),
                category="insurance",
                amount=240.0,
                is_recurring=True,
                frequency="yearly",
            ),
            Expense(
                property_id=test_property.id,
                date=date(2022, 6, 1),
                category="repairs",
                amount=5000.0,
            ),
            Credit(
                user_id=test_property.user_id,
                property_id=test_property.id,
                start_date=date(2020, 1, 1),
                duration_months=300,
                monthly_payment=300.0,
                insurance_monthly=15.0,
                is_active=True,
            ),
        ]
    )
    db_session.commit()
    return test_property


class TestPropertyDashboards:
    def test_cashflow(self, db_session, year_of_records):
        rows = finance.property_cashflow(db_session, year_of_records.id, 2024, sweep=False)
        assert len(rows) == 12
        assert rows[0]["income"] == 650
        assert rows[0]["expenses"] == 20
        assert rows[0]["credit"] == 315
        assert rows[2]["vacancy"] == 1
        assert rows[10]["expenses"] == 820

    def test_summary(self, db_session, year_of_records):
        summary = finance.property_summary(db_session, year_of_records.id, 2024, sweep=False)
        assert summary["total_rents_received"] == 7150
        assert summary["total_expenses"] == pytest.approx(1040)
        assert summary["annual_credit"] == pytest.approx(3780)
        assert summary["vacancy_cost"] == 650
        # (7150 / 120000) * 100
        assert summary["gross_yield"] == pytest.approx(5.958333, rel=1e-5)
        assert [item["category"] for item in summary["expense_breakdown"]] == [
            "property_tax",
            "insurance",
        ]

    def test_summary_price_override(self, db_session, year_of_records):
        summary = finance.property_summary(
            db_session, year_of_records.id, 2024, purchase_price=71500.0, sweep=False
        )
        assert summary["gross_yield"] == pytest.approx(10.0)

    def test_vacancy(self, db_session, year_of_records):
        report = finance.property_vacancy(db_session, year_of_records.id, 2024)
        assert report == {"vacant_months": [3], "vacancy_rate": 1 / 12}

    def test_year_range(self, db_session, year_of_records):
        assert finance.year_range(db_session, year_of_records.id) == {
            "min_year": 2022,
            "max_year": 2024,
        }

    def test_year_range_defaults_to_current_year(self, db_session, test_property):
        current = date.today().year
        assert finance.year_range(db_session, test_property.id) == {
            "min_year": current,
            "max_year": current,
        }

    def test_unknown_property(self, db_session):
        with pytest.raises(NotFoundError):
            finance.property_cashflow(db_session, "missing", 2024, sweep=False)

    def test_report(self, db_session, year_of_records):
        report = finance.property_report(db_session, year_of_records.id, 2024)
        assert report["property"].id == year_of_records.id
        assert report["vacancy"]["vacant_months"] == [3]
        assert report["summary"]["year"] == 2024


class TestPortfolioDashboard:
    def test_archived_properties_excluded(self, db_session, test_user, year_of_records):
        archived = Property(user_id=test_user.id, name="Old barn", status="archived")
        db_session.add(archived)
        db_session.commit()
        db_session.add(Income(property_id=archived.id, date=date(2024, 1, 1), amount=999.0))
        db_session.commit()

        result = finance.portfolio_dashboard(db_session, test_user.id, 2024, sweep=False)
        assert result["year"] == 2024
        assert [p["property_id"] for p in result["performances"]] == [year_of_records.id]
        assert result["kpis"]["total_income"] == 7150

    def test_matches_property_rows(self, db_session, test_user, year_of_records):
        second = Property(user_id=test_user.id, name="Loft", base_rent=900.0)
        db_session.add(second)
        db_session.commit()
        db_session.add(Income(property_id=second.id, date=date(2024, 3, 10), amount=900.0))
        db_session.commit()

        result = finance.portfolio_dashboard(db_session, test_user.id, 2024, sweep=False)
        first_rows = finance.property_cashflow(db_session, year_of_records.id, 2024, sweep=False)
        second_rows = finance.property_cashflow(db_session, second.id, 2024, sweep=False)

        for month in range(12):
            assert result["monthly"][month]["income"] == pytest.approx(
                first_rows[month]["income"] + second_rows[month]["income"]
            )
            assert result["monthly"][month]["cashflow"] == pytest.approx(
                first_rows[month]["cashflow"] + second_rows[month]["cashflow"]
            )

    def test_no_properties(self, db_session, test_user):
        result = finance.portfolio_dashboard(db_session, test_user.id, 2024, sweep=False)
        assert result["monthly"] == []
        assert result["alerts"] == []
