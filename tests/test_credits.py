"""
Tests for the credit lifecycle: save, refinance, delete and sweep.
"""

import pytest
from datetime import date, datetime
from dateutil.relativedelta import relativedelta

from rentdesk.calculations.amortization import calculate_monthly_payment
from rentdesk.db.models import Credit, Property
from rentdesk.exceptions import NotFoundError, ValidationError
from rentdesk.services import credits as credit_service


def credit_payload(user, prop, **overrides):
    payload = {
        "user_id": user.id,
        "property_id": prop.id,
        "principal": 120000.0,
        "annual_rate": 0.03,
        "duration_months": 240,
        "start_date": date.today() - relativedelta(months=6),
        "insurance_monthly": 20.0,
    }
    payload.update(overrides)
    return payload


class TestSaveCredit:
    """Test creating and updating credits."""

    def test_derived_amounts(self, db_session, test_user, test_property):
        credit = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property)
        )
        assert credit.monthly_payment == pytest.approx(
            calculate_monthly_payment(120000.0, 0.03, 240)
        )
        assert 665 < credit.monthly_payment < 666
        assert credit.monthly_amount == pytest.approx(credit.monthly_payment + 20)
        assert credit.is_active is True
        assert credit.credit_type == "standard"

    def test_unknown_property(self, db_session, test_user, test_property):
        payload = credit_payload(test_user, test_property, property_id="missing")
        with pytest.raises(NotFoundError):
            credit_service.save_credit(db_session, payload)

    def test_update_recomputes(self, db_session, test_user, test_property):
        credit = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property)
        )
        updated = credit_service.save_credit(
            db_session,
            credit_payload(
                test_user, test_property, id=credit.id, annual_rate=0, duration_months=120
            ),
        )
        assert updated.id == credit.id
        assert updated.monthly_payment == 1000
        assert updated.monthly_amount == 1020

    def test_active_update_deactivates_siblings(self, db_session, test_user, test_property):
        first = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property)
        )
        second = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property, principal=50000.0)
        )
        credit_service.save_credit(
            db_session,
            credit_payload(test_user, test_property, id=first.id, is_active=True),
        )
        db_session.refresh(second)
        assert second.is_active is False
        assert credit_service.get_active_credit(db_session, test_property.id).id == first.id

    def test_update_on_other_property_rejected(self, db_session, test_user, test_property):
        other = Property(user_id=test_user.id, name="Other")
        db_session.add(other)
        db_session.commit()
        mine = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property)
        )
        theirs = credit_service.save_credit(
            db_session, credit_payload(test_user, other)
        )

        with pytest.raises(ValidationError):
            credit_service.save_credit(
                db_session,
                credit_payload(test_user, other, id=mine.id, is_active=True),
            )

        db_session.refresh(theirs)
        db_session.refresh(mine)
        assert theirs.is_active is True
        assert mine.property_id == test_property.id


class TestRefinance:
    """Test the explicit refinance link."""

    def test_refinance_links_and_deactivates(self, db_session, test_user, test_property):
        old = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property)
        )
        new = credit_service.save_credit(
            db_session,
            credit_payload(test_user, test_property, annual_rate=0.02, supersedes_id=old.id),
        )
        db_session.refresh(old)

        assert new.supersedes_id == old.id
        assert new.supersedes.id == old.id
        assert old.is_active is False
        assert f"new credit #{new.id}" in old.notes
        assert old.notes.startswith("Refinanced on ")

    def test_refinance_keeps_existing_notes(self, db_session, test_user, test_property):
        old = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property, notes="Bank A")
        )
        credit_service.save_credit(
            db_session, credit_payload(test_user, test_property, supersedes_id=old.id)
        )
        db_session.refresh(old)
        assert old.notes.splitlines()[0] == "Bank A"
        assert len(old.notes.splitlines()) == 2

    def test_refinance_other_property_rejected(self, db_session, test_user, test_property):
        other = Property(user_id=test_user.id, name="Other")
        db_session.add(other)
        db_session.commit()

        old = credit_service.save_credit(db_session, credit_payload(test_user, other))
        with pytest.raises(ValidationError):
            credit_service.save_credit(
                db_session,
                credit_payload(test_user, test_property, supersedes_id=old.id),
            )

    def test_refinance_unknown_credit(self, db_session, test_user, test_property):
        with pytest.raises(NotFoundError):
            credit_service.save_credit(
                db_session,
                credit_payload(test_user, test_property, supersedes_id="missing"),
            )

    def test_delete_detaches_successor(self, db_session, test_user, test_property):
        old = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property)
        )
        new = credit_service.save_credit(
            db_session, credit_payload(test_user, test_property, supersedes_id=old.id)
        )
        credit_service.delete_credit(db_session, old.id)
        db_session.refresh(new)

        assert new.supersedes_id is None
        with pytest.raises(NotFoundError):
            credit_service.get_credit(db_session, old.id)


class TestFinishedCreditSweep:
    """Test deactivation of credits whose term has elapsed."""

    def _add(self, db_session, test_user, test_property, start, months):
        credit = Credit(
            user_id=test_user.id,
            property_id=test_property.id,
            start_date=start,
            duration_months=months,
            monthly_payment=500.0,
            is_active=True,
        )
        db_session.add(credit)
        db_session.commit()
        return credit

    def test_finished_credit_deactivated(self, db_session, test_user, test_property):
        finished = self._add(
            db_session, test_user, test_property, date.today() - relativedelta(months=24), 12
        )
        running = self._add(
            db_session, test_user, test_property, date.today() - relativedelta(months=1), 12
        )

        assert credit_service.mark_finished_credits_inactive(db_session) == [finished.id]
        db_session.refresh(finished)
        db_session.refresh(running)
        assert finished.is_active is False
        assert running.is_active is True

    def test_sweep_is_idempotent(self, db_session, test_user, test_property):
        self._add(db_session, test_user, test_property, date(2010, 1, 1), 12)
        assert len(credit_service.mark_finished_credits_inactive(db_session)) == 1
        assert credit_service.mark_finished_credits_inactive(db_session) == []

    def test_credit_without_terms_kept(self, db_session, test_user, test_property):
        self._add(db_session, test_user, test_property, None, None)
        assert credit_service.mark_finished_credits_inactive(db_session) == []

    def test_reference_instant(self, db_session, test_user, test_property):
        credit = self._add(db_session, test_user, test_property, date(2030, 1, 1), 12)
        assert credit_service.mark_finished_credits_inactive(
            db_session, now=datetime(2031, 1, 1)
        ) == [credit.id]

    def test_failing_credit_skipped(self, db_session, test_user, test_property, monkeypatch):
        broken = self._add(db_session, test_user, test_property, date(2010, 1, 1), 12)
        finished = self._add(db_session, test_user, test_property, date(2011, 1, 1), 12)
        real = credit_service.is_credit_finished

        def flaky(credit, now=None):
            if credit.id == broken.id:
                raise RuntimeError("corrupt row")
            return real(credit, now)

        monkeypatch.setattr(credit_service, "is_credit_finished", flaky)

        assert credit_service.mark_finished_credits_inactive(db_session) == [finished.id]
        db_session.refresh(broken)
        assert broken.is_active is True
