"""
Credit lifecycle: save, refinance, delete and the finished-credit sweep.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from rentdesk.calculations.amortization import (
    calculate_monthly_payment,
    is_credit_finished,
    total_monthly_charge,
)
from rentdesk.calculations.cashflow import CreditTerms
from rentdesk.db.models import Credit, Property, User
from rentdesk.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CREDIT_FIELDS = [
    "credit_type",
    "down_payment",
    "principal",
    "annual_rate",
    "duration_months",
    "start_date",
    "insurance_monthly",
    "notes",
]


def to_terms(credit: Credit) -> CreditTerms:
    """Project a credit row onto the fields the cashflow engine needs."""
    return CreditTerms(
        monthly_payment=credit.monthly_payment,
        insurance_monthly=credit.insurance_monthly,
        start_date=credit.start_date,
        duration_months=credit.duration_months,
        is_active=bool(credit.is_active),
        monthly_amount=credit.monthly_amount,
    )


def mark_finished_credits_inactive(
    db: Session, now: Optional[datetime] = None
) -> List[str]:
    """
    Deactivate active credits whose term has elapsed.

    Each credit is evaluated on its own; a credit that cannot be evaluated
    is logged and left active.

    Returns:
        Ids of the credits deactivated by this sweep
    """
    if now is None:
        now = datetime.now()

    finished = []
    for credit in db.query(Credit).filter(Credit.is_active == True).all():
        try:
            done = is_credit_finished(credit, now)
        except Exception as e:
            logger.warning(f"Unable to evaluate credit {credit.id}: {str(e)}")
            continue
        if done:
            credit.is_active = False
            finished.append(credit.id)

    if finished:
        db.commit()
        logger.info(f"Deactivated {len(finished)} finished credit(s): {finished}")

    return finished


def list_credits_by_property(db: Session, property_id: str) -> List[Credit]:
    """Credits of a property, newest first."""
    return (
        db.query(Credit)
        .filter(Credit.property_id == property_id)
        .order_by(Credit.created_at.desc())
        .all()
    )


def get_active_credit(db: Session, property_id: str) -> Optional[Credit]:
    """First active credit of a property, if any."""
    for credit in list_credits_by_property(db, property_id):
        if credit.is_active:
            return credit
    return None


def get_credit(db: Session, credit_id: str) -> Credit:
    credit = db.query(Credit).filter(Credit.id == credit_id).first()
    if not credit:
        raise NotFoundError("Credit not found")
    return credit


def refinance_note(new_credit_id: str, on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"Refinanced on {on.isoformat()} -> new credit #{new_credit_id}"


def _append_note(existing: Optional[str], note: str) -> str:
    if not existing:
        return note
    return f"{existing}\n{note}".strip()


def save_credit(db: Session, payload: Dict[str, Any]) -> Credit:
    """
    Create or update a credit, recomputing its monthly figures.

    Updating a credit as active deactivates the other credits of the
    property. Creating one with ``supersedes_id`` refinances that credit:
    it is marked inactive and its notes record the replacement.

    Args:
        db: Database session
        payload: Credit fields; ``id`` selects update instead of create

    Returns:
        The persisted credit
    """
    prop = db.query(Property).filter(Property.id == payload.get("property_id")).first()
    if not prop:
        raise NotFoundError("Property not found")
    if not db.query(User).filter(User.id == payload.get("user_id")).first():
        raise NotFoundError("User not found")

    monthly_payment = calculate_monthly_payment(
        payload.get("principal") or 0,
        payload.get("annual_rate") or 0,
        payload.get("duration_months") or 0,
    )
    monthly_amount = total_monthly_charge(monthly_payment, payload.get("insurance_monthly"))
    is_active = payload.get("is_active")
    is_active = True if is_active is None else bool(is_active)

    credit_id = payload.get("id")
    supersedes_id = payload.get("supersedes_id")
    previous = None
    if not credit_id and supersedes_id:
        previous = get_credit(db, supersedes_id)
        if previous.property_id != prop.id:
            raise ValidationError("Refinanced credit belongs to another property")

    if credit_id:
        credit = get_credit(db, credit_id)
        if credit.property_id != prop.id:
            raise ValidationError("Credit belongs to another property")
    else:
        credit = Credit(user_id=payload["user_id"], property_id=prop.id)
        db.add(credit)

    for field in CREDIT_FIELDS:
        setattr(credit, field, payload.get(field))
    credit.credit_type = payload.get("credit_type") or "standard"
    credit.monthly_payment = monthly_payment
    credit.monthly_amount = monthly_amount
    credit.is_active = is_active

    if credit_id:
        if is_active:
            (
                db.query(Credit)
                .filter(Credit.property_id == prop.id, Credit.id != credit.id)
                .update({Credit.is_active: False}, synchronize_session="fetch")
            )
    elif previous is not None:
        db.flush()
        credit.supersedes_id = previous.id
        previous.is_active = False
        previous.notes = _append_note(previous.notes, refinance_note(credit.id))
        logger.info(f"Credit {previous.id} refinanced by {credit.id}")

    db.commit()
    db.refresh(credit)
    return credit


def delete_credit(db: Session, credit_id: str):
    credit = get_credit(db, credit_id)
    # Detach refinanced successors before removing the row
    db.query(Credit).filter(Credit.supersedes_id == credit.id).update(
        {Credit.supersedes_id: None}, synchronize_session="fetch"
    )
    db.delete(credit)
    db.commit()
