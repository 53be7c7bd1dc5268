"""
Versioned schema upgrades.

Each step carries an integer version and is applied at most once per
database; applied versions are recorded in ``schema_version``. Steps are
also idempotent on their own: they inspect the live schema and only add
what is missing, so databases created by older releases converge on the
current layout.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

from rentdesk.db.models import Base, SchemaVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaStep:
    """One schema upgrade."""

    version: int
    description: str
    apply: Callable[[Connection], None]


def has_column(connection: Connection, table: str, column: str) -> bool:
    """Check whether a column exists on a table."""
    columns = inspect(connection).get_columns(table)
    return any(col["name"] == column for col in columns)


def ensure_column(connection: Connection, table: str, column: str, definition: str):
    """Add a column if the table does not have it yet."""
    if has_column(connection, table, column):
        return
    connection.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {definition}"))
    logger.info(f"Added column {table}.{column}")


def _create_baseline(connection: Connection):
    Base.metadata.create_all(bind=connection)


def _add_purchase_price(connection: Connection):
    ensure_column(connection, "properties", "purchase_price", "FLOAT")


def _add_credit_terms(connection: Connection):
    ensure_column(connection, "credits", "credit_type", "VARCHAR(50)")
    ensure_column(connection, "credits", "down_payment", "FLOAT")
    ensure_column(connection, "credits", "principal", "FLOAT")
    ensure_column(connection, "credits", "annual_rate", "FLOAT")
    ensure_column(connection, "credits", "duration_months", "INTEGER")
    ensure_column(connection, "credits", "start_date", "DATE")
    ensure_column(connection, "credits", "monthly_payment", "FLOAT")
    ensure_column(connection, "credits", "insurance_monthly", "FLOAT")
    ensure_column(connection, "credits", "monthly_amount", "FLOAT")
    ensure_column(connection, "credits", "notes", "TEXT")
    ensure_column(connection, "credits", "is_active", "BOOLEAN NOT NULL DEFAULT 1")


def _backfill_monthly_payment(connection: Connection):
    connection.execute(
        text(
            "UPDATE credits SET monthly_payment = monthly_amount "
            "WHERE monthly_payment IS NULL AND monthly_amount IS NOT NULL"
        )
    )


def _add_credit_supersedes(connection: Connection):
    ensure_column(
        connection, "credits", "supersedes_id", "VARCHAR REFERENCES credits(id)"
    )


SCHEMA_STEPS: List[SchemaStep] = [
    SchemaStep(1, "baseline tables", _create_baseline),
    SchemaStep(2, "properties.purchase_price", _add_purchase_price),
    SchemaStep(3, "credit loan terms", _add_credit_terms),
    SchemaStep(4, "backfill credits.monthly_payment", _backfill_monthly_payment),
    SchemaStep(5, "credits.supersedes_id", _add_credit_supersedes),
]


def applied_versions(connection: Connection) -> List[int]:
    """List versions already recorded for this database."""
    rows = connection.execute(text("SELECT version FROM schema_version ORDER BY version"))
    return [row[0] for row in rows]


def upgrade(engine: Engine, steps: List[SchemaStep] = None) -> List[int]:
    """
    Apply pending schema steps in version order.

    Args:
        engine: Engine bound to the target database
        steps: Steps to consider (defaults to SCHEMA_STEPS)

    Returns:
        Versions applied by this call
    """
    if steps is None:
        steps = SCHEMA_STEPS

    applied = []
    with engine.begin() as connection:
        SchemaVersion.__table__.create(bind=connection, checkfirst=True)
        done = set(applied_versions(connection))

        for step in sorted(steps, key=lambda s: s.version):
            if step.version in done:
                continue
            step.apply(connection)
            connection.execute(
                SchemaVersion.__table__.insert().values(
                    version=step.version, description=step.description
                )
            )
            logger.info(f"Applied schema step {step.version}: {step.description}")
            applied.append(step.version)

    return applied
