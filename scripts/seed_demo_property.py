"""
Seed the database with a demo user, property, credit and a year of rents.
"""
import sys
import os
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rentdesk.config import get_settings
from rentdesk.db.database import Database
from rentdesk.db.models import Expense, Income, Property, User
from rentdesk.services import credits as credit_service

DEMO_USERNAME = "demo"
DEMO_PROPERTY = "12 rue des Lilas"


def main():
    database = Database.open(get_settings().database_url)
    database.upgrade()

    try:
        with database.session_scope() as db:
            user = db.query(User).filter(User.username == DEMO_USERNAME).first()
            if not user:
                user = User(username=DEMO_USERNAME)
                db.add(user)
                db.flush()
            print(f"Demo user: {user.username} (ID: {user.id})")

            existing = (
                db.query(Property)
                .filter(Property.user_id == user.id, Property.name == DEMO_PROPERTY)
                .first()
            )
            if existing:
                print(f"Property '{DEMO_PROPERTY}' already exists (ID: {existing.id})")
                return

            prop = Property(
                user_id=user.id,
                name=DEMO_PROPERTY,
                address="12 rue des Lilas, Lyon",
                property_type="apartment",
                surface=48.0,
                base_rent=780.0,
                base_charges=60.0,
                purchase_price=185000.0,
            )
            db.add(prop)
            db.flush()
            print(f"Created property: {prop.name} (ID: {prop.id})")

            year = date.today().year
            # Rent paid every month except August
            for month in range(1, 13):
                if month == 8:
                    continue
                db.add(Income(property_id=prop.id, date=date(year, month, 5), amount=840.0))

            db.add(
                Expense(
                    property_id=prop.id,
                    date=date(year, 1, 15),
                    category="insurance",
                    amount=240.0,
                    is_recurring=True,
                    frequency="yearly",
                )
            )
            db.add(
                Expense(
                    property_id=prop.id,
                    date=date(year, 10, 15),
                    category="property_tax",
                    amount=1100.0,
                )
            )
            db.flush()

            credit = credit_service.save_credit(
                db,
                {
                    "user_id": user.id,
                    "property_id": prop.id,
                    "principal": 150000.0,
                    "annual_rate": 0.032,
                    "duration_months": 240,
                    "start_date": date(year - 2, 3, 1),
                    "insurance_monthly": 22.5,
                },
            )
            print(f"Created credit: {credit.monthly_amount:.2f}/month (ID: {credit.id})")
    finally:
        database.close()


if __name__ == "__main__":
    main()
