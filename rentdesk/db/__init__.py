"""
Database configuration and models.
"""

from rentdesk.db.database import Database, get_db
from rentdesk.db.models import Base

__all__ = ["Database", "get_db", "Base"]
