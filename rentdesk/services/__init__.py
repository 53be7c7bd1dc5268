"""
Application services module.
"""

from rentdesk.services import credits, exporter, finance

__all__ = ["credits", "exporter", "finance"]
