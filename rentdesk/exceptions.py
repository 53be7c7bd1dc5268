"""
Domain exceptions raised by the service layer.

API routes translate these into HTTP errors.
"""


class RentdeskError(Exception):
    """Base exception for all rentdesk errors."""


class NotFoundError(RentdeskError):
    """A referenced record does not exist."""


class ValidationError(RentdeskError):
    """A payload failed a business rule (empty name, invalid status, ...)."""
