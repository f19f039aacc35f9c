"""Expose commonly used ORM models at package level.

These re-exports are intentional so callers can import from
``models`` (e.g. `from models import Customer`).
"""

from .base import Base  # noqa: F401
from .jargons import Jargon  # noqa: F401
from .reference import Customer, Driver, Product  # noqa: F401
