"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows every table
before create_all() runs, and so other modules can import from
bankdash.models directly.
"""

from bankdash.models.user import User  # noqa: F401
from bankdash.models.session import Session  # noqa: F401
from bankdash.models.user_profile import UserProfile  # noqa: F401
from bankdash.models.bank import Bank  # noqa: F401
from bankdash.models.transaction import Transaction  # noqa: F401
