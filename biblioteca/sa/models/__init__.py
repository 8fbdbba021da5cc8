# biblioteca/sa/models/__init__.py
from .base import Base, TimestampMixin
from .loan import Loan

__all__ = [
    'Base',
    'TimestampMixin',
    'Loan',
]
