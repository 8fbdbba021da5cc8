# biblioteca/sa/__init__.py
from .database import Database
from .models import Base, Loan

__all__ = [
    'Database',
    'Base',
    'Loan',
]
