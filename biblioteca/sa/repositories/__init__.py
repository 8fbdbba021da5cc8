# biblioteca/sa/repositories/__init__.py
from .loan import LoanRepository

__all__ = ['LoanRepository']
