# biblioteca/models/__init__.py
from .catalog import (
    Availability, WorkFilter, WorkSpec, WorkSummary, WorkDetail,
    WorkRef, ItemLookup, BibliographicResource, UNKNOWN_AUTHOR, display_author
)
from .circulation import LoanStatus, SyncState, LoanRecord, CheckoutResult, ReturnResult

__all__ = [
    'Availability',
    'WorkFilter',
    'WorkSpec',
    'WorkSummary',
    'WorkDetail',
    'WorkRef',
    'ItemLookup',
    'BibliographicResource',
    'UNKNOWN_AUTHOR',
    'display_author',
    'LoanStatus',
    'SyncState',
    'LoanRecord',
    'CheckoutResult',
    'ReturnResult',
]
