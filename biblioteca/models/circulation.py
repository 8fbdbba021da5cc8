# biblioteca/models/circulation.py

from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class LoanStatus(str, Enum):
    ACTIVE = "active"
    RETURNED = "returned"


class SyncState(str, Enum):
    """Whether the graph projection followed the ledger write"""
    SYNCED = "synced"
    DEGRADED = "degraded"  # ledger written, graph availability not updated


class LoanRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    item_key: str
    loan_date: datetime
    due_date: date
    return_date: Optional[datetime] = None
    status: LoanStatus
    registered_by: Optional[int] = None


class CheckoutResult(BaseModel):
    loan_id: int
    item_id: str
    barcode: str
    sync_state: SyncState


class ReturnResult(BaseModel):
    loan_id: int
    sync_state: SyncState
