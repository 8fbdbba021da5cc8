# biblioteca/sa/models/loan.py
from datetime import date, datetime, UTC
from sqlalchemy import Integer, String, Date, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base, TimestampMixin
from ...models.circulation import LoanStatus

class Loan(Base, TimestampMixin):
    """A loan of one physical item, keyed by its barcode.

    ``active_key`` mirrors ``item_key`` while the loan is active and is
    cleared on return. Its unique constraint allows at most one active loan
    per item; NULLs do not collide, so closed loans never conflict.
    """
    __tablename__ = 'loan'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    item_key: Mapped[str] = mapped_column(String(255), nullable=False)
    loan_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=LoanStatus.ACTIVE.value)
    registered_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    active_key: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        UniqueConstraint('active_key', name='uix_loan_active_item'),
        Index('idx_loan_item_key', 'item_key'),
        Index('idx_loan_user_status', 'user_id', 'status'),
    )

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE.value
