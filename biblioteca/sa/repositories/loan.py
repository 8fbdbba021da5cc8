# biblioteca/sa/repositories/loan.py
from datetime import date, datetime, UTC
from typing import List, Optional
from sqlalchemy import update, desc
from sqlalchemy.orm import Session
from biblioteca.sa.models import Loan
from biblioteca.models.circulation import LoanStatus

class LoanRepository:
    """Repository for managing Loan entities."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, loan_id: int) -> Optional[Loan]:
        """Get a loan by its ID.

        Args:
            loan_id: The ID of the loan to retrieve

        Returns:
            The Loan object if found, None otherwise
        """
        return self.session.query(Loan).filter(Loan.id == loan_id).first()

    def get_active_by_item_key(self, item_key: str) -> Optional[Loan]:
        """Get the active loan for an item, if any.

        Args:
            item_key: Barcode of the loaned item

        Returns:
            The active Loan if the item is on loan, None otherwise
        """
        return (
            self.session.query(Loan)
            .filter(Loan.item_key == item_key, Loan.status == LoanStatus.ACTIVE.value)
            .first()
        )

    def list_active_for_user(self, user_id: int) -> List[Loan]:
        """Get a user's active loans, most recent first.

        Args:
            user_id: The borrowing user

        Returns:
            List of active Loan objects
        """
        return (
            self.session.query(Loan)
            .filter(Loan.user_id == user_id, Loan.status == LoanStatus.ACTIVE.value)
            .order_by(desc(Loan.loan_date), desc(Loan.id))
            .all()
        )

    def create_loan(
        self,
        user_id: int,
        item_key: str,
        due_date: date,
        registered_by: Optional[int] = None,
        loan_date: Optional[datetime] = None
    ) -> Loan:
        """Create a new active loan.

        Args:
            user_id: The borrowing user
            item_key: Barcode of the loaned item
            due_date: Date the item is due back
            registered_by: User who registered the loan (defaults to the borrower)
            loan_date: Loan timestamp (defaults to now)

        Returns:
            The created Loan object

        Raises:
            sqlalchemy.exc.IntegrityError: If the item already has an active loan
        """
        loan = Loan(
            user_id=user_id,
            item_key=item_key,
            loan_date=loan_date or datetime.now(UTC),
            due_date=due_date,
            status=LoanStatus.ACTIVE.value,
            registered_by=registered_by if registered_by is not None else user_id,
            active_key=item_key
        )
        self.session.add(loan)
        self.session.commit()
        return loan

    def mark_returned(self, loan_id: int, returned_at: Optional[datetime] = None) -> bool:
        """Close an active loan.

        The update only matches a loan that is still active, so a loan can be
        returned once.

        Args:
            loan_id: The ID of the loan to close
            returned_at: Return timestamp (defaults to now)

        Returns:
            True if an active loan was closed, False if no active loan has that ID
        """
        now = returned_at or datetime.now(UTC)
        result = self.session.execute(
            update(Loan)
            .where(Loan.id == loan_id, Loan.status == LoanStatus.ACTIVE.value)
            .values(
                status=LoanStatus.RETURNED.value,
                return_date=now,
                active_key=None,
                updated_at=now
            )
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1
