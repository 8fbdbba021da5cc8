# biblioteca/services/sync.py

import logging
import time
from contextlib import contextmanager
from datetime import date, datetime, UTC
from typing import Iterator, List, Optional, Union

from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError

from ..errors import ValidationError, NotFound, Conflict, UpstreamUnavailable
from ..models.catalog import Availability
from ..models.circulation import SyncState, LoanRecord, CheckoutResult, ReturnResult
from ..sa.database import Database
from ..sa.repositories.loan import LoanRepository
from .catalog_query import CatalogQueryService
from .catalog_write import CatalogWriteService

logger = logging.getLogger(__name__)


def _parse_date(value: Union[date, str, None]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValidationError(f"Invalid due date: {value!r}")


def _parse_id(value, label: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}: {value!r}")
    if parsed <= 0:
        raise ValidationError(f"Invalid {label}: {value!r}")
    return parsed


class SyncCoordinator:
    """Checkout and return across the loan ledger and the catalog graph.

    The ledger is the record of who holds what. Graph availability is a
    projection of it: once the ledger write has succeeded the operation
    succeeds, and a failed projection is reported as ``SyncState.DEGRADED``.
    """

    def __init__(
        self,
        database: Database,
        queries: CatalogQueryService,
        writer: CatalogWriteService,
        retries: int = 3,
        retry_delay: float = 0.5
    ):
        """
        Initialize the coordinator.

        Args:
            database: Ledger database
            queries: Catalog query service
            writer: Catalog write service
            retries: Attempts at the graph projection before degrading
            retry_delay: Initial delay between projection attempts, doubled each time
        """
        self.database = database
        self.queries = queries
        self.writer = writer
        self.retries = max(1, retries)
        self.retry_delay = retry_delay

    @contextmanager
    def _ledger(self) -> Iterator[LoanRepository]:
        """Repository bound to a session that is committed or rolled back on exit"""
        try:
            with self.database.get_db() as session:
                yield LoanRepository(session)
        except (OperationalError, PoolTimeoutError) as e:
            logger.error(f"Ledger unavailable: {e}")
            raise UpstreamUnavailable("ledger", str(e)) from e

    def checkout(
        self,
        user_id: int,
        barcode: str,
        due_date: Union[date, str],
        registered_by: Optional[int] = None
    ) -> CheckoutResult:
        """
        Lend the item with this barcode to a user.

        Args:
            user_id: Borrowing user
            barcode: Barcode of the physical item
            due_date: Date the item is due back (date or ISO string)
            registered_by: User registering the loan (defaults to the borrower)

        Returns:
            CheckoutResult with the new loan id and the sync state of the graph

        Raises:
            ValidationError: If an argument is missing or malformed
            NotFound: If no item has this barcode
            Conflict: If the item is not available or already has an active loan
            UpstreamUnavailable: If the item cannot be resolved or the loan cannot be written
        """
        user_id = _parse_id(user_id, "user id")
        if registered_by is not None:
            registered_by = _parse_id(registered_by, "registering user id")
        if not isinstance(barcode, str) or not barcode.strip():
            raise ValidationError("Barcode is required")
        barcode = barcode.strip()
        due = _parse_date(due_date)

        item = self.queries.find_item_by_barcode(barcode)
        if not item.is_available:
            raise Conflict(
                f"Item {barcode} is not available (state: {item.availability})",
                observed=item.availability
            )

        with self._ledger() as loans:
            active = loans.get_active_by_item_key(barcode)
            if active is not None:
                raise Conflict(
                    f"Item {barcode} already has an active loan ({active.id})",
                    observed="active"
                )
            try:
                loan = loans.create_loan(
                    user_id=user_id,
                    item_key=barcode,
                    due_date=due,
                    registered_by=registered_by
                )
            except IntegrityError as e:
                raise Conflict(f"Item {barcode} already has an active loan", observed="active") from e
            loan_id = loan.id
        logger.info(f"Loan {loan_id} created: item {barcode} to user {user_id}, due {due}")

        sync_state = self._project(item.item_id, Availability.LOANED, loan_id)
        return CheckoutResult(
            loan_id=loan_id,
            item_id=item.item_id,
            barcode=barcode,
            sync_state=sync_state
        )

    def return_loan(self, loan_id: int) -> ReturnResult:
        """
        Close an active loan and make its item available again.

        Raises:
            ValidationError: If the loan id is malformed
            NotFound: If the loan does not exist
            Conflict: If the loan was already returned
            UpstreamUnavailable: If the ledger cannot be updated
        """
        loan_id = _parse_id(loan_id, "loan id")

        with self._ledger() as loans:
            closed = loans.mark_returned(loan_id, datetime.now(UTC))
            loan = loans.get_by_id(loan_id)
            if loan is None:
                raise NotFound("Loan", loan_id)
            if not closed:
                raise Conflict(f"Loan {loan_id} was already returned", observed=loan.status)
            item_key = loan.item_key
        logger.info(f"Loan {loan_id} returned: item {item_key}")

        try:
            item = self.queries.find_item_by_barcode(item_key)
        except (NotFound, UpstreamUnavailable) as e:
            logger.warning(
                f"Graph not updated after return: could not resolve item {item_key} "
                f"(target state {Availability.AVAILABLE.value}, loan {loan_id}): {e}"
            )
            return ReturnResult(loan_id=loan_id, sync_state=SyncState.DEGRADED)

        sync_state = self._project(item.item_id, Availability.AVAILABLE, loan_id)
        return ReturnResult(loan_id=loan_id, sync_state=sync_state)

    def _project(self, item_id: str, state: Availability, loan_id: int) -> SyncState:
        """Push an availability change to the graph, retrying before giving up"""
        delay = self.retry_delay
        for attempt in range(1, self.retries + 1):
            try:
                self.writer.set_availability(item_id, state)
                return SyncState.SYNCED
            except NotFound as e:
                logger.warning(
                    f"Graph out of sync: item {item_id} should be {state.value} "
                    f"(loan {loan_id}) but has no availability to update: {e}"
                )
                return SyncState.DEGRADED
            except UpstreamUnavailable as e:
                if attempt < self.retries:
                    logger.warning(
                        f"Availability update attempt {attempt} failed for {item_id}. "
                        f"Retrying in {delay} seconds."
                    )
                    time.sleep(delay)
                    delay *= 2
                else:
                    logger.warning(
                        f"Graph out of sync: item {item_id} should be {state.value} "
                        f"(loan {loan_id}) after {self.retries} attempts: {e}"
                    )
        return SyncState.DEGRADED

    def get_loan(self, loan_id: int) -> LoanRecord:
        loan_id = _parse_id(loan_id, "loan id")
        with self._ledger() as loans:
            loan = loans.get_by_id(loan_id)
            if loan is None:
                raise NotFound("Loan", loan_id)
            return LoanRecord.model_validate(loan)

    def active_loans(self, user_id: int) -> List[LoanRecord]:
        """A user's active loans, most recent first"""
        user_id = _parse_id(user_id, "user id")
        with self._ledger() as loans:
            return [LoanRecord.model_validate(loan) for loan in loans.list_active_for_user(user_id)]
