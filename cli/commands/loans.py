import click
from typing import Optional
from biblioteca.models import SyncState
from ..utils import handle_errors, echo_field

def _echo_sync(sync_state: SyncState) -> None:
    if sync_state == SyncState.SYNCED:
        click.echo(click.style("Catalog availability updated.", fg='green'))
    else:
        click.echo(click.style(
            "Warning: loan recorded but catalog availability could not be updated.", fg='yellow'
        ))

@click.group()
def loans():
    """Loan checkout and return commands"""
    pass

@loans.command()
@click.option('--user-id', type=int, required=True, help='Borrowing user')
@click.option('--barcode', required=True, help='Barcode of the item')
@click.option('--due', 'due_date', required=True, help='Due date (YYYY-MM-DD)')
@click.option('--registered-by', type=int, default=None, help='User registering the loan')
@click.pass_obj
@handle_errors
def checkout(app, user_id: int, barcode: str, due_date: str, registered_by: Optional[int]):
    """Lend an item to a user.

    Example:
        biblioteca loans checkout --user-id 7 --barcode ITEM-001 --due 2025-01-01
    """
    result = app.coordinator.checkout(user_id, barcode, due_date, registered_by=registered_by)
    click.echo(click.style("Loan created: ", fg='green') + click.style(str(result.loan_id), fg='cyan'))
    _echo_sync(result.sync_state)

@loans.command(name="return")
@click.argument('loan_id', type=int)
@click.pass_obj
@handle_errors
def return_loan(app, loan_id: int):
    """Register the return of LOAN_ID."""
    result = app.coordinator.return_loan(loan_id)
    click.echo(click.style(f"Loan {result.loan_id} returned.", fg='green'))
    _echo_sync(result.sync_state)

@loans.command()
@click.argument('loan_id', type=int)
@click.pass_obj
@handle_errors
def show(app, loan_id: int):
    """Show a loan."""
    loan = app.coordinator.get_loan(loan_id)
    echo_field("Loan", loan.id)
    echo_field("User", loan.user_id)
    echo_field("Item", loan.item_key)
    echo_field("Status", loan.status.value)
    echo_field("Loaned", loan.loan_date.isoformat())
    echo_field("Due", loan.due_date.isoformat())
    echo_field("Returned", loan.return_date.isoformat() if loan.return_date else None)

@loans.command()
@click.argument('user_id', type=int)
@click.pass_obj
@handle_errors
def active(app, user_id: int):
    """List the active loans of USER_ID."""
    records = app.coordinator.active_loans(user_id)
    if not records:
        click.echo("No active loans.")
        return
    for loan in records:
        click.echo(f" - Loan {loan.id}: {loan.item_key} due {loan.due_date.isoformat()}")
