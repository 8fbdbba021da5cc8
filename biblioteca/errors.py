# biblioteca/errors.py
from typing import Optional


class BibliotecaError(Exception):
    """Base class for every error raised by the catalog and loan services"""


class ValidationError(BibliotecaError):
    """Required input is missing or malformed. Raised before any write."""


class NotFound(BibliotecaError):
    """A referenced Work, Item or Loan does not exist."""

    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class Conflict(BibliotecaError):
    """The target is not in a state that allows the operation.

    ``observed`` holds the state that was seen, e.g. ``"prestado"`` for an
    item that is already on loan or ``"returned"`` for a closed loan.
    """

    def __init__(self, message: str, observed: Optional[str] = None):
        self.observed = observed
        super().__init__(message)


class UpstreamUnavailable(BibliotecaError):
    """Transport failure or timeout against the graph store or the ledger."""

    def __init__(self, store: str, message: str):
        self.store = store
        super().__init__(f"{store} store unavailable: {message}")
