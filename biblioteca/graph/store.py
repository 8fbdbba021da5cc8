# biblioteca/graph/store.py
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterator, List, Optional

Binding = Dict[str, str]


class ResultSet:
    """Bindings of a SELECT query.

    Rows are converted lazily on iteration and the set can be iterated any
    number of times. Variables left unbound by an OPTIONAL are absent from
    the row rather than mapped to ``None``.
    """

    def __init__(self, rows: List[Any], convert: Callable[[Any], Binding]):
        self._rows = rows
        self._convert = convert

    def __iter__(self) -> Iterator[Binding]:
        return (self._convert(row) for row in self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __bool__(self) -> bool:
        return bool(self._rows)

    def first(self) -> Optional[Binding]:
        return next(iter(self), None)


class GraphStore(ABC):
    """Query/update access to the catalog triple store.

    Implementations raise ``UpstreamUnavailable`` for transport errors and
    timeouts. Separate ``update`` calls are not atomic together.
    """

    @abstractmethod
    def query(self, statement: str) -> ResultSet:
        """Run a SELECT statement"""

    @abstractmethod
    def ask(self, statement: str) -> bool:
        """Run an ASK statement"""

    @abstractmethod
    def update(self, statement: str) -> None:
        """Run an update. A DELETE/INSERT whose WHERE matches nothing is a no-op."""

    def close(self) -> None:
        pass
