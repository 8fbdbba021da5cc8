# biblioteca/graph/local.py
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from rdflib import Graph

from ..errors import UpstreamUnavailable
from .store import Binding, GraphStore, ResultSet

logger = logging.getLogger(__name__)


def _convert_row(row) -> Binding:
    return {str(name): str(value) for name, value in row.asdict().items()}


class LocalGraphStore(GraphStore):
    """In-process graph store backed by rdflib.

    Used for development and tests. When ``data_file`` is given the graph is
    loaded from that Turtle file and written back after every update. If the
    write fails the update is undone in memory as well.
    """

    def __init__(self, data_file: Optional[str] = None):
        self.graph = Graph()
        self.data_file = Path(data_file) if data_file else None
        self._lock = threading.Lock()
        if self.data_file and self.data_file.exists():
            self.graph.parse(str(self.data_file), format='turtle')
            logger.info(f"Loaded {len(self.graph)} triples from {self.data_file}")

    def query(self, statement: str) -> ResultSet:
        with self._lock:
            try:
                rows = list(self.graph.query(statement))
            except Exception as e:
                logger.error(f"Local graph query failed: {e}")
                raise UpstreamUnavailable("graph", str(e)) from e
        return ResultSet(rows, _convert_row)

    def ask(self, statement: str) -> bool:
        with self._lock:
            try:
                return bool(self.graph.query(statement).askAnswer)
            except Exception as e:
                logger.error(f"Local graph query failed: {e}")
                raise UpstreamUnavailable("graph", str(e)) from e

    def update(self, statement: str) -> None:
        with self._lock:
            snapshot = set(self.graph) if self.data_file else None
            try:
                self.graph.update(statement)
                if self.data_file:
                    self._save()
            except Exception as e:
                if snapshot is not None:
                    self._restore(snapshot)
                logger.error(f"Local graph update failed: {e}")
                raise UpstreamUnavailable("graph", str(e)) from e

    def _save(self) -> None:
        """Write the graph to a temporary file next to ``data_file``, then swap it in"""
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.data_file.name}.", suffix=".tmp", dir=self.data_file.parent
        )
        os.close(fd)
        try:
            self.graph.serialize(destination=tmp_path, format='turtle')
            os.replace(tmp_path, self.data_file)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _restore(self, triples) -> None:
        self.graph.remove((None, None, None))
        for triple in triples:
            self.graph.add(triple)

    def __len__(self) -> int:
        return len(self.graph)
