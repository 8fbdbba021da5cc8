# biblioteca/graph/__init__.py
from ..config import Settings
from .store import GraphStore, ResultSet
from .http import SparqlHttpStore
from .local import LocalGraphStore


def create_graph_store(settings: Settings) -> GraphStore:
    """Graph store selected by ``GRAPH_URL`` (``memory`` for the local rdflib store)"""
    if settings.uses_local_graph:
        return LocalGraphStore(settings.graph_data_file)
    return SparqlHttpStore(
        settings.graph_url,
        query_path=settings.graph_query_path,
        update_path=settings.graph_update_path,
        timeout=settings.graph_timeout
    )


__all__ = [
    'GraphStore',
    'ResultSet',
    'SparqlHttpStore',
    'LocalGraphStore',
    'create_graph_store',
]
