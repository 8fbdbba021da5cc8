# biblioteca/graph/http.py
import logging
from typing import Optional

import requests

from ..errors import UpstreamUnavailable
from .store import Binding, GraphStore, ResultSet

logger = logging.getLogger(__name__)

RESULTS_JSON = "application/sparql-results+json"


def _convert_binding(row: dict) -> Binding:
    return {name: term.get('value') for name, term in row.items()}


class SparqlHttpStore(GraphStore):
    """Graph store reached over the SPARQL 1.1 Protocol (e.g. a Fuseki dataset).

    Queries go to ``<base_url>/<query_path>`` and updates to
    ``<base_url>/<update_path>``, both as form-encoded POSTs. One pooled
    ``requests.Session`` is shared by every call.
    """

    def __init__(
        self,
        base_url: str,
        query_path: str = "query",
        update_path: str = "update",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        base = base_url.rstrip('/')
        self.query_url = f"{base}/{query_path.lstrip('/')}"
        self.update_url = f"{base}/{update_path.lstrip('/')}"
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, url: str, data: dict, accept: Optional[str] = None) -> requests.Response:
        headers = {'Accept': accept} if accept else {}
        try:
            response = self.session.post(url, data=data, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            logger.error(f"Graph store request to {url} failed: {e}")
            raise UpstreamUnavailable("graph", str(e)) from e

    def _json(self, response: requests.Response) -> dict:
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Graph store returned a non-JSON response: {e}")
            raise UpstreamUnavailable("graph", f"invalid response: {e}") from e

    def query(self, statement: str) -> ResultSet:
        payload = self._json(self._post(self.query_url, {'query': statement}, RESULTS_JSON))
        rows = payload.get('results', {}).get('bindings', [])
        logger.debug(f"Query returned {len(rows)} bindings")
        return ResultSet(rows, _convert_binding)

    def ask(self, statement: str) -> bool:
        payload = self._json(self._post(self.query_url, {'query': statement}, RESULTS_JSON))
        return bool(payload.get('boolean', False))

    def update(self, statement: str) -> None:
        self._post(self.update_url, {'update': statement})

    def close(self) -> None:
        self.session.close()
