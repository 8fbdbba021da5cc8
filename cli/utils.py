import functools
import logging
from typing import Optional

import click

from biblioteca.config import Settings
from biblioteca.errors import BibliotecaError
from biblioteca.graph import GraphStore, create_graph_store
from biblioteca.sa.database import Database
from biblioteca.services import CatalogQueryService, CatalogWriteService, SyncCoordinator

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str, verbose: bool = False) -> None:
    """Configure root logging for CLI runs"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )


class AppContext:
    """Lazily builds the stores and services a command needs"""

    def __init__(self, settings: Optional[Settings] = None,
                 store: Optional[GraphStore] = None,
                 database: Optional[Database] = None):
        self.settings = settings or Settings()
        self._store = store
        self._database = database

    @property
    def store(self) -> GraphStore:
        if self._store is None:
            self._store = create_graph_store(self.settings)
        return self._store

    @property
    def database(self) -> Database:
        if self._database is None:
            self._database = Database(
                self.settings.database_url,
                timeout=self.settings.database_timeout,
                pool_size=self.settings.database_pool_size
            )
            self._database.init_db()
        return self._database

    @property
    def queries(self) -> CatalogQueryService:
        return CatalogQueryService(self.store)

    @property
    def writer(self) -> CatalogWriteService:
        return CatalogWriteService(self.store, self.queries)

    @property
    def coordinator(self) -> SyncCoordinator:
        return SyncCoordinator(
            self.database,
            self.queries,
            self.writer,
            retries=self.settings.graph_retries,
            retry_delay=self.settings.graph_retry_delay
        )


def handle_errors(func):
    """Report service errors as a red message and exit status 1"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BibliotecaError as e:
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            raise click.exceptions.Exit(1)
    return wrapper


def echo_field(label: str, value) -> None:
    if value is not None and value != []:
        click.echo(click.style(f"  {label}: ", fg='blue') + click.style(str(value), fg='cyan'))
