# biblioteca/services/__init__.py
from .catalog_query import CatalogQueryService
from .catalog_write import CatalogWriteService
from .sync import SyncCoordinator

__all__ = ['CatalogQueryService', 'CatalogWriteService', 'SyncCoordinator']
