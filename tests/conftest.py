# tests/conftest.py
import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from biblioteca.graph.local import LocalGraphStore
from biblioteca.graph.terms import iri, statement
from biblioteca.sa.database import Database
from biblioteca.services import CatalogQueryService, CatalogWriteService, SyncCoordinator


@pytest.fixture
def database():
    """Fresh in-memory ledger for each test"""
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    """Create a new database session for a test"""
    session = database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store():
    return LocalGraphStore()


@pytest.fixture
def queries(store):
    return CatalogQueryService(store)


@pytest.fixture
def writer(store, queries):
    return CatalogWriteService(store, queries)


@pytest.fixture
def coordinator(database, queries, writer):
    """Coordinator that retries the graph projection without sleeping"""
    return SyncCoordinator(database, queries, writer, retries=3, retry_delay=0)


@pytest.fixture
def catalog(writer):
    """Seed the graph with reference entities and three works.

    Returns a dict mapping a short key to each work's identifier.
    """
    writer.seed_reference_entities()
    works = {
        'cien_anos': writer.create_work({
            'titulo': 'Cien años de soledad',
            'autorNombre': 'Gabriel',
            'autorApellidos': 'García Márquez',
            'genero': 'Novela',
            'materia': 'Realismo mágico',
            'idiomaOriginal': 'Español',
            'anoCreacion': 1967,
            'isbn': '978-0307474728',
            'numeroPaginas': 417,
            'editorial': 'Editorial Sudamericana',
            'codigoBarras': 'ITEM-001',
            'ubicacion': 'Sala General',
        }),
        'amor': writer.create_work({
            'titulo': 'El amor en los tiempos del cólera',
            'autorNombre': 'Gabriel',
            'autorApellidos': 'García Márquez',
            'genero': 'Novela',
            'materia': 'Amor',
            'codigoBarras': 'ITEM-002',
        }),
        'ficciones': writer.create_work({
            'titulo': 'Ficciones',
            'autorNombre': 'Jorge Luis',
            'autorApellidos': 'Borges',
            'genero': 'Cuento',
            'materia': 'Metafísica',
            'codigoBarras': 'ITEM-003',
        }),
    }
    return works


@pytest.fixture
def orphan_work(store):
    """A Work with a title and nothing else: no author, expression or item"""
    store.update(statement(
        "INSERT DATA { %work a :Obra ; :tituloOriginal %title . }",
        work=iri("Obra_huerfana"),
        title="Aura"
    ))
    return "Obra_huerfana"
