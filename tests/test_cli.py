# tests/test_cli.py
import json
import re
import pytest
from click.testing import CliRunner
from biblioteca.config import Settings
from cli.main import cli
from cli.utils import AppContext

@pytest.fixture
def runner():
    return CliRunner()

@pytest.fixture
def app(store, database):
    settings = Settings(graph_url="memory", graph_retries=1, graph_retry_delay=0)
    return AppContext(settings=settings, store=store, database=database)

def test_catalog_list(runner, app, catalog):
    result = runner.invoke(cli, ['catalog', 'list', '--author', 'borges'], obj=app)
    assert result.exit_code == 0
    assert 'Found 1 works' in result.output
    assert 'Ficciones by Jorge Luis Borges' in result.output
    assert 'Cien años' not in result.output

def test_catalog_list_empty(runner, app):
    result = runner.invoke(cli, ['catalog', 'list'], obj=app)
    assert result.exit_code == 0
    assert 'No works found.' in result.output

def test_catalog_show(runner, app, catalog):
    result = runner.invoke(cli, ['catalog', 'show', catalog['cien_anos']], obj=app)
    assert result.exit_code == 0
    assert 'Cien años de soledad' in result.output
    assert 'Gabriel García Márquez' in result.output
    assert 'ITEM-001' in result.output

def test_catalog_show_missing_work(runner, app):
    result = runner.invoke(cli, ['catalog', 'show', 'Obra_inexistente'], obj=app)
    assert result.exit_code == 1
    assert 'Work not found: Obra_inexistente' in result.output

def test_catalog_create(runner, app, queries):
    result = runner.invoke(cli, [
        'catalog', 'create',
        '--title', 'Rayuela',
        '--author-name', 'Julio',
        '--author-surname', 'Cortázar',
        '--genre', 'Novela',
        '--year', '1963',
        '--barcode', 'ITEM-RAY',
    ], obj=app)
    assert result.exit_code == 0
    work_id = re.search(r'Created work: (Obra_\w+)', result.output).group(1)
    work = queries.get_work(work_id)
    assert work.author == 'Julio Cortázar'
    assert work.barcode == 'ITEM-RAY'

def test_catalog_create_blank_title(runner, app, store):
    result = runner.invoke(cli, [
        'catalog', 'create', '--title', ' ', '--author-name', 'Julio', '--author-surname', 'Cortázar',
    ], obj=app)
    assert result.exit_code == 1
    assert 'Missing required fields: title' in result.output
    assert len(store) == 0

def test_catalog_name_lists(runner, app, catalog):
    result = runner.invoke(cli, ['catalog', 'genres'], obj=app)
    assert result.exit_code == 0
    assert result.output.index('Cuento') < result.output.index('Novela')
    result = runner.invoke(cli, ['catalog', 'authors'], obj=app)
    assert result.output.index('Jorge Luis Borges') < result.output.index('Gabriel García Márquez')

def test_catalog_barcode_and_item(runner, app, catalog, queries):
    result = runner.invoke(cli, ['catalog', 'barcode', 'ITEM-003'], obj=app)
    assert result.exit_code == 0
    assert 'Ficciones' in result.output

    result = runner.invoke(cli, ['catalog', 'item', catalog['ficciones']], obj=app)
    assert result.exit_code == 0
    assert queries.find_item_by_barcode('ITEM-003').item_id in result.output

def test_catalog_resources(runner, app, catalog):
    result = runner.invoke(cli, ['catalog', 'resources'], obj=app)
    assert result.exit_code == 0
    rows = [json.loads(line) for line in result.output.splitlines() if line.startswith('{')]
    assert [row['title'] for row in rows][-1] == 'Ficciones'

def test_loans_checkout_and_return(runner, app, catalog, queries):
    result = runner.invoke(cli, [
        'loans', 'checkout', '--user-id', '7', '--barcode', 'ITEM-001', '--due', '2030-01-15',
    ], obj=app)
    assert result.exit_code == 0
    assert 'Loan created: 1' in result.output
    assert 'Catalog availability updated.' in result.output
    assert queries.find_item_by_barcode('ITEM-001').availability == 'prestado'

    result = runner.invoke(cli, ['loans', 'active', '7'], obj=app)
    assert 'Loan 1: ITEM-001 due 2030-01-15' in result.output

    result = runner.invoke(cli, ['loans', 'return', '1'], obj=app)
    assert result.exit_code == 0
    assert 'Loan 1 returned.' in result.output

    result = runner.invoke(cli, ['loans', 'return', '1'], obj=app)
    assert result.exit_code == 1
    assert 'already returned' in result.output

def test_loans_checkout_conflict(runner, app, catalog):
    args = ['loans', 'checkout', '--user-id', '7', '--barcode', 'ITEM-001', '--due', '2030-01-15']
    runner.invoke(cli, args, obj=app)
    result = runner.invoke(cli, args, obj=app)
    assert result.exit_code == 1
    assert 'not available' in result.output

def test_loans_show(runner, app, catalog):
    runner.invoke(cli, [
        'loans', 'checkout', '--user-id', '7', '--barcode', 'ITEM-002', '--due', '2030-01-15',
    ], obj=app)
    result = runner.invoke(cli, ['loans', 'show', '1'], obj=app)
    assert result.exit_code == 0
    assert 'ITEM-002' in result.output
    assert 'active' in result.output
