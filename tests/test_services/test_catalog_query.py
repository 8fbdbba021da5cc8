# tests/test_services/test_catalog_query.py
import pytest
from biblioteca.errors import NotFound, ValidationError
from biblioteca.models import Availability, WorkFilter, UNKNOWN_AUTHOR

def test_list_works_ordered_by_title(queries, catalog):
    titles = [work.title for work in queries.list_works()]
    assert titles == [
        'Cien años de soledad',
        'El amor en los tiempos del cólera',
        'Ficciones',
    ]

def test_list_works_summary_fields(queries, catalog):
    work = queries.list_works({'titulo': 'soledad'})[0]
    assert work.work_id == catalog['cien_anos']
    assert work.author == 'Gabriel García Márquez'
    assert work.genre == 'Novela'
    assert work.subject == 'Realismo mágico'
    assert work.isbn == '978-0307474728'
    assert work.format == 'impreso'
    assert work.availability == 'disponible'
    assert work.location == 'Sala General'

def test_list_works_filters_are_anded(queries, catalog):
    works = queries.list_works(WorkFilter(author='garcía', genre='novela'))
    assert [w.work_id for w in works] == [catalog['cien_anos'], catalog['amor']]

    works = queries.list_works(WorkFilter(author='garcía', genre='cuento'))
    assert works == []

def test_list_works_author_matches_full_name(queries, catalog):
    works = queries.list_works(WorkFilter(author='Luis Borges'))
    assert [w.work_id for w in works] == [catalog['ficciones']]

def test_list_works_subject_filter(queries, catalog):
    works = queries.list_works({'materia': 'METAF'})
    assert [w.title for w in works] == ['Ficciones']

def test_list_works_blank_filters_are_ignored(queries, catalog):
    assert len(queries.list_works(WorkFilter(title='  ', author=''))) == 3

def test_list_works_availability_filter(queries, writer, catalog):
    assert queries.list_works(WorkFilter(availability='prestado')) == []

    item = queries.find_item_by_barcode('ITEM-003')
    writer.set_availability(item.item_id, Availability.LOANED)

    loaned = queries.list_works(WorkFilter(availability='loaned'))
    assert [w.title for w in loaned] == ['Ficciones']
    available = queries.list_works({'disponibilidad': 'disponible'})
    assert len(available) == 2

def test_list_works_includes_work_without_chain(queries, catalog, orphan_work):
    works = queries.list_works()
    assert works[0].work_id == orphan_work
    assert works[0].title == 'Aura'
    assert works[0].author == UNKNOWN_AUTHOR
    assert works[0].availability is None
    assert works[0].isbn is None

def test_list_works_filter_value_cannot_alter_query(queries, store, catalog):
    size = len(store)
    works = queries.list_works(WorkFilter(title='") ) } } DELETE WHERE { ?s ?p ?o } #'))
    assert works == []
    assert len(store) == size

def test_list_works_empty_catalog(queries):
    assert queries.list_works() == []

def test_get_work(queries, catalog):
    work = queries.get_work(catalog['cien_anos'])
    assert work.title == 'Cien años de soledad'
    assert work.author == 'Gabriel García Márquez'
    assert work.genre == 'Novela'
    assert work.subjects == ['Realismo mágico']
    assert work.original_language == 'Español'
    assert work.creation_year == '1967'
    assert work.expression_language == 'Español'
    assert work.expression_type == 'original'
    assert work.page_count == 417
    assert work.publisher == 'Editorial Sudamericana'
    assert work.barcode == 'ITEM-001'
    assert work.availability == 'disponible'
    assert work.location == 'Sala General'
    assert work.item_id.startswith('Item_')

def test_get_work_without_chain(queries, orphan_work):
    work = queries.get_work(orphan_work)
    assert work.title == 'Aura'
    assert work.item_id is None
    assert work.subjects == []

def test_get_work_not_found(queries, catalog):
    with pytest.raises(NotFound):
        queries.get_work('Obra_inexistente')

def test_get_work_rejects_malformed_id(queries):
    with pytest.raises(ValidationError):
        queries.get_work('Obra_1> } #')

def test_list_genres_and_subjects(queries, catalog):
    assert queries.list_genres() == ['Cuento', 'Novela']
    assert queries.list_subjects() == ['Amor', 'Metafísica', 'Realismo mágico']

def test_list_locations(queries, catalog):
    locations = queries.list_locations()
    assert 'Sala General' in locations
    assert 'Estantería A-1 - Literatura Latinoamericana' in locations
    assert locations == sorted(locations)

def test_list_authors_ordered_by_surname(queries, catalog):
    assert queries.list_authors() == ['Jorge Luis Borges', 'Gabriel García Márquez']

def test_find_item_by_barcode(queries, catalog):
    item = queries.find_item_by_barcode('ITEM-001')
    assert item.barcode == 'ITEM-001'
    assert item.availability == 'disponible'
    assert item.is_available
    assert item.work.work_id == catalog['cien_anos']
    assert item.work.title == 'Cien años de soledad'

def test_find_item_by_barcode_not_found(queries, catalog):
    with pytest.raises(NotFound):
        queries.find_item_by_barcode('ITEM-999')
    with pytest.raises(NotFound):
        queries.find_item_by_barcode('ITEM-001" || "1" = "1')

def test_find_item_for_work(queries, catalog, orphan_work):
    assert queries.find_item_for_work(catalog['amor']) == queries.get_work(catalog['amor']).item_id
    assert queries.find_item_for_work(orphan_work) is None

def test_list_resources(queries, catalog):
    resources = queries.list_resources()
    assert [r.title for r in resources] == [
        'Cien años de soledad',
        'El amor en los tiempos del cólera',
        'Ficciones',
    ]
    first = resources[0]
    assert first.expression_id.startswith('Expresion_')
    assert first.manifestation_id.startswith('Manifestacion_')
    assert first.barcode == 'ITEM-001'
    assert first.publisher == 'Editorial Sudamericana'
    assert first.translator is None
