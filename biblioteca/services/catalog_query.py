# biblioteca/services/catalog_query.py

import logging
from typing import List, Optional, Dict

from ..errors import NotFound
from ..graph.store import GraphStore, Binding
from ..graph.terms import Term, iri, local_name, render, statement
from ..models.catalog import (
    WorkFilter, WorkSummary, WorkDetail, WorkRef, ItemLookup,
    BibliographicResource, display_author
)

logger = logging.getLogger(__name__)

LIST_WORKS = """
SELECT ?obra ?titulo ?autorNombre ?autorApellidos ?genero ?materia
       ?isbn ?formato ?disponibilidad ?ubicacion
WHERE {
  ?obra a :Obra ;
        :tituloOriginal ?titulo .

  OPTIONAL {
    ?obra :tieneAutor ?autor .
    ?autor :nombre ?autorNombre ;
           :apellidos ?autorApellidos .
  }
  OPTIONAL {
    ?obra :perteneceAGenero ?gen .
    ?gen :nombreGenero ?genero .
  }
  OPTIONAL {
    ?obra :trataSobre ?mat .
    ?mat :terminoMateria ?materia .
  }
  OPTIONAL {
    ?expresion :realizaDe ?obra .
    ?manifestacion :materializaDe ?expresion .
    OPTIONAL { ?manifestacion :isbn ?isbn . }
    OPTIONAL { ?manifestacion :formato ?formato . }
    OPTIONAL {
      ?item :ejemplificaDe ?manifestacion .
      OPTIONAL { ?item :disponibilidad ?disponibilidad . }
      OPTIONAL {
        ?item :ubicadoEn ?ubic .
        ?ubic :nombreUbicacion ?ubicacion .
      }
    }
  }
  %filters
}
ORDER BY ?titulo ?obra
"""

TITLE_FILTER = "FILTER(CONTAINS(LCASE(STR(?titulo)), LCASE(%value)))"
AUTHOR_FILTER = """FILTER(
    CONTAINS(LCASE(STR(?autorNombre)), LCASE(%value)) ||
    CONTAINS(LCASE(STR(?autorApellidos)), LCASE(%value)) ||
    CONTAINS(LCASE(CONCAT(STR(?autorNombre), " ", STR(?autorApellidos))), LCASE(%value))
  )"""
GENRE_FILTER = "FILTER(CONTAINS(LCASE(STR(?genero)), LCASE(%value)))"
SUBJECT_FILTER = "FILTER(CONTAINS(LCASE(STR(?materia)), LCASE(%value)))"
AVAILABILITY_FILTER = "FILTER(STR(?disponibilidad) = %value)"

WORK_DETAIL = """
SELECT ?titulo ?autorNombre ?autorApellidos ?genero ?materia ?idiomaOriginal ?anoCreacion
       ?idiomaExpresion ?tipoExpresion ?isbn ?formato ?anoPublicacion ?numeroPaginas
       ?editorial ?item ?codigoBarras ?disponibilidad ?estadoFisico ?ubicacion
WHERE {
  VALUES ?obra { %work }
  ?obra a :Obra ;
        :tituloOriginal ?titulo .

  OPTIONAL { ?obra :idiomaOriginal ?idiomaOriginal . }
  OPTIONAL { ?obra :anoCreacion ?anoCreacion . }
  OPTIONAL {
    ?obra :tieneAutor ?autor .
    ?autor :nombre ?autorNombre ;
           :apellidos ?autorApellidos .
  }
  OPTIONAL {
    ?obra :perteneceAGenero ?gen .
    ?gen :nombreGenero ?genero .
  }
  OPTIONAL {
    ?obra :trataSobre ?mat .
    ?mat :terminoMateria ?materia .
  }
  OPTIONAL {
    ?expresion :realizaDe ?obra .
    OPTIONAL { ?expresion :idiomaExpresion ?idiomaExpresion . }
    OPTIONAL { ?expresion :tipoExpresion ?tipoExpresion . }
    OPTIONAL {
      ?manifestacion :materializaDe ?expresion ;
                     a :Manifestacion .
      OPTIONAL { ?manifestacion :isbn ?isbn . }
      OPTIONAL { ?manifestacion :formato ?formato . }
      OPTIONAL { ?manifestacion :anoPublicacion ?anoPublicacion . }
      OPTIONAL { ?manifestacion :numeroPaginas ?numeroPaginas . }
      OPTIONAL {
        ?manifestacion :publicadaPor ?pub .
        ?pub :nombreEntidad ?editorial .
      }
      OPTIONAL {
        ?item :ejemplificaDe ?manifestacion ;
              a :Item .
        OPTIONAL { ?item :codigoBarras ?codigoBarras . }
        OPTIONAL { ?item :disponibilidad ?disponibilidad . }
        OPTIONAL { ?item :estadoFisico ?estadoFisico . }
        OPTIONAL {
          ?item :ubicadoEn ?ubic .
          ?ubic :nombreUbicacion ?ubicacion .
        }
      }
    }
  }
}
ORDER BY ?item
"""

LIST_GENRES = """
SELECT DISTINCT (STR(?nombreGenero) AS ?nombre)
WHERE {
  ?genero a :Genero ;
          :nombreGenero ?nombreGenero .
}
"""

LIST_SUBJECTS = """
SELECT DISTINCT (STR(?terminoMateria) AS ?nombre)
WHERE {
  ?materia a :Materia ;
           :terminoMateria ?terminoMateria .
}
"""

LIST_LOCATIONS = """
SELECT DISTINCT (STR(?nombreUbicacion) AS ?nombre)
WHERE {
  ?ubicacion :nombreUbicacion ?nombreUbicacion .
}
"""

LIST_AUTHORS = """
SELECT DISTINCT (STR(?nombre) AS ?autorNombre) (STR(?apellidos) AS ?autorApellidos)
WHERE {
  ?autor a :Persona ;
         :nombre ?nombre ;
         :apellidos ?apellidos .
}
ORDER BY ?apellidos ?nombre
"""

ITEM_BY_BARCODE = """
SELECT ?item ?codigoBarras ?disponibilidad ?obra ?titulo ?autorNombre ?autorApellidos
WHERE {
  ?item a :Item ;
        :codigoBarras ?codigoBarras .
  FILTER(STR(?codigoBarras) = %barcode)
  OPTIONAL { ?item :disponibilidad ?disponibilidad . }
  OPTIONAL {
    ?item :ejemplificaDe ?manifestacion .
    ?manifestacion :materializaDe ?expresion .
    ?expresion :realizaDe ?obra .
    ?obra :tituloOriginal ?titulo .
    OPTIONAL {
      ?obra :tieneAutor ?autor .
      ?autor :nombre ?autorNombre ;
             :apellidos ?autorApellidos .
    }
  }
}
ORDER BY ?item
LIMIT 1
"""

ITEM_FOR_WORK = """
SELECT ?item
WHERE {
  ?item a :Item ;
        :ejemplificaDe ?manifestacion .
  ?manifestacion :materializaDe ?expresion .
  ?expresion :realizaDe %work .
}
ORDER BY ?item
LIMIT 1
"""

WORK_EXISTS = "ASK { %work a :Obra . }"

LIST_RESOURCES = """
SELECT ?obra ?expresion ?manifestacion ?item
       ?titulo ?anoCreacion ?idiomaOriginal ?autorNombre ?autorApellidos ?genero ?materia
       ?idiomaExpresion ?tipoExpresion ?traductorNombre ?traductorApellidos
       ?isbn ?formato ?anoPublicacion ?numeroPaginas ?editorial
       ?codigoBarras ?disponibilidad ?estadoFisico ?signatura ?ubicacion
WHERE {
  ?obra a :Obra ;
        :tituloOriginal ?titulo .
  OPTIONAL { ?obra :anoCreacion ?anoCreacion . }
  OPTIONAL { ?obra :idiomaOriginal ?idiomaOriginal . }
  OPTIONAL {
    ?obra :tieneAutor ?autor .
    ?autor :nombre ?autorNombre ;
           :apellidos ?autorApellidos .
  }
  OPTIONAL {
    ?obra :perteneceAGenero ?gen .
    ?gen :nombreGenero ?genero .
  }
  OPTIONAL {
    ?obra :trataSobre ?mat .
    ?mat :terminoMateria ?materia .
  }
  OPTIONAL {
    ?expresion :realizaDe ?obra ;
               a :Expresion .
    OPTIONAL { ?expresion :idiomaExpresion ?idiomaExpresion . }
    OPTIONAL { ?expresion :tipoExpresion ?tipoExpresion . }
    OPTIONAL {
      ?expresion :tieneTraductor ?traductor .
      ?traductor :nombre ?traductorNombre ;
                 :apellidos ?traductorApellidos .
    }
    OPTIONAL {
      ?manifestacion :materializaDe ?expresion ;
                     a :Manifestacion .
      OPTIONAL { ?manifestacion :isbn ?isbn . }
      OPTIONAL { ?manifestacion :formato ?formato . }
      OPTIONAL { ?manifestacion :anoPublicacion ?anoPublicacion . }
      OPTIONAL { ?manifestacion :numeroPaginas ?numeroPaginas . }
      OPTIONAL {
        ?manifestacion :publicadaPor ?pub .
        ?pub :nombreEntidad ?editorial .
      }
      OPTIONAL {
        ?item :ejemplificaDe ?manifestacion ;
              a :Item .
        OPTIONAL { ?item :codigoBarras ?codigoBarras . }
        OPTIONAL { ?item :disponibilidad ?disponibilidad . }
        OPTIONAL { ?item :estadoFisico ?estadoFisico . }
        OPTIONAL { ?item :signaturaTopografica ?signatura . }
        OPTIONAL {
          ?item :ubicadoEn ?ubic .
          ?ubic :nombreUbicacion ?ubicacion .
        }
      }
    }
  }
}
ORDER BY ?titulo ?obra ?item
"""


def _local(row: Binding, name: str) -> Optional[str]:
    value = row.get(name)
    return local_name(value) if value else None


def _int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


class CatalogQueryService:
    """Read-only projections over the catalog graph."""

    def __init__(self, store: GraphStore):
        """
        Initialize the query service.

        Args:
            store: Graph store holding the FRBR catalog
        """
        self.store = store

    def list_works(self, filters: Optional[WorkFilter] = None) -> List[WorkSummary]:
        """
        List Works ordered by title, one entry per Work.

        Args:
            filters: Optional search filter. Text fields match as case-insensitive
                     substrings, availability matches exactly, all given fields are ANDed.

        Returns:
            List of WorkSummary objects. Works with no Expression, Manifestation or
            Item still appear, with those fields set to None.
        """
        if isinstance(filters, dict):
            filters = WorkFilter.model_validate(filters)
        clauses = self._filter_clauses(filters or WorkFilter())
        rows = self.store.query(statement(LIST_WORKS, filters=Term("\n  ".join(clauses))))

        works: Dict[str, WorkSummary] = {}
        for row in rows:
            work_id = local_name(row['obra'])
            if work_id in works:
                continue
            works[work_id] = WorkSummary(
                work_id=work_id,
                title=row['titulo'],
                author=display_author(row.get('autorNombre'), row.get('autorApellidos')),
                genre=row.get('genero'),
                subject=row.get('materia'),
                isbn=row.get('isbn'),
                format=row.get('formato'),
                availability=row.get('disponibilidad'),
                location=row.get('ubicacion')
            )
        logger.debug(f"list_works matched {len(works)} works")
        return list(works.values())

    def _filter_clauses(self, filters: WorkFilter) -> List[Term]:
        clauses = []
        if filters.title:
            clauses.append(render(TITLE_FILTER, value=filters.title))
        if filters.author:
            clauses.append(render(AUTHOR_FILTER, value=filters.author))
        if filters.genre:
            clauses.append(render(GENRE_FILTER, value=filters.genre))
        if filters.subject:
            clauses.append(render(SUBJECT_FILTER, value=filters.subject))
        if filters.availability:
            clauses.append(render(AVAILABILITY_FILTER, value=filters.availability))
        return clauses

    def get_work(self, work_id: str) -> WorkDetail:
        """
        Get a Work with one representative Manifestation and Item.

        When a Work has several manifestations or items the first binding
        that reaches an item is used; which one that is across several
        manifestations is left to the store.

        Raises:
            NotFound: If no Work has this identifier
        """
        rows = list(self.store.query(statement(WORK_DETAIL, work=iri(work_id))))
        if not rows:
            raise NotFound("Work", work_id)

        # Prefer a binding that reaches a physical item
        first = next((row for row in rows if row.get('item')), rows[0])
        subjects = []
        for row in rows:
            subject = row.get('materia')
            if subject and subject not in subjects:
                subjects.append(subject)

        return WorkDetail(
            work_id=work_id,
            title=first['titulo'],
            author=display_author(first.get('autorNombre'), first.get('autorApellidos')),
            genre=first.get('genero'),
            subjects=subjects,
            original_language=first.get('idiomaOriginal'),
            creation_year=first.get('anoCreacion'),
            expression_language=first.get('idiomaExpresion'),
            expression_type=first.get('tipoExpresion'),
            isbn=first.get('isbn'),
            format=first.get('formato'),
            publication_year=first.get('anoPublicacion'),
            page_count=_int(first.get('numeroPaginas')),
            publisher=first.get('editorial'),
            item_id=_local(first, 'item'),
            barcode=first.get('codigoBarras'),
            availability=first.get('disponibilidad'),
            physical_condition=first.get('estadoFisico'),
            location=first.get('ubicacion')
        )

    def _names(self, query: str) -> List[str]:
        names = {row['nombre'] for row in self.store.query(statement(query)) if row.get('nombre')}
        return sorted(names)

    def list_genres(self) -> List[str]:
        return self._names(LIST_GENRES)

    def list_subjects(self) -> List[str]:
        return self._names(LIST_SUBJECTS)

    def list_locations(self) -> List[str]:
        return self._names(LIST_LOCATIONS)

    def list_authors(self) -> List[str]:
        """Distinct author display names, ordered by surname then name"""
        authors = []
        for row in self.store.query(statement(LIST_AUTHORS)):
            name = f"{row.get('autorNombre', '')} {row.get('autorApellidos', '')}".strip()
            if name and name not in authors:
                authors.append(name)
        return authors

    def find_item_by_barcode(self, barcode: str) -> ItemLookup:
        """
        Resolve a physical item by its barcode.

        Raises:
            NotFound: If no Item carries this barcode
        """
        row = self.store.query(statement(ITEM_BY_BARCODE, barcode=barcode)).first()
        if row is None:
            raise NotFound("Item", barcode)

        work = None
        if row.get('obra'):
            work = WorkRef(
                work_id=local_name(row['obra']),
                title=row.get('titulo'),
                author=display_author(row.get('autorNombre'), row.get('autorApellidos'))
            )
        return ItemLookup(
            item_id=local_name(row['item']),
            barcode=row['codigoBarras'],
            availability=row.get('disponibilidad'),
            work=work
        )

    def find_item_for_work(self, work_id: str) -> Optional[str]:
        """Item reachable from the Work through Manifestation and Expression, if any"""
        row = self.store.query(statement(ITEM_FOR_WORK, work=iri(work_id))).first()
        return local_name(row['item']) if row else None

    def work_exists(self, work_id: str) -> bool:
        return self.store.ask(statement(WORK_EXISTS, work=iri(work_id)))

    def list_resources(self) -> List[BibliographicResource]:
        """Every Work/Expression/Manifestation/Item chain in the catalog, ordered by title"""
        resources = []
        for row in self.store.query(statement(LIST_RESOURCES)):
            translator = None
            if row.get('traductorNombre') or row.get('traductorApellidos'):
                translator = display_author(row.get('traductorNombre'), row.get('traductorApellidos'))
            resources.append(BibliographicResource(
                work_id=local_name(row['obra']),
                title=row['titulo'],
                author=display_author(row.get('autorNombre'), row.get('autorApellidos')),
                creation_year=row.get('anoCreacion'),
                original_language=row.get('idiomaOriginal'),
                genre=row.get('genero'),
                subject=row.get('materia'),
                expression_id=_local(row, 'expresion'),
                expression_language=row.get('idiomaExpresion'),
                expression_type=row.get('tipoExpresion'),
                translator=translator,
                manifestation_id=_local(row, 'manifestacion'),
                isbn=row.get('isbn'),
                format=row.get('formato'),
                publication_year=row.get('anoPublicacion'),
                page_count=_int(row.get('numeroPaginas')),
                publisher=row.get('editorial'),
                item_id=_local(row, 'item'),
                barcode=row.get('codigoBarras'),
                availability=row.get('disponibilidad'),
                physical_condition=row.get('estadoFisico'),
                shelf_mark=row.get('signatura'),
                location=row.get('ubicacion')
            ))
        return resources
