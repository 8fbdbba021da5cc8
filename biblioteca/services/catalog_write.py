# biblioteca/services/catalog_write.py

import logging
from typing import List, Optional, Union

from pydantic import ValidationError as SchemaError

from ..errors import ValidationError, NotFound, Conflict
from ..graph.store import GraphStore
from ..graph.terms import Term, iri, uri, render, statement, new_local_name, new_barcode, typed
from ..models.catalog import Availability, WorkSpec
from .catalog_query import CatalogQueryService

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "Español"
DEFAULT_FORMAT = "impreso"
DEFAULT_CONDITION = "bueno"
ORIGINAL_EXPRESSION = "original"

DEFAULT_PUBLISHER = "Editorial_Sudamericana"
DEFAULT_SHELF = "Estanteria_A1"

INSERT_DATA = """
INSERT DATA {
%triples
}
"""

REFERENCE_ENTITIES = """
  %sudamericana a :EntidadCorporativa ;
      :nombreEntidad "Editorial Sudamericana" ;
      :paisEntidad "Argentina" .
  %alfaguara a :EntidadCorporativa ;
      :nombreEntidad "Alfaguara" ;
      :paisEntidad "España" .
  %shelf a :Estanteria ;
      :nombreUbicacion "Estantería A-1 - Literatura Latinoamericana" ;
      :piso 1 .
"""

# Lookups used to reuse reference entities by name
FIND_PERSON = """
SELECT ?node WHERE {
  ?node a :Persona ;
        :nombre ?nombre ;
        :apellidos ?apellidos .
  FILTER(STR(?nombre) = %nombre && STR(?apellidos) = %apellidos)
}
ORDER BY ?node
LIMIT 1
"""
FIND_GENRE = """
SELECT ?node WHERE {
  ?node a :Genero ;
        :nombreGenero ?name .
  FILTER(STR(?name) = %name)
}
ORDER BY ?node
LIMIT 1
"""
FIND_SUBJECT = """
SELECT ?node WHERE {
  ?node a :Materia ;
        :terminoMateria ?name .
  FILTER(STR(?name) = %name)
}
ORDER BY ?node
LIMIT 1
"""
FIND_PUBLISHER = """
SELECT ?node WHERE {
  ?node a :EntidadCorporativa ;
        :nombreEntidad ?name .
  FILTER(STR(?name) = %name)
}
ORDER BY ?node
LIMIT 1
"""
FIND_LOCATION = """
SELECT ?node WHERE {
  ?node :nombreUbicacion ?name .
  FILTER(STR(?name) = %name)
}
ORDER BY ?node
LIMIT 1
"""

NEW_PERSON = "  %node a :Persona ; :nombre %nombre ; :apellidos %apellidos ."
NEW_GENRE = "  %node a :Genero ; :nombreGenero %name ."
NEW_SUBJECT = "  %node a :Materia ; :terminoMateria %name ."
NEW_PUBLISHER = "  %node a :EntidadCorporativa ; :nombreEntidad %name ."
NEW_LOCATION = "  %node a :UbicacionFisica ; :nombreUbicacion %name ."

WORK = "  %work a :Obra ; :tituloOriginal %titulo ; :tieneAutor %autor ."
EXPRESSION = "  %expression a :Expresion ; :realizaDe %work ; :idiomaExpresion %idioma ; :tipoExpresion %tipo ."
MANIFESTATION = "  %manifestation a :Manifestacion ; :materializaDe %expression ; :formato %formato ."
ITEM = "  %item a :Item ; :ejemplificaDe %manifestation ; :disponibilidad %disponibilidad ."
TRIPLE = "  %subject %predicate %object ."

BARCODE_IN_USE = """
ASK {
  ?item :codigoBarras ?codigoBarras .
  FILTER(STR(?codigoBarras) = %barcode)
}
"""

ITEM_HAS_AVAILABILITY = "ASK { %item a :Item ; :disponibilidad ?estado . }"

SET_AVAILABILITY = """
DELETE { %item :disponibilidad ?anterior . }
INSERT { %item :disponibilidad %estado . }
WHERE {
  %item a :Item ;
        :disponibilidad ?anterior .
}
"""


def _triple(subject: Term, predicate: str, obj) -> Term:
    return render(TRIPLE, subject=subject, predicate=Term(predicate), object=obj)


class CatalogWriteService:
    """Creates FRBR hierarchies and changes item availability in the catalog graph."""

    def __init__(self, store: GraphStore, queries: Optional[CatalogQueryService] = None):
        """
        Initialize the write service.

        Args:
            store: Graph store holding the FRBR catalog
            queries: Query service over the same store (created if not given)
        """
        self.store = store
        self.queries = queries or CatalogQueryService(store)

    def seed_reference_entities(self) -> None:
        """Insert the baseline publishers and the default shelf. Safe to repeat."""
        self.store.update(statement(INSERT_DATA, triples=self._reference_triples()))
        logger.info("Reference entities initialized")

    def _reference_triples(self) -> Term:
        return render(
            REFERENCE_ENTITIES,
            sudamericana=iri(DEFAULT_PUBLISHER),
            alfaguara=iri("Editorial_Alfaguara"),
            shelf=iri(DEFAULT_SHELF)
        )

    def _find_or_mint(self, prefix: str, find: str, create: str, triples: List[Term], **values) -> Term:
        """Reuse the node matching ``find`` or queue triples for a new one"""
        row = self.store.query(statement(find, **values)).first()
        if row:
            return uri(row['node'])
        node = iri(new_local_name(prefix))
        triples.append(render(create, node=node, **values))
        return node

    def create_work(self, spec: Union[WorkSpec, dict]) -> str:
        """
        Create a Work with a default Expression, Manifestation and Item.

        Authors, genres, subjects, publishers and locations are matched by name
        and reused when they already exist. Everything new is written in a
        single update.

        Args:
            spec: WorkSpec, or a dict in the catalog form format

        Returns:
            Identifier of the new Work

        Raises:
            ValidationError: If the title or the author's name or surname is missing
            Conflict: If another item already carries the barcode
        """
        if not isinstance(spec, WorkSpec):
            try:
                spec = WorkSpec.model_validate(spec)
            except SchemaError as e:
                raise ValidationError(f"Invalid work data: {e}") from e

        missing = [
            label for label, value in (
                ("title", spec.title),
                ("author name", spec.author_name),
                ("author surname", spec.author_surname),
            ) if not value
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if spec.barcode and self.store.ask(statement(BARCODE_IN_USE, barcode=spec.barcode)):
            raise Conflict(f"Barcode {spec.barcode} is already assigned to an item", observed="assigned")

        triples: List[Term] = []
        author = self._find_or_mint(
            "Autor", FIND_PERSON, NEW_PERSON, triples,
            nombre=spec.author_name, apellidos=spec.author_surname
        )

        work_id = new_local_name("Obra")
        work = iri(work_id)
        expression = iri(new_local_name("Expresion"))
        manifestation = iri(new_local_name("Manifestacion"))
        item = iri(new_local_name("Item"))

        triples.append(render(WORK, work=work, titulo=spec.title, autor=author))
        triples.append(render(
            EXPRESSION, expression=expression, work=work,
            idioma=spec.original_language or DEFAULT_LANGUAGE, tipo=ORIGINAL_EXPRESSION
        ))
        triples.append(render(
            MANIFESTATION, manifestation=manifestation, expression=expression,
            formato=spec.format or DEFAULT_FORMAT
        ))
        triples.append(render(
            ITEM, item=item, manifestation=manifestation,
            disponibilidad=Availability.AVAILABLE.value
        ))

        if spec.genre:
            genre = self._find_or_mint("Genero", FIND_GENRE, NEW_GENRE, triples, name=spec.genre)
            triples.append(_triple(work, ":perteneceAGenero", genre))
        if spec.subject:
            subject = self._find_or_mint("Materia", FIND_SUBJECT, NEW_SUBJECT, triples, name=spec.subject)
            triples.append(_triple(work, ":trataSobre", subject))
        if spec.creation_year is not None:
            triples.append(_triple(work, ":anoCreacion", typed(f"{spec.creation_year:04d}", "gYear")))
        if spec.original_language:
            triples.append(_triple(work, ":idiomaOriginal", spec.original_language))
        if spec.isbn:
            triples.append(_triple(manifestation, ":isbn", spec.isbn))
        if spec.page_count is not None:
            triples.append(_triple(manifestation, ":numeroPaginas", spec.page_count))
        if spec.publisher_name:
            publisher = self._find_or_mint(
                "Editorial", FIND_PUBLISHER, NEW_PUBLISHER, triples, name=spec.publisher_name
            )
            triples.append(_triple(manifestation, ":publicadaPor", publisher))
        if spec.barcode:
            triples.append(_triple(item, ":codigoBarras", spec.barcode))
        if spec.location_name:
            location = self._find_or_mint(
                "Ubicacion", FIND_LOCATION, NEW_LOCATION, triples, name=spec.location_name
            )
            triples.append(_triple(item, ":ubicadoEn", location))

        self.store.update(statement(INSERT_DATA, triples=Term("\n".join(triples))))
        logger.info(f"Created work {work_id} ({spec.title})")
        return work_id

    def find_or_create_item_for_work(self, work_id: str) -> str:
        """
        Return an Item of the Work, creating an Expression/Manifestation/Item chain if it has none.

        The new chain carries placeholder metadata, a fresh barcode and is
        shelved at the default location. Lookup and creation are separate
        statements, so concurrent calls for the same Work may both create a chain.

        Raises:
            NotFound: If the Work does not exist
        """
        existing = self.queries.find_item_for_work(work_id)
        if existing:
            logger.debug(f"Work {work_id} already has item {existing}")
            return existing

        if not self.queries.work_exists(work_id):
            raise NotFound("Work", work_id)

        logger.info(f"No item found for work {work_id}, creating FRBR chain")
        work = iri(work_id)
        expression = iri(new_local_name("Expresion"))
        manifestation = iri(new_local_name("Manifestacion"))
        item_id = new_local_name("Item")
        item = iri(item_id)

        triples = [
            self._reference_triples(),
            render(EXPRESSION, expression=expression, work=work,
                   idioma=DEFAULT_LANGUAGE, tipo=ORIGINAL_EXPRESSION),
            render(MANIFESTATION, manifestation=manifestation, expression=expression,
                   formato=DEFAULT_FORMAT),
            _triple(manifestation, ":publicadaPor", iri(DEFAULT_PUBLISHER)),
            render(ITEM, item=item, manifestation=manifestation,
                   disponibilidad=Availability.AVAILABLE.value),
            _triple(item, ":codigoBarras", new_barcode()),
            _triple(item, ":estadoFisico", DEFAULT_CONDITION),
            _triple(item, ":ubicadoEn", iri(DEFAULT_SHELF)),
        ]
        self.store.update(statement(INSERT_DATA, triples=Term("\n".join(triples))))
        logger.info(f"Created item {item_id} for work {work_id}")
        return item_id

    def set_availability(self, item_id: str, state: Union[Availability, str]) -> None:
        """
        Replace the item's current availability with ``state``.

        This is not a compare-and-swap: the last writer wins.

        Raises:
            ValidationError: If the state is not a known availability
            NotFound: If the graph has no Item with an availability value under this id
        """
        try:
            state = Availability.parse(state)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not self.store.ask(statement(ITEM_HAS_AVAILABILITY, item=iri(item_id))):
            raise NotFound("Item", item_id)
        self.store.update(statement(SET_AVAILABILITY, item=iri(item_id), estado=state.value))
        logger.info(f"Availability of {item_id} set to {state.value}")
