# biblioteca/graph/terms.py
"""Rendering of SPARQL terms and statements.

Statement templates use ``%name`` placeholders. Values are rendered into
terms before they reach the statement text: plain Python values always
become escaped literals, and IRIs can only be produced from validated
local names. Nothing a caller passes in is spliced into a statement raw.
"""

import re
import uuid
from datetime import date
from string import Template

from ..errors import ValidationError

NAMESPACE = "http://www.biblioteca.edu.co/ontologia#"

PREFIXES = f"""PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
PREFIX xsd: <http://www.w3.org/2001/XMLSchema#>
PREFIX : <{NAMESPACE}>
"""

# Characters that cannot appear inside an IRIREF, plus the fragment separator
_LOCAL_NAME = re.compile(r'^[^\s<>"{}|^`\\#]+$')
_IRI = re.compile(r'^[^\s<>"{}|^`\\]+$')

_ESCAPES = {
    '\\': '\\\\',
    '"': '\\"',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}


class Term(str):
    """A term that has already been rendered into safe statement text"""


class _Statement(Template):
    delimiter = '%'


def escape(text: str) -> str:
    return ''.join(_ESCAPES.get(ch, ch) for ch in text)


def is_local_name(value) -> bool:
    return isinstance(value, str) and bool(_LOCAL_NAME.match(value))


def iri(local: str) -> Term:
    """IRI for a local name inside the catalog namespace"""
    if not is_local_name(local):
        raise ValidationError(f"Invalid identifier: {local!r}")
    return Term(f"<{NAMESPACE}{local}>")


def local_name(uri: str) -> str:
    """Local name of a catalog IRI (the part after ``#``)"""
    return uri.rsplit('#', 1)[-1]


def literal(value) -> Term:
    if isinstance(value, Term):
        return value
    if isinstance(value, bool):
        return Term(f'"{"true" if value else "false"}"^^xsd:boolean')
    if isinstance(value, int):
        return typed(value, 'integer')
    if isinstance(value, date):
        return typed(value.isoformat(), 'date')
    return Term(f'"{escape(str(value))}"')


def typed(value, datatype: str) -> Term:
    """Literal with an ``xsd:`` datatype, e.g. ``typed(1967, 'gYear')``"""
    if not re.match(r'^[A-Za-z]+$', datatype):
        raise ValueError(f"Invalid datatype: {datatype}")
    return Term(f'"{escape(str(value))}"^^xsd:{datatype}')


def render(template: str, **values) -> Term:
    """Fill a statement fragment. Non-Term values are rendered as literals."""
    terms = {name: literal(value) for name, value in values.items()}
    return Term(_Statement(template).substitute(terms))


def statement(template: str, **values) -> str:
    """Complete statement: the namespace prologue plus the rendered body"""
    return PREFIXES + render(template, **values)


def new_local_name(prefix: str) -> str:
    """Fresh local name such as ``Obra_9f1c...``"""
    return f"{prefix}_{uuid.uuid4().hex}"


def new_barcode() -> str:
    return f"ITEM-{uuid.uuid4().hex[:12].upper()}"


def uri(value: str) -> Term:
    """IRI term for a full IRI returned by the store"""
    if not isinstance(value, str) or not _IRI.match(value):
        raise ValidationError(f"Invalid IRI: {value!r}")
    return Term(f"<{value}>")
