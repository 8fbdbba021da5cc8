# tests/test_graph/test_terms.py
import re
import pytest
from datetime import date
from biblioteca.errors import ValidationError
from biblioteca.graph.terms import (
    NAMESPACE, PREFIXES, Term, escape, iri, literal, local_name, new_barcode,
    new_local_name, render, statement, typed, uri
)

def test_escape_quotes_and_control_characters():
    assert escape('say "hi"\n\tbye\\') == 'say \\"hi\\"\\n\\tbye\\\\'

def test_literal_strings_are_quoted_and_escaped():
    assert literal('Cien años') == '"Cien años"'
    assert literal('a "b"\r\n') == '"a \\"b\\"\\r\\n"'

def test_literal_typed_values():
    assert literal(417) == '"417"^^xsd:integer'
    assert literal(True) == '"true"^^xsd:boolean'
    assert literal(date(2025, 1, 31)) == '"2025-01-31"^^xsd:date'
    assert typed("1967", "gYear") == '"1967"^^xsd:gYear'

def test_typed_rejects_bad_datatype():
    with pytest.raises(ValueError):
        typed("1", "integer> . <x")

def test_term_passes_through_literal():
    term = iri("Obra_1")
    assert literal(term) is term

def test_iri_for_local_name():
    assert iri("Obra_1") == f"<{NAMESPACE}Obra_1>"
    assert isinstance(iri("Obra_1"), Term)

@pytest.mark.parametrize("value", [
    "",
    "Obra 1",
    "Obra_1> } ; DROP ALL ; INSERT DATA { <x",
    "a#b",
    'x"y',
    None,
    42,
])
def test_iri_rejects_invalid_local_names(value):
    with pytest.raises(ValidationError):
        iri(value)

def test_uri_accepts_full_iris_only():
    assert uri(f"{NAMESPACE}Autor_1") == f"<{NAMESPACE}Autor_1>"
    with pytest.raises(ValidationError):
        uri("http://example.org/a> . <b")

def test_local_name():
    assert local_name(f"{NAMESPACE}Item_abc") == "Item_abc"
    assert local_name("Item_abc") == "Item_abc"

def test_render_escapes_plain_values():
    """A value crafted to close the literal stays inside it"""
    rendered = render("FILTER(STR(?t) = %value)", value='x") } DELETE WHERE { ?s ?p ?o } #')
    assert rendered == 'FILTER(STR(?t) = "x\\") } DELETE WHERE { ?s ?p ?o } #")'

def test_render_does_not_expand_placeholders_inside_values():
    assert render("%a %b", a="%b", b="z") == '"%b" "z"'

def test_render_requires_every_placeholder():
    with pytest.raises(KeyError):
        render("%a %b", a="x")

def test_statement_includes_prefixes():
    text = statement("ASK { %work a :Obra . }", work=iri("Obra_1"))
    assert text.startswith(PREFIXES)
    assert f"<{NAMESPACE}Obra_1> a :Obra" in text

def test_new_local_name_is_unique():
    first, second = new_local_name("Obra"), new_local_name("Obra")
    assert first.startswith("Obra_")
    assert first != second
    assert iri(first)

def test_new_barcode_format():
    assert re.match(r"^ITEM-[0-9A-F]{12}$", new_barcode())
