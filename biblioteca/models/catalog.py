# biblioteca/models/catalog.py

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Availability(str, Enum):
    """Item availability as stored in the graph (``:disponibilidad``)"""
    AVAILABLE = "disponible"
    LOANED = "prestado"

    @classmethod
    def parse(cls, value) -> "Availability":
        """Accept the graph literal or the English state name."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        aliases = {
            "available": cls.AVAILABLE,
            "loaned": cls.LOANED,
            "disponible": cls.AVAILABLE,
            "prestado": cls.LOANED,
        }
        if text not in aliases:
            raise ValueError(f"Unknown availability: {value!r}")
        return aliases[text]


UNKNOWN_AUTHOR = "Autor desconocido"


def display_author(name: Optional[str], surname: Optional[str]) -> str:
    """Join author name and surname, falling back to the catalog placeholder"""
    full = f"{name or ''} {surname or ''}".strip()
    return full or UNKNOWN_AUTHOR


class WorkFilter(BaseModel):
    """Search filter for ``list_works``. Every field is optional; given fields are ANDed."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, alias="titulo")
    author: Optional[str] = Field(default=None, alias="autor")
    genre: Optional[str] = Field(default=None, alias="genero")
    subject: Optional[str] = Field(default=None, alias="materia")
    availability: Optional[str] = Field(default=None, alias="disponibilidad")

    @field_validator("title", "author", "genre", "subject", "availability", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("availability")
    @classmethod
    def _normalize_availability(cls, value):
        if value is None:
            return None
        try:
            return Availability.parse(value).value
        except ValueError:
            # Exact match against whatever literal the caller asked for
            return value


class WorkSpec(BaseModel):
    """Input for ``create_work``.

    Field aliases follow the catalog's form payload (``titulo``,
    ``autorNombre``...) so request bodies can be validated as they arrive.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, alias="titulo")
    author_name: Optional[str] = Field(default=None, alias="autorNombre")
    author_surname: Optional[str] = Field(default=None, alias="autorApellidos")
    genre: Optional[str] = Field(default=None, alias="genero")
    subject: Optional[str] = Field(default=None, alias="materia")
    original_language: Optional[str] = Field(default=None, alias="idiomaOriginal")
    creation_year: Optional[int] = Field(default=None, alias="anoCreacion")
    isbn: Optional[str] = None
    format: Optional[str] = Field(default=None, alias="formato")
    page_count: Optional[int] = Field(default=None, alias="numeroPaginas", ge=1)
    publisher_name: Optional[str] = Field(default=None, alias="editorial")
    barcode: Optional[str] = Field(default=None, alias="codigoBarras")
    location_name: Optional[str] = Field(default=None, alias="ubicacion")

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class WorkSummary(BaseModel):
    """One row of a catalog listing"""
    work_id: str
    title: str
    author: str = UNKNOWN_AUTHOR
    genre: Optional[str] = None
    subject: Optional[str] = None
    isbn: Optional[str] = None
    format: Optional[str] = None
    availability: Optional[str] = None
    location: Optional[str] = None


class WorkDetail(BaseModel):
    """Full view of a Work with one representative Manifestation and Item"""
    work_id: str
    title: str
    author: str = UNKNOWN_AUTHOR
    genre: Optional[str] = None
    subjects: List[str] = []
    original_language: Optional[str] = None
    creation_year: Optional[str] = None
    expression_language: Optional[str] = None
    expression_type: Optional[str] = None
    isbn: Optional[str] = None
    format: Optional[str] = None
    publication_year: Optional[str] = None
    page_count: Optional[int] = None
    publisher: Optional[str] = None
    item_id: Optional[str] = None
    barcode: Optional[str] = None
    availability: Optional[str] = None
    physical_condition: Optional[str] = None
    location: Optional[str] = None


class WorkRef(BaseModel):
    work_id: str
    title: Optional[str] = None
    author: str = UNKNOWN_AUTHOR


class ItemLookup(BaseModel):
    """Result of resolving a physical item by barcode"""
    item_id: str
    barcode: str
    availability: Optional[str] = None
    work: Optional[WorkRef] = None

    @property
    def is_available(self) -> bool:
        return self.availability == Availability.AVAILABLE.value


class BibliographicResource(BaseModel):
    """Flattened Work/Expression/Manifestation/Item chain for catalog export"""
    work_id: str
    title: str
    author: str = UNKNOWN_AUTHOR
    creation_year: Optional[str] = None
    original_language: Optional[str] = None
    genre: Optional[str] = None
    subject: Optional[str] = None
    expression_id: Optional[str] = None
    expression_language: Optional[str] = None
    expression_type: Optional[str] = None
    translator: Optional[str] = None
    manifestation_id: Optional[str] = None
    isbn: Optional[str] = None
    format: Optional[str] = None
    publication_year: Optional[str] = None
    page_count: Optional[int] = None
    publisher: Optional[str] = None
    item_id: Optional[str] = None
    barcode: Optional[str] = None
    availability: Optional[str] = None
    physical_condition: Optional[str] = None
    shelf_mark: Optional[str] = None
    location: Optional[str] = None
