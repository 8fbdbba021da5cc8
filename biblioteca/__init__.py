"""Catalog graph access and loan synchronization for the Biblioteca system"""
from .config import Settings
from .errors import BibliotecaError, ValidationError, NotFound, Conflict, UpstreamUnavailable

__all__ = [
    'Settings',
    'BibliotecaError',
    'ValidationError',
    'NotFound',
    'Conflict',
    'UpstreamUnavailable',
]
