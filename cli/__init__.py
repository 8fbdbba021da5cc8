"""CLI package for the Biblioteca catalog"""
from .main import cli

__all__ = ['cli']
