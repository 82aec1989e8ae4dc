"""Precifica - restaurant cost management and menu pricing backend."""

__version__ = "1.0.0"
