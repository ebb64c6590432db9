"""Utility helpers shared across gridsql layers."""

from .decorators import statement_attributes, traced

__all__ = ["statement_attributes", "traced"]
