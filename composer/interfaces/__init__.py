"""Interfaces for collaborators of the composition engine.

Abstract Base Classes (ABCs) defining the contracts downstream code
(converters, serializers) relies on.
"""

from composer.interfaces.converter import ICompositionConverter
from composer.interfaces.reader import ICompositionReader

__all__ = [
    "ICompositionConverter",
    "ICompositionReader",
]
