"""
Column-name to field-name mapping.
"""

from .bidi import BidiMapping
from .name_mapper import NameMapper

__all__ = ["BidiMapping", "NameMapper"]
