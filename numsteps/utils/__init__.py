"""Utilities: error hierarchy and method catalog."""

from .constants import METHOD_CATALOG, get_method_info, tolerance_from_decimal_places
from .errors import NumericalMethodError

__all__ = [
    "METHOD_CATALOG",
    "NumericalMethodError",
    "get_method_info",
    "tolerance_from_decimal_places",
]
