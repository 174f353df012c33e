"""
Method catalog and numeric constants.

Every tunable default used by the solvers lives here.
"""

from typing import Any, Dict, List, Optional

from ..models import MethodFamily


# Pivots smaller than this are treated as zero by the direct solvers
SINGULAR_PIVOT_THRESHOLD = 1e-10

# Central-difference step for numerical derivatives
DERIVATIVE_STEP = 1e-4

# Decimal places used for every number shown in steps and tables
DISPLAY_PRECISION = 6


# Alternative parameter names accepted from callers
PARAM_ALIASES = {
    "tolerance": "decimalPlaces",
}

METHOD_CATALOG: Dict[str, Dict[str, Any]] = {
    "bisection": {
        "title": "Bisection Method Solution",
        "family": MethodFamily.ROOT_FINDING,
        "description": "Repeatedly halves an interval that brackets a root.",
        "required": ["function", "lowerBound", "upperBound"],
        "optional": {"decimalPlaces": 2, "maxIterations": 100, "bestEffort": False},
    },
    "false-position": {
        "title": "False Position Method Solution",
        "family": MethodFamily.ROOT_FINDING,
        "description": "Brackets a root and cuts the interval where the chord crosses zero.",
        "required": ["function", "lowerBound", "upperBound"],
        "optional": {"decimalPlaces": 2, "maxIterations": 100},
    },
    "secant": {
        "title": "Secant Method Solution",
        "family": MethodFamily.ROOT_FINDING,
        "description": "Follows secant lines through the two latest estimates.",
        "required": ["function", "x0", "x1"],
        "optional": {"decimalPlaces": 2, "maxIterations": 100},
    },
    "newton-raphson": {
        "title": "Newton-Raphson Method Solution",
        "family": MethodFamily.ROOT_FINDING,
        "description": "Follows the tangent line using a numerical derivative.",
        "required": ["function", "initialGuess"],
        "optional": {"decimalPlaces": 2, "maxIterations": 10},
    },
    "gauss-elimination": {
        "title": "Gauss Elimination Method Solution",
        "family": MethodFamily.LINEAR_SYSTEM,
        "description": "Row-reduces to upper triangular form, then back-substitutes.",
        "required": ["matrix", "constants"],
        "optional": {},
    },
    "gauss-jordan": {
        "title": "Gauss-Jordan Method Solution",
        "family": MethodFamily.LINEAR_SYSTEM,
        "description": "Row-reduces to reduced row echelon form.",
        "required": ["matrix", "constants"],
        "optional": {},
    },
    "gauss-seidel": {
        "title": "Gauss-Seidel Method Solution",
        "family": MethodFamily.LINEAR_SYSTEM,
        "description": (
            "Iterative method that uses updated values immediately, "
            "often converging faster than Jacobi."
        ),
        "required": ["matrix", "constants"],
        "optional": {"decimalPlaces": 3, "maxIterations": 100},
    },
    "jacobi": {
        "title": "Jacobi Method Solution",
        "family": MethodFamily.LINEAR_SYSTEM,
        "description": "Iterative method that updates every unknown from the previous pass.",
        "required": ["matrix", "constants"],
        "optional": {"decimalPlaces": 3, "maxIterations": 100},
    },
}


def tolerance_from_decimal_places(decimal_places: int) -> float:
    """Convergence threshold for a result correct to ``decimal_places``."""
    return 0.5 * 10 ** (-decimal_places)


def get_method_info(method: str) -> Optional[Dict[str, Any]]:
    """Get the catalog entry for a method identifier."""
    return METHOD_CATALOG.get(method)


def get_default(method: str, param: str) -> Any:
    """
    Get the default value of an optional parameter.

    Raises:
        KeyError: If the method or parameter is unknown
    """
    return METHOD_CATALOG[method]["optional"][param]


def list_methods(family: Optional[MethodFamily] = None) -> List[str]:
    """List method identifiers, optionally filtered by family."""
    return [
        name
        for name, info in METHOD_CATALOG.items()
        if family is None or info["family"] == family
    ]
