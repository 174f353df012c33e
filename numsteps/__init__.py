"""
numsteps - step-by-step numerical methods.

Root finding (bisection, false position, secant, Newton-Raphson) and
linear systems (Gauss elimination, Gauss-Jordan, Gauss-Seidel, Jacobi),
each recording a readable trace of every step.
"""

from typing import Any, Mapping

from .models import IterationSnapshot, Solution, SolveRequest, Step
from .solvers import get_default_registry

__version__ = "0.1.0"

__all__ = [
    "IterationSnapshot",
    "Solution",
    "SolveRequest",
    "Step",
    "get_default_registry",
    "solve",
]


def solve(method: str, params: Mapping[str, Any]) -> Solution:
    """
    Solve with the named method using a fresh default registry.

    Example:
        solve("bisection", {"function": "x^2 - 4", "lowerBound": 0, "upperBound": 3})
    """
    return get_default_registry().solve(method, params)
