"""Solver layer: root-finding and linear-system methods."""

from typing import Optional

from .base import BaseSolver, SolverResult, SolverRegistry
from .root_finding import (
    BisectionSolver,
    FalsePositionSolver,
    SecantSolver,
    NewtonRaphsonSolver,
)
from .linear_systems import (
    GaussEliminationSolver,
    GaussJordanSolver,
    GaussSeidelSolver,
    JacobiSolver,
)
from ..input.parser import ExpressionEvaluator

__all__ = [
    "BaseSolver",
    "SolverResult",
    "SolverRegistry",
    "BisectionSolver",
    "FalsePositionSolver",
    "SecantSolver",
    "NewtonRaphsonSolver",
    "GaussEliminationSolver",
    "GaussJordanSolver",
    "GaussSeidelSolver",
    "JacobiSolver",
    "get_default_registry",
]


def get_default_registry(evaluator: Optional[ExpressionEvaluator] = None) -> SolverRegistry:
    """
    Create and return a registry with every method.

    All root-finding solvers share ``evaluator`` (a fresh
    ExpressionEvaluator if None).
    """
    evaluator = evaluator or ExpressionEvaluator()
    registry = SolverRegistry()
    for solver_cls in (
        BisectionSolver,
        FalsePositionSolver,
        SecantSolver,
        NewtonRaphsonSolver,
        GaussEliminationSolver,
        GaussJordanSolver,
        GaussSeidelSolver,
        JacobiSolver,
    ):
        registry.register(solver_cls(evaluator))
    return registry
