"""
Core data structures for numsteps.

These dataclasses define the contract between solvers and their consumers
(exporters, CLI). Every instance is created fresh per solve call.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple, Union


class MethodFamily(Enum):
    """Broad categories of numerical methods."""

    ROOT_FINDING = auto()
    LINEAR_SYSTEM = auto()


@dataclass(frozen=True)
class Step:
    """A single recorded step of a numerical method."""

    index: int
    description: str  # Human-readable, e.g. "Iteration 3"
    formula: str  # LaTeX template, e.g. "c = \frac{a + b}{2}"
    calculation: str  # The formula with values substituted
    result: Optional[Union[str, float]] = None


@dataclass(frozen=True)
class IterationSnapshot:
    """Raw values of one Gauss-Seidel/Jacobi pass."""

    iteration: int
    x: float
    y: float
    z: float
    error: float

    def as_vector(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Solution:
    """
    Complete trace and answer of one solve call.

    Root-finding methods set ``root``; linear methods set ``solution``.
    Iterative methods set ``iterations``; Gauss-Seidel and Jacobi also
    fill ``iteration_steps``.
    """

    title: str
    steps: Tuple[Step, ...]
    final_answer: str
    method: str = ""
    iteration_table: Optional[Tuple[Tuple[str, ...], ...]] = None
    root: Optional[float] = None
    solution: Optional[Tuple[float, ...]] = None
    iterations: Optional[int] = None
    iteration_steps: Tuple[IterationSnapshot, ...] = field(default_factory=tuple)
    converged: bool = True

    @property
    def table_header(self) -> Tuple[str, ...]:
        """Header row of the iteration table (empty if there is none)."""
        if not self.iteration_table:
            return ()
        return self.iteration_table[0]

    @property
    def table_rows(self) -> Tuple[Tuple[str, ...], ...]:
        """Body rows of the iteration table."""
        if not self.iteration_table:
            return ()
        return self.iteration_table[1:]


@dataclass
class SolveRequest:
    """
    Request to run one method.

    ``params`` is the raw parameter bag (camelCase or snake_case keys).
    """

    method: str
    params: dict = field(default_factory=dict)
