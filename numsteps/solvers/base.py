"""
Base solver interface, parameter coercion, and the method registry.

All solvers inherit from BaseSolver and return a Solution.
"""

import logging
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..input.parser import ExpressionEvaluator
from ..models import MethodFamily, Solution, SolveRequest
from ..utils.constants import PARAM_ALIASES, get_default, get_method_info
from ..utils.errors import (
    InvalidInputError,
    NumericalMethodError,
    UnknownMethodError,
)

logger = logging.getLogger(__name__)


@dataclass
class SolverResult:
    """
    Result from a registry run.

    Wraps Solution with the error that stopped the solve, if any.
    """

    success: bool
    solution: Optional[Solution] = None
    error: Optional[NumericalMethodError] = None
    solver_name: str = ""

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error else None

    @classmethod
    def failure(cls, error: NumericalMethodError, solver_name: str = "") -> "SolverResult":
        """Create a failed result."""
        return cls(success=False, error=error, solver_name=solver_name)

    @classmethod
    def from_solution(cls, solution: Solution, solver_name: str = "") -> "SolverResult":
        """Create a successful result from a Solution."""
        return cls(success=True, solution=solution, solver_name=solver_name)


# === Parameter coercion ===


def _camel_case(key: str) -> str:
    """lower_bound -> lowerBound; camelCase keys pass through."""
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _snake_case(key: str) -> str:
    """lowerBound -> lower_bound"""
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", key).lower()


def as_float(name: str, value: Any) -> float:
    """Coerce a parameter to a finite float."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"'{name}' must be a number, got {value!r}")
    if not math.isfinite(number):
        raise InvalidInputError(f"'{name}' must be finite, got {value!r}")
    return number


def as_count(name: str, value: Any, minimum: int = 0) -> int:
    """Coerce a parameter to an integer no smaller than ``minimum``."""
    number = as_float(name, value)
    if not number.is_integer():
        raise InvalidInputError(f"'{name}' must be a whole number, got {value!r}")
    count = int(number)
    if count < minimum:
        raise InvalidInputError(f"'{name}' must be at least {minimum}, got {count}")
    return count


def as_flag(name: str, value: Any) -> bool:
    """Coerce a parameter to a bool, accepting form-style strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "on", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "off", "0", ""):
        return False
    raise InvalidInputError(f"'{name}' must be true or false, got {value!r}")


def as_vector(name: str, values: Any) -> List[float]:
    """Coerce a sequence parameter to a list of floats."""
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise InvalidInputError(f"'{name}' must be a list of numbers")
    return [as_float(f"{name}[{i}]", v) for i, v in enumerate(values)]


def as_matrix(name: str, rows: Any) -> List[List[float]]:
    """Coerce a nested sequence parameter to a list of float rows."""
    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        raise InvalidInputError(f"'{name}' must be a list of rows")
    return [as_vector(f"{name}[{i}]", row) for i, row in enumerate(rows)]


class BaseSolver(ABC):
    """
    Abstract base class for numerical method solvers.

    Subclasses implement compute() with typed keyword arguments; solve()
    accepts a raw parameter bag, validates it against the method catalog,
    and forwards it.
    """

    # Method identifier, also the key into METHOD_CATALOG
    name: str = "base"

    family: MethodFamily = MethodFamily.ROOT_FINDING

    def __init__(self, evaluator: Optional[ExpressionEvaluator] = None):
        self.evaluator = evaluator or ExpressionEvaluator()

    @property
    def title(self) -> str:
        return get_method_info(self.name)["title"]

    @property
    def description(self) -> str:
        return get_method_info(self.name)["description"]

    def solve(self, params: Mapping[str, Any]) -> Solution:
        """
        Run the method on a parameter bag.

        Args:
            params: Parameters keyed as in the method catalog
                (camelCase) or their snake_case equivalents

        Returns:
            Solution with the full step trace

        Raises:
            NumericalMethodError: Any subclass, terminal for the call
        """
        return self.compute(**self.read_params(params))

    @abstractmethod
    def compute(self, **kwargs) -> Solution:
        """Run the method on typed keyword arguments."""

    def read_params(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate a parameter bag and convert it to keyword arguments.

        Unknown and missing keys raise InvalidInputError; optional keys
        that are absent or None take the catalog defaults.
        """
        info = get_method_info(self.name)
        required = info["required"]
        optional = info["optional"]

        normalized: Dict[str, Any] = {}
        for key, value in params.items():
            canonical = _camel_case(key)
            canonical = PARAM_ALIASES.get(canonical, canonical)
            if canonical not in required and canonical not in optional:
                raise InvalidInputError(
                    f"Unknown parameter '{key}' for {self.name}",
                    suggestions=[f"Expected: {', '.join(required + list(optional))}"],
                )
            if canonical in normalized:
                raise InvalidInputError(f"Parameter '{canonical}' given more than once")
            normalized[canonical] = value

        missing = [key for key in required if normalized.get(key) in (None, "")]
        if missing:
            raise InvalidInputError(
                f"Missing required parameter(s) for {self.name}: {', '.join(missing)}"
            )

        for key in optional:
            if normalized.get(key) is None:
                normalized[key] = get_default(self.name, key)

        return {_snake_case(key): value for key, value in normalized.items()}


class SolverRegistry:
    """
    Registry of available solvers keyed by method identifier.
    """

    def __init__(self):
        self._solvers: Dict[str, BaseSolver] = {}

    @staticmethod
    def normalize_method(method: str) -> str:
        """'Gauss_Seidel' and 'gauss seidel' both become 'gauss-seidel'."""
        return re.sub(r"[\s_]+", "-", method.strip().lower())

    def register(self, solver: BaseSolver):
        """Register a solver under its method identifier."""
        self._solvers[solver.name] = solver

    def get_solver(self, method: str) -> Optional[BaseSolver]:
        """Get the solver for a method identifier, or None."""
        return self._solvers.get(self.normalize_method(method))

    def solve(self, method: str, params: Mapping[str, Any]) -> Solution:
        """
        Dispatch a parameter bag to the matching solver.

        Raises:
            UnknownMethodError: If no solver is registered for ``method``
            NumericalMethodError: Whatever the solver raises
        """
        solver = self.get_solver(method)
        if solver is None:
            raise UnknownMethodError(method, self.methods)

        logger.debug("Dispatching %s with %s", solver.name, sorted(params))
        solution = solver.solve(params)
        logger.debug(
            "%s finished with %d steps: %s",
            solver.name,
            len(solution.steps),
            solution.final_answer,
        )
        return solution

    def run(self, request: SolveRequest) -> SolverResult:
        """
        Run a request, capturing solver errors in the result.
        """
        try:
            solution = self.solve(request.method, request.params)
        except NumericalMethodError as e:
            logger.info("%s failed: %s", request.method, e)
            return SolverResult.failure(e, solver_name=request.method)
        return SolverResult.from_solution(solution, solver_name=request.method)

    @property
    def methods(self) -> List[str]:
        """Registered method identifiers in registration order."""
        return list(self._solvers)

    @property
    def solvers(self) -> List[BaseSolver]:
        return list(self._solvers.values())
