"""
Plain-text function parser and numeric evaluator.

Converts expressions such as ``x^3 - 2x - 5`` to SymPy expression trees
and evaluates them at given points. Parsed expressions are compiled with
``lambdify`` and cached, so iterating a method over one expression parses
it only once.
"""

import math
import re
from functools import lru_cache
from typing import Callable, Mapping, Optional, Tuple

import sympy as sp
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor,
)

from ..utils.constants import DERIVATIVE_STEP
from ..utils.errors import ExpressionError


TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)

# Lower-cased input may only contain these characters
_ALLOWED_CHARS = re.compile(r"^[0-9a-z_+\-*/^().,\s]+$")

# Names that should resolve to constants rather than free symbols
_CONSTANTS = {
    "e": sp.E,
    "pi": sp.pi,
}


def _normalize(expression: str) -> str:
    """Lower-case and trim an expression, rejecting anything unexpected."""
    if not isinstance(expression, str):
        raise ExpressionError(
            f"Expression must be text, got {type(expression).__name__}",
            expression=str(expression),
        )

    text = " ".join(expression.strip().lower().split())
    if not text:
        raise ExpressionError("Expression is empty", expression=expression)

    if not _ALLOWED_CHARS.match(text) or "__" in text:
        bad = sorted({ch for ch in text if not _ALLOWED_CHARS.match(ch) and not ch.isspace()})
        raise ExpressionError(
            f"Expression contains unsupported characters: {' '.join(bad) or '__'}",
            expression=expression,
        )

    return text


@lru_cache(maxsize=256)
def parse_function(expression: str) -> sp.Expr:
    """
    Parse a plain-text expression into a SymPy expression.

    Variable and function names are case-insensitive: ``X^2`` and ``x^2``
    parse to the same tree.

    Raises:
        ExpressionError: If the text is not a valid algebraic expression.
    """
    text = _normalize(expression)

    try:
        expr = parse_expr(text, local_dict=dict(_CONSTANTS), transformations=TRANSFORMATIONS)
    except Exception as e:
        raise ExpressionError(
            f"Failed to parse expression: {e}", expression=expression
        ) from e

    if not isinstance(expr, sp.Expr):
        raise ExpressionError(
            f"'{expression}' is not an algebraic expression", expression=expression
        )

    return expr


@lru_cache(maxsize=256)
def _compile(expression: str, variables: Tuple[str, ...]) -> Callable:
    """Compile an expression into a plain Python function of ``variables``."""
    expr = parse_function(expression)

    unknown = sorted(str(s) for s in expr.free_symbols if str(s) not in variables)
    if unknown:
        raise ExpressionError(
            f"Unknown variable(s) in expression: {', '.join(unknown)}",
            expression=expression,
            suggestions=[f"Write the function in terms of {', '.join(variables) or 'x'}"],
        )

    symbols = [sp.Symbol(name) for name in variables]
    return sp.lambdify(symbols, expr, modules="math")


class ExpressionEvaluator:
    """
    Evaluate single-variable function expressions numerically.

    Usage:
        evaluator = ExpressionEvaluator()
        evaluator.evaluate("x^2 - 4", {"x": 3})  # 5.0
        evaluator.numerical_derivative("x^2 - 4", 3)  # ~6.0
    """

    def __init__(self, variable: str = "x"):
        """
        Initialize the evaluator.

        Args:
            variable: Name of the free variable used by ``at`` and
                ``numerical_derivative``
        """
        self.variable = variable.lower()

    def parse(self, expression: str) -> sp.Expr:
        """Parse an expression, raising ExpressionError on failure."""
        return parse_function(expression)

    def try_parse(self, expression: str) -> Tuple[Optional[sp.Expr], Optional[str]]:
        """
        Attempt to parse, returning None on failure instead of raising.

        Returns:
            Tuple of (expression or None, error message or None)
        """
        try:
            return self.parse(expression), None
        except ExpressionError as e:
            return None, str(e)

    def evaluate(self, expression: str, bindings: Mapping[str, float]) -> float:
        """
        Evaluate an expression with the given variable values.

        Args:
            expression: Plain-text expression, e.g. ``"sin(x) - x/2"``
            bindings: Mapping of variable name to value

        Returns:
            The value as a finite float

        Raises:
            ExpressionError: On parse failure, unknown variables, domain
                errors, or a non-real or non-finite result.
        """
        values = {name.lower(): value for name, value in bindings.items()}
        names = tuple(sorted(values))
        func = _compile(expression, names)

        try:
            result = float(func(*(float(values[name]) for name in names)))
        except (ArithmeticError, ValueError, TypeError, NameError) as e:
            raise ExpressionError(
                f"Error evaluating expression: {expression}. {e}",
                expression=expression,
                technical_details=f"bindings: {dict(bindings)}",
            ) from e

        if not math.isfinite(result):
            raise ExpressionError(
                f"Expression '{expression}' is not finite at {dict(bindings)}",
                expression=expression,
            )

        return result

    def at(self, expression: str, x: float) -> float:
        """Evaluate ``expression`` with the free variable set to ``x``."""
        return self.evaluate(expression, {self.variable: x})

    def numerical_derivative(
        self, expression: str, x: float, h: float = DERIVATIVE_STEP
    ) -> float:
        """
        Central-difference approximation of f'(x).

        Formula: f'(x) ~ [f(x + h) - f(x - h)] / (2h)
        """
        return (self.at(expression, x + h) - self.at(expression, x - h)) / (2 * h)


def evaluate_expression(expression: str, bindings: Mapping[str, float]) -> float:
    """
    Convenience function: evaluate an expression without an evaluator object.

    Raises ExpressionError on failure.
    """
    return ExpressionEvaluator().evaluate(expression, bindings)
