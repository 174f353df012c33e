"""
Root-finding solvers: Bisection, False Position, Secant, Newton-Raphson.

Each solver searches for a root of a single-variable function and records
one step and one table row per iteration.
"""

from typing import List, Optional, Tuple

from .base import BaseSolver, as_count, as_flag, as_float
from ..models import MethodFamily, Solution
from ..output.step_generator import StepRecorder, format_number, truncate_decimals
from ..utils.constants import tolerance_from_decimal_places
from ..utils.errors import (
    DegenerateIntervalError,
    DivisionByZeroError,
    InvalidInitialGuessError,
    InvalidInputError,
    MaxIterationsExceededError,
    NoRootInIntervalError,
    ZeroDerivativeError,
)

Row = Tuple[str, ...]

BRACKET_HEADER: Row = ("Iteration", "a", "b", "c", "f(a)", "f(b)", "f(c)", "Error")
SECANT_HEADER: Row = ("Iteration", "x0", "x1", "x2", "f(x0)", "f(x1)", "f(x2)")
NEWTON_HEADER: Row = ("Iteration", "x_n", "f(x_n)", "f'(x_n)", "x_next", "f(x_next)")


class RootFindingSolver(BaseSolver):
    """Shared plumbing for single-variable root searches."""

    family = MethodFamily.ROOT_FINDING

    def _f(self, function: str, x: float) -> float:
        return self.evaluator.at(function, x)

    def _bracket(self, lower_bound, upper_bound) -> Tuple[float, float]:
        a = as_float("lowerBound", lower_bound)
        b = as_float("upperBound", upper_bound)
        if a >= b:
            raise InvalidInputError(
                f"Lower bound ({a}) must be less than upper bound ({b})"
            )
        return a, b

    def _finish(
        self,
        recorder: StepRecorder,
        table: List[Row],
        final_answer: str,
        root: Optional[float],
        iterations: int,
        converged: bool = True,
    ) -> Solution:
        return Solution(
            title=self.title,
            steps=recorder.steps,
            final_answer=final_answer,
            method=self.name,
            iteration_table=tuple(table),
            root=root,
            iterations=iterations,
            converged=converged,
        )


def _bracket_row(iteration, a, b, c, fa, fb, fc, error) -> Row:
    return (str(iteration),) + tuple(format_number(v) for v in (a, b, c, fa, fb, fc, error))


class BisectionSolver(RootFindingSolver):
    """
    Bisection method.

    Halves [a, b] until its width is at most twice the tolerance, then
    reports the midpoint of the final interval.

    With ``best_effort`` the solver never fails on a bad bracket or on
    the iteration cap: a bad bracket yields a one-step diagnostic
    solution, and an exhausted cap still reports the last midpoint.
    """

    name = "bisection"

    FORMULA = r"c = \frac{a + b}{2}"

    def compute(
        self,
        function: str,
        lower_bound: float,
        upper_bound: float,
        decimal_places: int = 2,
        max_iterations: int = 100,
        best_effort: bool = False,
    ) -> Solution:
        a, b = self._bracket(lower_bound, upper_bound)
        decimal_places = as_count("decimalPlaces", decimal_places)
        max_iterations = as_count("maxIterations", max_iterations, minimum=1)
        best_effort = as_flag("bestEffort", best_effort)
        tolerance = tolerance_from_decimal_places(decimal_places)

        recorder = StepRecorder()
        table: List[Row] = [BRACKET_HEADER]

        fa = self._f(function, a)
        fb = self._f(function, b)

        if fa * fb >= 0:
            if not best_effort:
                raise NoRootInIntervalError(a, b, fa, fb)
            recorder.record(
                "No root guaranteed in the given interval",
                r"f(a) \cdot f(b) < 0",
                f"f({a}) = {format_number(fa)}, f({b}) = {format_number(fb)}",
                "Interval is invalid for the bisection method.",
            )
            return Solution(
                title=self.title,
                steps=recorder.steps,
                final_answer=f"No root guaranteed in the interval [{a}, {b}]",
                method=self.name,
                iteration_table=(),
                iterations=0,
                converged=False,
            )

        iteration = 0
        c = a
        previous_c: Optional[float] = None
        exact_root = False

        while (b - a) > 2 * tolerance and iteration < max_iterations:
            iteration += 1
            c = (a + b) / 2
            fc = self._f(function, c)

            self._record(recorder, table, f"Iteration {iteration}", iteration, a, b, c, fa, fb, fc, b - a)
            previous_c = c

            if fc == 0:
                exact_root = True
                break

            if fa * fc < 0:
                b, fb = c, fc
            else:
                a, fa = c, fc

        converged = True
        if not exact_root and (b - a) > 2 * tolerance:
            if not best_effort:
                raise MaxIterationsExceededError(max_iterations, self.name)
            converged = False

        # One last midpoint so the answer comes from the final interval
        if not exact_root:
            iteration += 1
            c = (a + b) / 2
            fc = self._f(function, c)
            error = abs(c - previous_c) if previous_c is not None else b - a
            self._record(
                recorder, table, f"Final Iteration {iteration}", iteration, a, b, c, fa, fb, fc, error
            )

        return self._finish(
            recorder,
            table,
            f"x = {truncate_decimals(c, decimal_places)} (after {iteration} iterations)",
            root=c,
            iterations=iteration,
            converged=converged,
        )

    def _record(self, recorder, table, description, iteration, a, b, c, fa, fb, fc, error):
        recorder.record(
            description,
            self.FORMULA,
            rf"c = \frac{{{format_number(a)} + {format_number(b)}}}{{2}} = {format_number(c)}",
            f"f(a) = {format_number(fa)}\nf(b) = {format_number(fb)}\nf(c) = {format_number(fc)}",
        )
        table.append(_bracket_row(iteration, a, b, c, fa, fb, fc, error))


class FalsePositionSolver(RootFindingSolver):
    """
    False position (regula falsi).

    Stops as soon as |f(c)| drops below the tolerance or successive
    estimates agree to within it.
    """

    name = "false-position"

    FORMULA = r"c = \frac{a\,f(b) - b\,f(a)}{f(b) - f(a)}"

    def compute(
        self,
        function: str,
        lower_bound: float,
        upper_bound: float,
        decimal_places: int = 2,
        max_iterations: int = 100,
    ) -> Solution:
        a, b = self._bracket(lower_bound, upper_bound)
        decimal_places = as_count("decimalPlaces", decimal_places)
        max_iterations = as_count("maxIterations", max_iterations, minimum=1)
        tolerance = tolerance_from_decimal_places(decimal_places)

        fa = self._f(function, a)
        fb = self._f(function, b)
        if fa * fb >= 0:
            raise NoRootInIntervalError(a, b, fa, fb)

        recorder = StepRecorder()
        table: List[Row] = [BRACKET_HEADER]

        iteration = 0
        c = a
        previous_c: Optional[float] = None
        converged = False

        while iteration < max_iterations:
            iteration += 1

            # Unreachable while f(a) and f(b) keep opposite signs; guards the division
            if fb == fa:
                raise DegenerateIntervalError(
                    "f(b) - f(a) is zero; the chord never crosses the axis.",
                    technical_details=f"a = {a}, b = {b}, f(a) = f(b) = {fa}",
                )

            c = (a * fb - b * fa) / (fb - fa)
            fc = self._f(function, c)
            error = abs(b - a) if previous_c is None else abs(c - previous_c)

            recorder.record(
                f"Iteration {iteration}",
                self.FORMULA,
                (
                    rf"c = \frac{{{format_number(a)} \cdot {format_number(fb)} - "
                    rf"{format_number(b)} \cdot {format_number(fa)}}}"
                    rf"{{{format_number(fb)} - {format_number(fa)}}} = {format_number(c)}"
                ),
                rf"f(c) = {format_number(fc)}, \quad Error = {format_number(error)}",
            )
            table.append(_bracket_row(iteration, a, b, c, fa, fb, fc, error))

            if abs(fc) < tolerance or error <= tolerance:
                converged = True
                break

            if fa * fc < 0:
                b, fb = c, fc
            else:
                a, fa = c, fc
            previous_c = c

        if not converged:
            raise MaxIterationsExceededError(max_iterations, self.name)

        return self._finish(
            recorder,
            table,
            f"x = {format_number(c)} (after {iteration} iterations)",
            root=c,
            iterations=iteration,
        )


class SecantSolver(RootFindingSolver):
    """Secant method from two starting estimates."""

    name = "secant"

    FORMULA = r"x_2 = x_1 - \frac{f(x_1)(x_1 - x_0)}{f(x_1) - f(x_0)}"

    def compute(
        self,
        function: str,
        x0: float,
        x1: float,
        decimal_places: int = 2,
        max_iterations: int = 100,
    ) -> Solution:
        previous = as_float("x0", x0)
        current = as_float("x1", x1)
        if previous == current:
            raise InvalidInitialGuessError(previous, current)
        decimal_places = as_count("decimalPlaces", decimal_places)
        max_iterations = as_count("maxIterations", max_iterations, minimum=1)
        tolerance = tolerance_from_decimal_places(decimal_places)

        f_prev = self._f(function, previous)
        f_curr = self._f(function, current)

        recorder = StepRecorder()
        table: List[Row] = [SECANT_HEADER]
        count = 0

        while True:
            count += 1
            if count > max_iterations:
                raise MaxIterationsExceededError(max_iterations, self.name)

            if f_curr - f_prev == 0:
                raise DivisionByZeroError(
                    "f(x1) - f(x0) is zero.",
                    technical_details=f"x0 = {previous}, x1 = {current}, f = {f_curr}",
                )

            next_x = current - (f_curr * (current - previous)) / (f_curr - f_prev)
            f_next = self._f(function, next_x)

            p, c, n = format_number(previous), format_number(current), format_number(next_x)
            fp, fc = format_number(f_prev), format_number(f_curr)
            recorder.record(
                f"Iteration {count}",
                self.FORMULA,
                rf"x_2 = {c} - \frac{{{fc} ({c} - {p})}}{{{fc} - {fp}}} = {n}",
                f"f(x_2) = {format_number(f_next)}",
            )
            table.append(
                (str(count), p, c, n, fp, fc, format_number(f_next))
            )

            if f_next == 0 or abs(next_x - current) <= tolerance:
                break

            previous, current = current, next_x
            f_prev, f_curr = f_curr, f_next

        return self._finish(
            recorder,
            table,
            f"x = {format_number(next_x)} (after {count} iterations)",
            root=next_x,
            iterations=count,
        )


class NewtonRaphsonSolver(RootFindingSolver):
    """
    Newton-Raphson method.

    The derivative is always the evaluator's central-difference
    approximation, never a symbolic one.
    """

    name = "newton-raphson"

    FORMULA = r"x_{next} = x_n - \frac{f(x_n)}{f'(x_n)}"

    def compute(
        self,
        function: str,
        initial_guess: float,
        decimal_places: int = 2,
        max_iterations: int = 10,
    ) -> Solution:
        x = as_float("initialGuess", initial_guess)
        decimal_places = as_count("decimalPlaces", decimal_places)
        max_iterations = as_count("maxIterations", max_iterations, minimum=1)
        tolerance = tolerance_from_decimal_places(decimal_places)

        recorder = StepRecorder()
        table: List[Row] = [NEWTON_HEADER]
        count = 0

        while True:
            count += 1
            if count > max_iterations:
                raise MaxIterationsExceededError(max_iterations, self.name)

            fx = self._f(function, x)
            fpx = self.evaluator.numerical_derivative(function, x)
            if fpx == 0:
                raise ZeroDerivativeError(x)

            x_next = x - fx / fpx
            f_next = self._f(function, x_next)

            xn, fxn, fpxn, nxt = (format_number(v) for v in (x, fx, fpx, x_next))
            recorder.record(
                f"Iteration {count}",
                self.FORMULA,
                rf"x_{{next}} = {xn} - \frac{{{fxn}}}{{{fpxn}}} = {nxt}",
                f"f(x_next) = {format_number(f_next)}",
            )
            table.append((str(count), xn, fxn, fpxn, nxt, format_number(f_next)))

            if abs(x_next - x) <= tolerance:
                break

            x = x_next

        return self._finish(
            recorder,
            table,
            f"x = {format_number(x_next)} (after {count} iterations)",
            root=x_next,
            iterations=count,
        )
