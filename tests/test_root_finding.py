"""
Tests for the root-finding solvers.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


def solve(method, **params):
    from numsteps.solvers import get_default_registry

    return get_default_registry().solve(method, params)


class TestBisection:
    """Tests for the bisection method."""

    def test_square_root_of_four(self):
        """Test x^2 - 4 on [0, 3] to two decimal places."""
        solution = solve("bisection", function="x^2 - 4", lowerBound=0, upperBound=3)

        assert solution.iterations == 10
        assert solution.root == pytest.approx(2.0009765625)
        assert solution.final_answer == "x = 2.00 (after 10 iterations)"
        assert solution.converged
        assert solution.title == "Bisection Method Solution"

    def test_trace_shape(self):
        """Test one step and one table row per iteration."""
        solution = solve("bisection", function="x^2 - 4", lowerBound=0, upperBound=3)

        assert len(solution.steps) == 10
        assert [s.index for s in solution.steps] == list(range(1, 11))
        assert solution.steps[0].description == "Iteration 1"
        assert solution.steps[-1].description == "Final Iteration 10"
        assert solution.table_header[0] == "Iteration"
        assert len(solution.table_rows) == 10

    def test_first_iteration_values(self):
        """Test the first row of the iteration table."""
        solution = solve("bisection", function="x^2 - 4", lowerBound=0, upperBound=3)
        first = solution.table_rows[0]

        assert first[:4] == ("1", "0.000000", "3.000000", "1.500000")
        assert first[6] == "-1.750000"
        assert first[7] == "3.000000"

    def test_final_interval_width(self):
        """Test that the last interval is no wider than twice the tolerance."""
        solution = solve("bisection", function="x^2 - 4", lowerBound=0, upperBound=3)
        last = solution.table_rows[-1]

        assert float(last[2]) - float(last[1]) <= 0.01

    def test_interval_halves(self):
        """Test that the interval width halves every loop iteration."""
        solution = solve("bisection", function="x^3 - x - 2", lowerBound=1, upperBound=2)
        widths = [float(row[2]) - float(row[1]) for row in solution.table_rows[:-1]]

        for before, after in zip(widths, widths[1:]):
            assert after == pytest.approx(before / 2, abs=5e-6)

    def test_exact_root(self):
        """Test stopping immediately on an exact root."""
        solution = solve("bisection", function="x - 1", lowerBound=0, upperBound=2)

        assert solution.root == 1.0
        assert solution.iterations == 1
        assert len(solution.steps) == 1
        assert solution.final_answer == "x = 1.00 (after 1 iterations)"

    def test_answer_is_truncated(self):
        """Test that the final answer cuts digits rather than rounding."""
        solution = solve(
            "bisection", function="x^2 - 2", lowerBound=1, upperBound=2, decimalPlaces=3
        )

        # sqrt(2) = 1.41421..., the reported root lies just above or below it
        assert solution.final_answer.startswith("x = 1.41")
        assert solution.root == pytest.approx(2 ** 0.5, abs=1e-3)

    def test_no_sign_change(self):
        """Test that a bracket without a sign change raises."""
        from numsteps.utils.errors import NoRootInIntervalError

        with pytest.raises(NoRootInIntervalError) as exc_info:
            solve("bisection", function="x^2 + 1", lowerBound=0, upperBound=1)

        assert "[0.0, 1.0]" in str(exc_info.value)
        assert exc_info.value.fa == 1.0
        assert exc_info.value.fb == 2.0

    def test_no_sign_change_best_effort(self):
        """Test the one-step diagnostic in best-effort mode."""
        solution = solve(
            "bisection", function="x^2 + 1", lowerBound=0, upperBound=1, bestEffort=True
        )

        assert len(solution.steps) == 1
        assert solution.steps[0].index == 1
        assert solution.iteration_table == ()
        assert solution.iterations == 0
        assert solution.root is None
        assert not solution.converged
        assert "No root guaranteed" in solution.final_answer

    def test_iteration_cap(self):
        """Test that hitting the cap before the tolerance raises."""
        from numsteps.utils.errors import MaxIterationsExceededError

        with pytest.raises(MaxIterationsExceededError) as exc_info:
            solve("bisection", function="x^2 - 4", lowerBound=0, upperBound=3, maxIterations=3)

        assert exc_info.value.max_iterations == 3

    def test_iteration_cap_best_effort(self):
        """Test that best-effort mode reports the last midpoint."""
        solution = solve(
            "bisection",
            function="x^2 - 4",
            lowerBound=0,
            upperBound=3,
            maxIterations=3,
            bestEffort=True,
        )

        assert solution.iterations == 4
        assert solution.root == pytest.approx(2.0625)
        assert not solution.converged

    def test_best_effort_large_root_many_decimals(self):
        """Test truncating a large root to many decimal places."""
        solution = solve(
            "bisection",
            function="x - 1e14",
            lowerBound=0,
            upperBound=2e14,
            decimalPlaces=16,
            maxIterations=5,
            bestEffort=True,
        )

        assert solution.root == 1e14
        assert solution.final_answer == (
            "x = 100000000000000." + "0" * 16 + " (after 1 iterations)"
        )

    def test_best_effort_large_root_through_run(self):
        """Test that run() returns a result for a large best-effort root."""
        from numsteps.models import SolveRequest
        from numsteps.solvers import get_default_registry

        result = get_default_registry().run(
            SolveRequest(
                method="bisection",
                params={
                    "function": "x - 3e13",
                    "lowerBound": 0,
                    "upperBound": 1e14,
                    "decimalPlaces": 16,
                    "maxIterations": 5,
                    "bestEffort": True,
                },
            )
        )

        assert result.success
        assert not result.solution.converged
        assert result.solution.iterations == 6
        assert result.solution.final_answer.endswith("0" * 16 + " (after 6 iterations)")

    def test_bounds_must_be_ordered(self):
        """Test that lowerBound must be below upperBound."""
        from numsteps.utils.errors import InvalidInputError

        with pytest.raises(InvalidInputError):
            solve("bisection", function="x^2 - 4", lowerBound=3, upperBound=0)

        with pytest.raises(InvalidInputError):
            solve("bisection", function="x^2 - 4", lowerBound=1, upperBound=1)

    def test_expression_error_propagates(self):
        """Test that evaluator failures are not swallowed."""
        from numsteps.utils.errors import ExpressionError

        with pytest.raises(ExpressionError):
            solve("bisection", function="x^2 + y", lowerBound=0, upperBound=3)


class TestFalsePosition:
    """Tests for the false position method."""

    def test_converges(self):
        """Test x^2 - 4 on [0, 3]."""
        solution = solve("false-position", function="x^2 - 4", lowerBound=0, upperBound=3)

        assert solution.root == pytest.approx(2.0, abs=0.01)
        assert solution.converged
        assert solution.title == "False Position Method Solution"
        assert len(solution.steps) == solution.iterations

    def test_first_error_is_interval_width(self):
        """Test that the first iteration's error is |b - a|."""
        solution = solve("false-position", function="x^2 - 4", lowerBound=0, upperBound=3)
        first = solution.table_rows[0]

        assert first[3] == "1.333333"
        assert first[7] == "3.000000"

    def test_cubic(self):
        """Test a cubic with a root near 1.5214."""
        solution = solve(
            "false-position", function="x^3 - x - 2", lowerBound=1, upperBound=2, decimalPlaces=4
        )

        assert solution.root == pytest.approx(1.52138, abs=1e-3)

    def test_no_sign_change(self):
        """Test that the bracket is checked."""
        from numsteps.utils.errors import NoRootInIntervalError

        with pytest.raises(NoRootInIntervalError):
            solve("false-position", function="x^2 + 1", lowerBound=-1, upperBound=1)

    def test_iteration_cap(self):
        """Test that the cap raises."""
        from numsteps.utils.errors import MaxIterationsExceededError

        with pytest.raises(MaxIterationsExceededError):
            solve(
                "false-position", function="x^2 - 4", lowerBound=0, upperBound=3, maxIterations=1
            )


class TestSecant:
    """Tests for the secant method."""

    def test_converges(self):
        """Test x^2 - 4 from 1 and 3."""
        solution = solve("secant", function="x^2 - 4", x0=1, x1=3)

        assert solution.root == pytest.approx(2.0, abs=0.01)
        assert solution.table_header == ("Iteration", "x0", "x1", "x2", "f(x0)", "f(x1)", "f(x2)")
        assert solution.table_rows[0][3] == "1.750000"

    def test_equal_guesses(self):
        """Test that equal starting points are rejected before any evaluation."""
        from numsteps.solvers import SecantSolver
        from numsteps.utils.errors import InvalidInitialGuessError

        evaluator = Mock()
        solver = SecantSolver(evaluator)

        with pytest.raises(InvalidInitialGuessError):
            solver.solve({"function": "x^2 - 4", "x0": 2, "x1": 2})

        evaluator.at.assert_not_called()

    def test_flat_secant(self):
        """Test that equal function values raise DivisionByZeroError."""
        from numsteps.utils.errors import DivisionByZeroError, NumericalDegeneracyError

        with pytest.raises(DivisionByZeroError) as exc_info:
            solve("secant", function="x^2", x0=-1, x1=1)

        assert isinstance(exc_info.value, NumericalDegeneracyError)

    def test_iteration_cap(self):
        """Test that the cap raises."""
        from numsteps.utils.errors import MaxIterationsExceededError

        with pytest.raises(MaxIterationsExceededError):
            solve("secant", function="x^2 - 4", x0=1, x1=3, maxIterations=1)


class TestNewtonRaphson:
    """Tests for the Newton-Raphson method."""

    def test_converges(self):
        """Test x^2 - 4 from 3."""
        solution = solve("newton-raphson", function="x^2 - 4", initialGuess=3)

        assert solution.root == pytest.approx(2.0, abs=1e-3)
        assert solution.iterations <= 10
        assert solution.title == "Newton-Raphson Method Solution"

    def test_first_step(self):
        """Test the first Newton update from 3."""
        solution = solve("newton-raphson", function="x^2 - 4", initialGuess=3)
        first = solution.table_rows[0]

        assert first[1] == "3.000000"
        assert first[2] == "5.000000"
        assert float(first[3]) == pytest.approx(6.0, abs=1e-6)
        assert float(first[4]) == pytest.approx(3 - 5 / 6, abs=1e-6)

    def test_zero_derivative(self):
        """Test that a flat tangent raises ZeroDerivativeError."""
        from numsteps.utils.errors import ZeroDerivativeError

        with pytest.raises(ZeroDerivativeError) as exc_info:
            solve("newton-raphson", function="x^2", initialGuess=0)

        assert str(exc_info.value) == "Derivative is 0."

    def test_uses_numerical_derivative(self):
        """Test that the derivative comes from the evaluator."""
        from numsteps.input.parser import ExpressionEvaluator
        from numsteps.solvers import NewtonRaphsonSolver

        evaluator = Mock(wraps=ExpressionEvaluator())
        NewtonRaphsonSolver(evaluator).solve({"function": "x^2 - 4", "initialGuess": 3})

        assert evaluator.numerical_derivative.called

    def test_default_cap_is_ten(self):
        """Test that a function with no real root stops after ten iterations."""
        from numsteps.utils.errors import MaxIterationsExceededError

        with pytest.raises(MaxIterationsExceededError) as exc_info:
            solve("newton-raphson", function="x^2 + 1", initialGuess=0.5)

        assert exc_info.value.max_iterations == 10


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
