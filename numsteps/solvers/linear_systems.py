"""
Linear-system solvers.

Direct methods (Gauss Elimination, Gauss-Jordan) row-reduce the augmented
matrix [A|b] with partial pivoting. Iterative methods (Gauss-Seidel,
Jacobi) refine a 3x3 system from a zero start until successive passes
agree to the requested decimal places.
"""

import math
from abc import abstractmethod
from typing import List, Sequence, Tuple

from .base import BaseSolver, as_count, as_matrix, as_vector
from ..models import IterationSnapshot, MethodFamily, Solution
from ..output.step_generator import StepRecorder, format_matrix, format_number
from ..utils.constants import SINGULAR_PIVOT_THRESHOLD, tolerance_from_decimal_places
from ..utils.errors import DimensionMismatchError, SingularMatrixError, ZeroDiagonalError

Matrix = List[List[float]]

AUGMENTED_FORMULA = r"\text{Augmented Matrix:}"
SOLUTION_FORMULA = r"\text{Solution:}"


def is_diagonally_dominant(A: Sequence[Sequence[float]]) -> bool:
    """True if every |A[i][i]| exceeds the sum of the rest of its row."""
    return all(
        abs(row[i]) > sum(abs(v) for j, v in enumerate(row) if j != i)
        for i, row in enumerate(A)
    )


def _aligned(lines: Sequence[str]) -> str:
    return r"\begin{aligned} " + r" \\ ".join(lines) + r" \end{aligned}"


class LinearSystemSolver(BaseSolver):
    """Shared input handling for Ax = b solvers."""

    family = MethodFamily.LINEAR_SYSTEM

    def _system(self, matrix, constants) -> Tuple[Matrix, List[float]]:
        """Coerce and validate a square system."""
        A = as_matrix("matrix", matrix)
        b = as_vector("constants", constants)
        n = len(A)
        widths = {len(row) for row in A}

        if n == 0 or widths != {n} or len(b) != n:
            raise DimensionMismatchError(
                "Invalid matrix inputs. A must be square with one constant per row.",
                rows=n,
                cols=max(widths, default=0),
                length=len(b),
            )
        return A, b

    def _summary(self, values: Sequence[float], names: Sequence[str]) -> str:
        return ", ".join(f"{name} = {format_number(v)}" for name, v in zip(names, values))


# === Direct methods ===


class DirectSolver(LinearSystemSolver):
    """
    Row reduction of [A|b] with partial pivoting.

    Subclasses decide how each pivot column is cleared and how the
    solution is read off the reduced matrix.
    """

    FINAL_DESCRIPTION = "Final Solution"

    def compute(self, matrix: Sequence[Sequence[float]], constants: Sequence[float]) -> Solution:
        A, b = self._system(matrix, constants)
        n = len(A)
        augmented = [row + [b_i] for row, b_i in zip(A, b)]

        recorder = StepRecorder()
        recorder.record(
            "Initial augmented matrix", AUGMENTED_FORMULA, format_matrix(augmented), ""
        )

        for pivot in range(n):
            self._partial_pivot(recorder, augmented, pivot)
            self._clear_column(recorder, augmented, pivot)

        solution = self._extract_solution(recorder, augmented)

        names = [f"x{i + 1}" for i in range(n)]
        recorder.record(
            self.FINAL_DESCRIPTION,
            SOLUTION_FORMULA,
            _aligned([f"x_{{{i + 1}}} &= {format_number(v)}" for i, v in enumerate(solution)]),
            "",
        )
        table = [("Variable", "Value")] + [
            (name, format_number(v)) for name, v in zip(names, solution)
        ]

        return Solution(
            title=self.title,
            steps=recorder.steps,
            final_answer=f"Solution: {self._summary(solution, names)}",
            method=self.name,
            iteration_table=tuple(table),
            solution=tuple(solution),
        )

    def _partial_pivot(self, recorder: StepRecorder, augmented: Matrix, pivot: int):
        """Move the largest candidate into the pivot row; fail if it is ~0."""
        n = len(augmented)
        max_row = pivot
        for row in range(pivot + 1, n):
            if abs(augmented[row][pivot]) > abs(augmented[max_row][pivot]):
                max_row = row

        if max_row != pivot:
            augmented[pivot], augmented[max_row] = augmented[max_row], augmented[pivot]
            recorder.record(
                f"Swapped row {pivot + 1} with row {max_row + 1}",
                rf"R_{{{pivot + 1}}} \leftrightarrow R_{{{max_row + 1}}}",
                format_matrix(augmented),
                "",
            )

        if abs(augmented[pivot][pivot]) < SINGULAR_PIVOT_THRESHOLD:
            raise SingularMatrixError(pivot, augmented[pivot][pivot])

    def _subtract_row(self, augmented: Matrix, row: int, pivot: int, factor: float):
        for col in range(pivot, len(augmented) + 1):
            augmented[row][col] -= factor * augmented[pivot][col]

    @abstractmethod
    def _clear_column(self, recorder: StepRecorder, augmented: Matrix, pivot: int):
        """Zero the pivot column outside the pivot row (as the method requires)."""

    @abstractmethod
    def _extract_solution(self, recorder: StepRecorder, augmented: Matrix) -> List[float]:
        """Read the solution vector from the reduced matrix."""


class GaussEliminationSolver(DirectSolver):
    """Forward elimination to upper triangular form, then back substitution."""

    name = "gauss-elimination"

    FINAL_DESCRIPTION = "Final Solution (after back substitution)"

    BACK_SUBSTITUTION_FORMULA = r"x_i = \frac{b_i - \sum_{j > i} a_{ij} x_j}{a_{ii}}"

    def _clear_column(self, recorder, augmented, pivot):
        for row in range(pivot + 1, len(augmented)):
            factor = augmented[row][pivot] / augmented[pivot][pivot]
            self._subtract_row(augmented, row, pivot, factor)
            recorder.record(
                f"Eliminated x{pivot + 1} from equation {row + 1} "
                f"using factor {format_number(factor)}",
                rf"R_{{{row + 1}}} \leftarrow R_{{{row + 1}}} - "
                rf"({format_number(factor)}) R_{{{pivot + 1}}}",
                format_matrix(augmented),
                "",
            )

    def _extract_solution(self, recorder, augmented):
        n = len(augmented)
        solution = [0.0] * n

        for i in range(n - 1, -1, -1):
            total = augmented[i][n]
            terms = []
            for j in range(i + 1, n):
                total -= augmented[i][j] * solution[j]
                terms.append(
                    f" - ({format_number(augmented[i][j])})({format_number(solution[j])})"
                )
            solution[i] = total / augmented[i][i]

            numerator = format_number(augmented[i][n]) + "".join(terms)
            recorder.record(
                f"Back substitution for x{i + 1}",
                self.BACK_SUBSTITUTION_FORMULA,
                rf"x_{{{i + 1}}} = \frac{{{numerator}}}{{{format_number(augmented[i][i])}}}",
                format_number(solution[i]),
            )

        return solution


class GaussJordanSolver(DirectSolver):
    """Reduction to reduced row echelon form; no back substitution."""

    name = "gauss-jordan"

    FINAL_DESCRIPTION = "Final Solution (reduced row echelon form)"

    def _clear_column(self, recorder, augmented, pivot):
        n = len(augmented)
        pivot_value = augmented[pivot][pivot]
        for col in range(pivot, n + 1):
            augmented[pivot][col] /= pivot_value
        recorder.record(
            f"Normalized row {pivot + 1}",
            rf"R_{{{pivot + 1}}} \leftarrow R_{{{pivot + 1}}} / {format_number(pivot_value)}",
            format_matrix(augmented),
            "",
        )

        for row in range(n):
            if row == pivot:
                continue
            factor = augmented[row][pivot]
            self._subtract_row(augmented, row, pivot, factor)
            recorder.record(
                f"Eliminated x{pivot + 1} from equation {row + 1}",
                rf"R_{{{row + 1}}} \leftarrow R_{{{row + 1}}} - "
                rf"({format_number(factor)}) R_{{{pivot + 1}}}",
                format_matrix(augmented),
                "",
            )

    def _extract_solution(self, recorder, augmented):
        n = len(augmented)
        return [row[n] for row in augmented]


# === Iterative methods ===


class IterativeSolver(LinearSystemSolver):
    """
    Fixed-point iteration on a 3x3 system.

    Reaching ``max_iterations`` is not an error: the last pass is
    reported with ``converged=False``. A pass that overflows ends the
    run the same way, keeping the last finite pass.
    """

    VARIABLES = ("x", "y", "z")

    FORMULA = ""

    def compute(
        self,
        matrix: Sequence[Sequence[float]],
        constants: Sequence[float],
        decimal_places: int = 3,
        max_iterations: int = 100,
    ) -> Solution:
        A = as_matrix("matrix", matrix)
        b = as_vector("constants", constants)
        if len(A) != 3 or any(len(row) != 3 for row in A) or len(b) != 3:
            raise DimensionMismatchError(
                "Invalid input. Required 3x3 coefficient matrix and 3x1 constant matrix.",
                rows=len(A),
                cols=max((len(row) for row in A), default=0),
                length=len(b),
            )
        for i in range(3):
            if A[i][i] == 0:
                raise ZeroDiagonalError(i)

        decimal_places = as_count("decimalPlaces", decimal_places)
        max_iterations = as_count("maxIterations", max_iterations, minimum=1)
        tolerance = tolerance_from_decimal_places(decimal_places)

        recorder = StepRecorder()
        if is_diagonally_dominant(A):
            recorder.record(
                "Diagonal Dominance",
                r"\text{Diagonal Dominance Check:}",
                "System is diagonally dominant. Convergence is guaranteed.",
                "",
            )
        else:
            recorder.record(
                "Warning",
                r"\text{Diagonal Dominance Check:}",
                "System is not diagonally dominant. Convergence is not guaranteed.",
                "",
            )

        recorder.record(
            "System of Equations",
            r"\text{Given System:}",
            _aligned(
                [
                    " + ".join(f"{format_number(a)}{name}" for a, name in zip(row, self.VARIABLES))
                    + f" &= {format_number(b_i)}"
                    for row, b_i in zip(A, b)
                ]
            ),
            "",
        )

        values = [0.0, 0.0, 0.0]
        snapshots: List[IterationSnapshot] = []
        table = [("Iteration", "x", "y", "z", "Error")]
        error = float("inf")
        converged = False
        diverged = False
        iteration = 0

        while iteration < max_iterations:
            candidate, lines = self._sweep(A, b, values)
            change = max(abs(new - old) for new, old in zip(candidate, values))
            if not all(math.isfinite(v) for v in candidate + [change]):
                # Overflow: keep the last finite pass as the answer
                diverged = True
                break

            iteration += 1
            values, error = candidate, change

            snapshots.append(IterationSnapshot(iteration, *values, error))
            recorder.record(
                f"Iteration {iteration}",
                self.FORMULA,
                _aligned(lines),
                f"Error = {format_number(error)}",
            )
            table.append(
                (str(iteration),) + tuple(format_number(v) for v in values) + (format_number(error),)
            )

            if error <= tolerance:
                converged = True
                break

        if converged:
            description = f"Converged after {iteration} iterations"
        elif diverged:
            description = f"Diverged after {iteration} iterations"
        else:
            description = f"Stopped after {iteration} iterations without converging"
        recorder.record(
            description,
            r"\text{Final Values:}",
            _aligned(
                [f"{name} &= {format_number(v)}" for name, v in zip(self.VARIABLES, values)]
                + [rf"\text{{Error}} &= {format_number(error)}"]
            ),
            "",
        )

        return Solution(
            title=self.title,
            steps=recorder.steps,
            final_answer=(
                f"Solution: {self._summary(values, self.VARIABLES)} ({iteration} iterations)"
            ),
            method=self.name,
            iteration_table=tuple(table),
            solution=tuple(values),
            iterations=iteration,
            iteration_steps=tuple(snapshots),
            converged=converged,
        )

    def _update(self, A, b, i: int, values: Sequence[float]) -> Tuple[float, str]:
        """Solve equation ``i`` for its own unknown using ``values`` for the rest."""
        total = b[i]
        terms = []
        for j in range(3):
            if j != i:
                total -= A[i][j] * values[j]
                terms.append(f" - ({format_number(A[i][j])})({format_number(values[j])})")
        result = total / A[i][i]

        numerator = format_number(b[i]) + "".join(terms)
        line = (
            rf"{self.VARIABLES[i]} &= \frac{{{numerator}}}{{{format_number(A[i][i])}}}"
            rf" = {format_number(result)}"
        )
        return result, line

    @abstractmethod
    def _sweep(self, A, b, previous: List[float]) -> Tuple[List[float], List[str]]:
        """One pass over all three equations."""


class GaussSeidelSolver(IterativeSolver):
    """Each new value is used immediately within the same pass."""

    name = "gauss-seidel"

    FORMULA = (
        r"x_i^{(k+1)} = \frac{b_i - \sum_{j < i} a_{ij} x_j^{(k+1)} "
        r"- \sum_{j > i} a_{ij} x_j^{(k)}}{a_{ii}}"
    )

    def _sweep(self, A, b, previous):
        values = list(previous)
        lines = []
        for i in range(3):
            values[i], line = self._update(A, b, i, values)
            lines.append(line)
        return values, lines


class JacobiSolver(IterativeSolver):
    """All three values are computed from the previous pass only."""

    name = "jacobi"

    FORMULA = r"x_i^{(k+1)} = \frac{b_i - \sum_{j \ne i} a_{ij} x_j^{(k)}}{a_{ii}}"

    def _sweep(self, A, b, previous):
        values = []
        lines = []
        for i in range(3):
            value, line = self._update(A, b, i, previous)
            values.append(value)
            lines.append(line)
        return values, lines
