"""
Step recording for numerical methods.

Every solver records its trace through a StepRecorder so that traces are
structurally identical regardless of method.
"""

from decimal import Decimal, ROUND_DOWN, localcontext
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..models import Step
from ..utils.constants import DISPLAY_PRECISION


def create_step(
    index: int,
    description: str,
    formula: str,
    calculation: str,
    result: Optional[Union[str, float]] = None,
) -> Step:
    """
    Create a solution step.

    Args:
        index: Sequential step number, starting at 1
        description: Human-readable description, e.g. "Iteration 2"
        formula: LaTeX formula template
        calculation: The formula with the current values substituted
        result: Optional intermediate result

    Returns:
        Step object
    """
    return Step(
        index=index,
        description=description,
        formula=formula,
        calculation=calculation,
        result=result,
    )


class StepRecorder:
    """
    Append-only sequence of steps for one solve call.

    Indices are assigned on append, so a trace always runs 1..n
    without gaps.

    Usage:
        recorder = StepRecorder()
        recorder.record("Iteration 1", r"c = \\frac{a + b}{2}", "c = 1.5")
        solution_steps = recorder.steps
    """

    def __init__(self):
        self._steps: List[Step] = []

    def record(
        self,
        description: str,
        formula: str,
        calculation: str,
        result: Optional[Union[str, float]] = None,
    ) -> Step:
        """Append a new step and return it."""
        step = create_step(len(self._steps) + 1, description, formula, calculation, result)
        self._steps.append(step)
        return step

    @property
    def steps(self) -> Tuple[Step, ...]:
        """Snapshot of the recorded steps."""
        return tuple(self._steps)

    def __len__(self) -> int:
        return len(self._steps)


def format_number(value: float, precision: int = DISPLAY_PRECISION) -> str:
    """
    Format a number in fixed-point notation.

    ``-0.000000`` is normalised to ``0.000000``.
    """
    text = f"{value:.{precision}f}"
    if text.startswith("-") and float(text) == 0:
        text = text[1:]
    return text


def truncate_decimals(value: float, decimal_places: int) -> str:
    """Cut (not round) a number to the given decimal places."""
    exact = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-decimal_places)
    with localcontext() as ctx:
        # Room for every integer digit plus the kept decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + decimal_places + 2)
        truncated = exact.quantize(quantum, rounding=ROUND_DOWN)
    if truncated == 0:
        truncated = abs(truncated)
    return str(truncated)


def format_matrix(rows: Iterable[Sequence[float]]) -> str:
    """Render a matrix as a LaTeX bmatrix."""
    body = r" \\ ".join(" & ".join(format_number(v) for v in row) for row in rows)
    return rf"\begin{{bmatrix}} {body} \end{{bmatrix}}"


def format_step_text(step: Step) -> str:
    """
    Format a step for plain text display.
    """
    text = f"Step {step.index}: {step.description}\n    {step.formula}\n    {step.calculation}"
    if step.result not in (None, ""):
        text += f"\n    {step.result}"
    return text


def steps_to_text(steps: Sequence[Step]) -> str:
    """
    Convert all steps to plain text.
    """
    return "\n\n".join(format_step_text(s) for s in steps)
