"""
Centralized error handling for numsteps.

Provides a hierarchy of custom exceptions with user-friendly messages,
suggestions for fixes, and error recovery hints.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, List


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    INFO = auto()  # Informational, operation may have partially succeeded
    WARNING = auto()  # Non-fatal, can continue with degraded functionality
    ERROR = auto()  # Operation failed, but can retry
    CRITICAL = auto()  # Unrecoverable error


@dataclass
class ErrorContext:
    """
    Rich context for error reporting.

    Provides user-friendly information beyond the raw exception.
    """

    title: str  # Short title for notification
    message: str  # User-friendly message
    technical_details: Optional[str]  # Debug info
    suggestions: List[str]  # Actionable suggestions
    severity: ErrorSeverity
    recoverable: bool = True  # Can user retry?

    @classmethod
    def from_exception(cls, exc: Exception, context: str = "") -> "ErrorContext":
        """Create ErrorContext from any exception."""
        exc_type = type(exc).__name__
        exc_msg = str(exc)

        if isinstance(exc, NumericalMethodError):
            return exc.to_context()

        if isinstance(exc, ArithmeticError):
            return cls(
                title="Arithmetic Error",
                message="The computation produced an invalid number.",
                technical_details=f"{exc_type}: {exc_msg}",
                suggestions=[
                    "Use smaller input values",
                    "Choose a different starting point or interval",
                ],
                severity=ErrorSeverity.ERROR,
            )

        # Generic fallback
        return cls(
            title="Error",
            message=f"An unexpected error occurred: {exc_msg}",
            technical_details=f"{exc_type}: {exc_msg}\nContext: {context}",
            suggestions=["Try again"],
            severity=ErrorSeverity.ERROR,
        )


class NumericalMethodError(Exception):
    """
    Base exception for all numsteps errors.

    Subclasses provide rich error context for user-friendly reporting.
    """

    default_title = "Error"
    default_suggestions: List[str] = []
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        *,
        suggestions: Optional[List[str]] = None,
        technical_details: Optional[str] = None,
        severity: Optional[ErrorSeverity] = None,
    ):
        super().__init__(message)
        self.user_message = message
        self.suggestions = suggestions or self.default_suggestions.copy()
        self.technical_details = technical_details
        self.severity = severity or self.default_severity

    def to_context(self) -> ErrorContext:
        """Convert to ErrorContext for display."""
        return ErrorContext(
            title=self.default_title,
            message=self.user_message,
            technical_details=self.technical_details,
            suggestions=self.suggestions,
            severity=self.severity,
            recoverable=self.severity != ErrorSeverity.CRITICAL,
        )


# === Input Errors ===


class InvalidInputError(NumericalMethodError):
    """Raised when method parameters are missing or malformed."""

    default_title = "Invalid Input"
    default_suggestions = [
        "Check that every required field is filled in",
        "Use plain numbers for bounds, guesses and matrix entries",
    ]


class DimensionMismatchError(InvalidInputError):
    """Raised when a matrix and constants vector do not fit together."""

    default_title = "Dimension Mismatch"

    def __init__(self, message: str, *, rows: int = 0, cols: int = 0, length: int = 0):
        super().__init__(
            message,
            suggestions=[
                "The coefficient matrix must be square",
                "Provide one constant per equation",
            ],
            technical_details=f"A is {rows}x{cols}, b has {length} entries",
        )
        self.rows = rows
        self.cols = cols
        self.length = length


class InvalidInitialGuessError(InvalidInputError):
    """Raised when the two secant starting points coincide."""

    default_title = "Invalid Initial Guess"

    def __init__(self, x0: float, x1: float):
        super().__init__(
            f"x0 and x1 cannot be the same (both are {x0})",
            suggestions=["Pick two different starting points near the root"],
        )
        self.x0 = x0
        self.x1 = x1


class UnknownMethodError(InvalidInputError):
    """Raised when the dispatcher is asked for a method it does not know."""

    default_title = "Unknown Method"

    def __init__(self, method: str, available: Optional[List[str]] = None):
        available = available or []
        super().__init__(
            f"Method '{method}' is not implemented",
            suggestions=[f"Available methods: {', '.join(available)}"]
            if available
            else None,
        )
        self.method = method


class ExpressionError(NumericalMethodError):
    """Raised when a function expression cannot be parsed or evaluated."""

    default_title = "Expression Error"
    default_suggestions = [
        "Use x as the variable, e.g. 'x^3 - 2x - 5'",
        "Use ^ for powers and standard names like sin, cos, exp, log",
        "Check that the function is defined at the given points",
    ]

    def __init__(self, message: str, *, expression: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.expression = expression


# === Solver Errors ===


class NoRootInIntervalError(NumericalMethodError):
    """Raised when f(a) and f(b) do not have opposite signs."""

    default_title = "No Root in Interval"
    default_severity = ErrorSeverity.WARNING

    def __init__(self, a: float, b: float, fa: float, fb: float):
        super().__init__(
            f"Root does not exist within the interval [{a}, {b}]",
            suggestions=[
                "Choose bounds where f(a) and f(b) have opposite signs",
                "Plot the function to locate a sign change",
            ],
            technical_details=f"f({a}) = {fa}, f({b}) = {fb}",
        )
        self.a = a
        self.b = b
        self.fa = fa
        self.fb = fb


class NumericalDegeneracyError(NumericalMethodError):
    """Base for numeric breakdowns detected in the middle of an algorithm."""

    default_title = "Numerical Breakdown"


class SingularMatrixError(NumericalDegeneracyError):
    """Raised when a pivot is (numerically) zero."""

    default_title = "Singular Matrix"
    default_suggestions = [
        "Check for rows that are multiples of each other",
        "A singular system has no unique solution",
    ]

    def __init__(self, column: int, pivot: float):
        super().__init__(
            "Matrix is singular. No unique solution exists.",
            technical_details=f"Pivot in column {column + 1} is {pivot!r}",
        )
        self.column = column


class DegenerateIntervalError(NumericalDegeneracyError):
    """Raised when false position sees f(a) == f(b)."""

    default_title = "Degenerate Interval"
    default_suggestions = ["Choose a narrower interval around the root"]


class ZeroDiagonalError(NumericalDegeneracyError):
    """Raised when an iterative solver meets a zero diagonal entry."""

    default_title = "Zero Diagonal"
    default_suggestions = [
        "Reorder the equations so no diagonal coefficient is 0",
    ]

    def __init__(self, row: int):
        super().__init__(
            "Diagonal elements cannot be 0.",
            technical_details=f"A[{row}][{row}] == 0",
        )
        self.row = row


class ZeroDerivativeError(NumericalDegeneracyError):
    """Raised when Newton-Raphson hits a flat point."""

    default_title = "Zero Derivative"
    default_suggestions = ["Start from a point where the slope is not zero"]

    def __init__(self, x: float):
        super().__init__(
            "Derivative is 0.",
            technical_details=f"f'({x}) == 0",
        )
        self.x = x


class DivisionByZeroError(NumericalDegeneracyError):
    """Raised when the secant denominator f(x1) - f(x0) vanishes."""

    default_title = "Division by Zero"
    default_suggestions = ["Pick starting points with different function values"]


class MaxIterationsExceededError(NumericalMethodError):
    """Raised when a method fails to converge within its iteration cap."""

    default_title = "Did Not Converge"
    default_severity = ErrorSeverity.WARNING
    default_suggestions = [
        "Increase the maximum number of iterations",
        "Start closer to the root",
        "Request fewer decimal places",
    ]

    def __init__(self, max_iterations: int, method: str = ""):
        super().__init__(
            "Max iterations reached without solution.",
            technical_details=f"{method} stopped after {max_iterations} iterations"
            if method
            else None,
        )
        self.max_iterations = max_iterations


# === Utility functions ===


def format_error_for_user(exc: Exception, context: str = "") -> str:
    """
    Format an exception into a user-friendly string.

    Returns a single string suitable for a status line or notification.
    """
    ctx = ErrorContext.from_exception(exc, context)

    result = ctx.message
    if ctx.suggestions:
        result += f" Try: {ctx.suggestions[0]}"

    return result


def format_error_details(exc: Exception, context: str = "") -> dict:
    """
    Format an exception into a dict for a detailed error notification.

    Returns dict with 'title', 'text', 'detailed_text', 'severity' keys.
    """
    ctx = ErrorContext.from_exception(exc, context)

    detailed_parts = []
    if ctx.suggestions:
        detailed_parts.append("Suggestions:")
        for i, sugg in enumerate(ctx.suggestions, 1):
            detailed_parts.append(f"  {i}. {sugg}")
    if ctx.technical_details:
        detailed_parts.append("")
        detailed_parts.append("Technical details:")
        detailed_parts.append(ctx.technical_details)

    return {
        "title": ctx.title,
        "text": ctx.message,
        "detailed_text": "\n".join(detailed_parts) if detailed_parts else None,
        "severity": ctx.severity.name.lower(),
    }
