"""Input layer: plain-text function parsing and evaluation."""

from .parser import ExpressionEvaluator, evaluate_expression

__all__ = ["ExpressionEvaluator", "evaluate_expression"]
