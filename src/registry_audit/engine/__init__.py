"""Rule evaluation engine."""

from .comparator import Comparison, classify_expectation, compare
from .evaluator import CheckEvaluator

__all__ = ["CheckEvaluator", "Comparison", "classify_expectation", "compare"]
