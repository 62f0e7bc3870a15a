"""Evaluation of stored events against final results."""

from slipsmith.evaluation.engine import EvaluationEngine, classify_result, resolve_actual

__all__ = ["EvaluationEngine", "classify_result", "resolve_actual"]
