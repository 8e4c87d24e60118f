"""
Architect Agent - Scoring and result aggregation.
"""
from .scorer import Scorer
from .aggregator import ResultAggregator

__all__ = ["Scorer", "ResultAggregator"]
