"""Cluster insight analyzers."""

from .cost import CostEstimator
from .engine import InsightEngine
from .events import EventClassifier
from .health import WorkloadHealthScorer, determine_health_status
from .recommendations import RecommendationAggregator, filter_recommendations
from .reporter import InsightReporter
from .utilization import UtilizationAnalyzer

__all__ = [
    "CostEstimator",
    "InsightEngine",
    "EventClassifier",
    "WorkloadHealthScorer",
    "determine_health_status",
    "RecommendationAggregator",
    "filter_recommendations",
    "InsightReporter",
    "UtilizationAnalyzer",
]
