"""Runs the requested analyzers over a snapshot and joins their results."""

import asyncio
from datetime import datetime, timezone
from typing import Iterable, Optional, Set

from ..model.config import InsightConfig
from ..model.report import AnalysisType, InsightReport
from ..model.snapshot import ClusterSnapshot
from ..utils.logger import get_logger
from .cost import CostEstimator
from .events import EventClassifier
from .health import WorkloadHealthScorer
from .recommendations import RecommendationAggregator
from .utilization import UtilizationAnalyzer

logger = get_logger(__name__)

ALL_ANALYSES = frozenset(AnalysisType)

# Analyses whose inputs include pod utilization
NEEDS_UTILIZATION = {AnalysisType.UTILIZATION, AnalysisType.COST, AnalysisType.RECOMMENDATIONS}


class InsightEngine:
    """Pure computation from a ClusterSnapshot to an InsightReport.

    The engine performs no I/O. Independent analyzers run concurrently in
    worker threads; cost waits for utilization and recommendations wait
    for both.
    """

    def __init__(self, config: Optional[InsightConfig] = None):
        self.config = config or InsightConfig()
        self.utilization_analyzer = UtilizationAnalyzer(self.config.thresholds)
        self.cost_estimator = CostEstimator(
            self.config.pricing, self.config.thresholds, self.utilization_analyzer
        )
        self.health_scorer = WorkloadHealthScorer()
        self.event_classifier = EventClassifier(self.config.events)
        self.recommendation_aggregator = RecommendationAggregator()

    def run(
        self,
        snapshot: ClusterSnapshot,
        analyses: Optional[Iterable[AnalysisType]] = None,
        cluster_context: Optional[str] = None,
    ) -> InsightReport:
        """Synchronous entry point."""
        return asyncio.run(self.run_async(snapshot, analyses, cluster_context))

    async def run_async(
        self,
        snapshot: ClusterSnapshot,
        analyses: Optional[Iterable[AnalysisType]] = None,
        cluster_context: Optional[str] = None,
    ) -> InsightReport:
        requested: Set[AnalysisType] = set(analyses) if analyses is not None else set(ALL_ANALYSES)
        logger.info(f"Running analyses: {', '.join(sorted(a.value for a in requested))}")

        async def skip():
            return None

        def when(kind, func, *args):
            if kind in requested:
                return asyncio.to_thread(func, *args)
            return skip()

        utilization_needed = bool(requested & NEEDS_UTILIZATION)
        utilization, workload, logs, pod_summaries, node_metrics, cluster_metrics = (
            await asyncio.gather(
                asyncio.to_thread(self.utilization_analyzer.analyze, snapshot)
                if utilization_needed
                else skip(),
                when(AnalysisType.WORKLOAD, self.health_scorer.analyze, snapshot),
                when(AnalysisType.LOGS, self.event_classifier.analyze, snapshot.events),
                when(
                    AnalysisType.LOGS,
                    self.event_classifier.pod_summaries,
                    snapshot.pods,
                    snapshot.events,
                ),
                when(AnalysisType.UTILIZATION, self.utilization_analyzer.node_metrics, snapshot),
                when(AnalysisType.UTILIZATION, self.utilization_analyzer.cluster_metrics, snapshot),
            )
        )

        cost = None
        if AnalysisType.COST in requested or AnalysisType.RECOMMENDATIONS in requested:
            cost = await asyncio.to_thread(self.cost_estimator.analyze, snapshot, utilization)

        recommendations = []
        if AnalysisType.RECOMMENDATIONS in requested:
            recommendations = await asyncio.to_thread(
                self.recommendation_aggregator.aggregate, snapshot, cost, utilization
            )

        return InsightReport(
            generated_at=datetime.now(timezone.utc),
            cluster_context=cluster_context,
            server_version=snapshot.server_version,
            cost=cost if AnalysisType.COST in requested else None,
            workload=workload,
            logs=logs,
            pod_log_summaries=pod_summaries or [],
            utilization=(utilization or []) if AnalysisType.UTILIZATION in requested else [],
            node_metrics=node_metrics or [],
            cluster_metrics=cluster_metrics,
            recommendations=recommendations,
            warnings=list(snapshot.warnings),
        )
