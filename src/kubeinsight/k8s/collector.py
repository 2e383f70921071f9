"""Concurrent snapshot collection."""

import asyncio
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..exceptions import DataProviderError
from ..model.config import ProviderSettings
from ..model.report import AnalysisType
from ..model.snapshot import ClusterSnapshot
from ..utils.concurrency import gather_with_concurrency
from ..utils.logger import get_logger
from .provider import ClusterDataProvider

logger = get_logger(__name__)

NODES = "nodes"
PODS = "pods"
DEPLOYMENTS = "deployments"
STATEFULSETS = "statefulsets"
DAEMONSETS = "daemonsets"
EVENTS = "events"
NODE_METRICS = "node metrics"
POD_METRICS = "pod metrics"
VERSION = "version"

NAMESPACED_KINDS = [PODS, DEPLOYMENTS, STATEFULSETS, DAEMONSETS, EVENTS, POD_METRICS]
OPTIONAL_KINDS = {NODE_METRICS, POD_METRICS, VERSION}

ANALYSIS_KINDS: Dict[AnalysisType, Set[str]] = {
    AnalysisType.COST: {NODES, PODS, NODE_METRICS, POD_METRICS},
    AnalysisType.UTILIZATION: {NODES, PODS, NODE_METRICS, POD_METRICS},
    AnalysisType.WORKLOAD: {DEPLOYMENTS, STATEFULSETS, DAEMONSETS, PODS},
    AnalysisType.LOGS: {EVENTS, PODS},
    AnalysisType.RECOMMENDATIONS: {NODES, PODS, NODE_METRICS, POD_METRICS, VERSION},
}


def kinds_for(analyses: Iterable[AnalysisType]) -> Set[str]:
    """Resource kinds needed to run the given analyses."""
    kinds: Set[str] = set()
    for analysis in analyses:
        kinds |= ANALYSIS_KINDS[analysis]
    return kinds


class SnapshotCollector:
    """Builds a ClusterSnapshot with bounded concurrent kubectl calls."""

    def __init__(
        self, provider: ClusterDataProvider, settings: Optional[ProviderSettings] = None
    ):
        self.provider = provider
        self.settings = settings or ProviderSettings()

    def _fetchers(self, since_hours: int) -> Dict[str, Callable[[Optional[str]], Any]]:
        return {
            NODES: lambda ns: self.provider.list_nodes(),
            PODS: self.provider.list_pods,
            DEPLOYMENTS: self.provider.list_deployments,
            STATEFULSETS: self.provider.list_statefulsets,
            DAEMONSETS: self.provider.list_daemonsets,
            EVENTS: lambda ns: self.provider.list_events(ns, since_hours),
            NODE_METRICS: lambda ns: self.provider.get_node_usage(),
            POD_METRICS: self.provider.get_pod_usage,
            VERSION: lambda ns: self.provider.get_server_version(),
        }

    async def collect(
        self,
        analyses: Optional[Iterable[AnalysisType]] = None,
        namespaces: Optional[List[str]] = None,
        since_hours: Optional[int] = None,
    ) -> ClusterSnapshot:
        """Fetch everything the given analyses need.

        With an explicit namespace list, namespaced kinds are fetched once per
        namespace; a namespace that fails is skipped with a warning unless
        every namespace failed. Metrics and version failures never abort.
        """
        kinds = kinds_for(analyses if analyses is not None else list(AnalysisType))
        window = since_hours or self.settings.event_window_hours
        fetchers = self._fetchers(window)

        calls: List[Tuple[str, Optional[str]]] = []
        for kind in sorted(kinds):
            if namespaces and kind in NAMESPACED_KINDS:
                calls.extend((kind, ns) for ns in namespaces)
            else:
                calls.append((kind, None))

        logger.info(
            f"Collecting {', '.join(sorted(kinds))} with {len(calls)} calls "
            f"(max {self.settings.max_concurrency} concurrent)"
        )
        results = await gather_with_concurrency(
            [asyncio.to_thread(fetchers[kind], ns) for kind, ns in calls],
            max_concurrency=self.settings.max_concurrency,
        )

        data: Dict[str, Any] = {}
        failures: Dict[str, List[Exception]] = defaultdict(list)
        warnings: List[str] = []
        for (kind, ns), result in zip(calls, results):
            if isinstance(result, Exception):
                if not isinstance(result, DataProviderError):
                    raise result
                failures[kind].append(result)
                if ns is not None:
                    warnings.append(f"Skipped namespace {ns}: {result.message}")
                    logger.warning(f"Skipping namespace {ns}: {result.message}")
                continue

            if kind == VERSION:
                data[kind] = result
            else:
                data.setdefault(kind, []).extend(result)

        for kind, errors in failures.items():
            if not ns_failed_everywhere(kind, errors, namespaces):
                continue
            if kind not in OPTIONAL_KINDS:
                raise errors[0]
            data.pop(kind, None)
            warnings.append(f"{kind} unavailable: {errors[0].message}")
            logger.warning(f"{kind} unavailable: {errors[0].message}")

        return ClusterSnapshot(
            captured_at=self.provider.clock(),
            server_version=data.get(VERSION),
            nodes=data.get(NODES, []),
            pods=data.get(PODS, []),
            deployments=data.get(DEPLOYMENTS, []),
            statefulsets=data.get(STATEFULSETS, []),
            daemonsets=data.get(DAEMONSETS, []),
            events=data.get(EVENTS, []),
            node_usage=data.get(NODE_METRICS),
            pod_usage=data.get(POD_METRICS),
            warnings=warnings,
        )

    def collect_sync(
        self,
        analyses: Optional[Iterable[AnalysisType]] = None,
        namespaces: Optional[List[str]] = None,
        since_hours: Optional[int] = None,
    ) -> ClusterSnapshot:
        return asyncio.run(self.collect(analyses, namespaces, since_hours))


def ns_failed_everywhere(
    kind: str, errors: List[Exception], namespaces: Optional[List[str]]
) -> bool:
    """Whether a kind failed in every call made for it."""
    if namespaces and kind in NAMESPACED_KINDS:
        return len(errors) >= len(namespaces)
    return bool(errors)
