"""Utilization analysis of live usage against declared requests and capacity."""

from typing import Dict, List, Optional, Tuple

from ..model.config import CostThresholds
from ..model.snapshot import ClusterSnapshot, PodState, UsageSample
from ..model.utilization import (
    ClusterMetrics,
    NodeMetrics,
    ResourceUtilization,
    UtilizationVerdict,
)
from ..utils.formatting import format_bytes, format_cpu, safe_percent
from ..utils.logger import get_logger

logger = get_logger(__name__)

VERDICT_TEXT = {
    UtilizationVerdict.UNDERUTILIZED: "Consider reducing resource requests - underutilized",
    UtilizationVerdict.OVERUTILIZED: "Consider increasing resource requests - overutilized",
    UtilizationVerdict.OPTIMAL: "Resource allocation looks good",
}
NO_REQUESTS_TEXT = "No resource requests defined - define CPU and memory requests"


def request_percent(usage: int, request: Optional[int]) -> float:
    """Usage as a percentage of a request, 0 when no request is declared."""
    if not request:
        return 0.0
    return usage / request * 100


class UtilizationAnalyzer:
    """Compares pod usage samples with requests and node usage with capacity."""

    def __init__(self, thresholds: Optional[CostThresholds] = None):
        self.thresholds = thresholds or CostThresholds()

    def analyze(self, snapshot: ClusterSnapshot) -> List[ResourceUtilization]:
        """Return one utilization entry per pod that has a usage sample."""
        if snapshot.pod_usage is None:
            logger.info("Pod metrics unavailable, skipping utilization analysis")
            return []

        pods: Dict[Tuple[str, str], PodState] = {
            (pod.namespace, pod.name): pod for pod in snapshot.pods
        }

        results = []
        for sample in snapshot.pod_usage:
            pod = pods.get((sample.namespace or "", sample.name))
            if pod is None:
                logger.debug(f"No pod found for usage sample {sample.namespace}/{sample.name}")
                continue
            results.append(self.evaluate(pod, sample))

        logger.info(f"Analyzed utilization of {len(results)} pods")
        return results

    def evaluate(self, pod: PodState, sample: UsageSample) -> ResourceUtilization:
        """Compute utilization of a single pod."""
        cpu_request = pod.cpu_request_milli
        memory_request = pod.memory_request_bytes
        cpu_percent = request_percent(sample.cpu_milli, cpu_request)
        memory_percent = request_percent(sample.memory_bytes, memory_request)

        verdict = self.classify(cpu_percent, memory_percent, cpu_request, memory_request)
        if cpu_request is None and memory_request is None:
            recommendation = NO_REQUESTS_TEXT
        else:
            recommendation = VERDICT_TEXT[verdict]

        return ResourceUtilization(
            name=pod.name,
            namespace=pod.namespace,
            cpu_usage_milli=sample.cpu_milli,
            memory_usage_bytes=sample.memory_bytes,
            cpu_request_milli=cpu_request,
            memory_request_bytes=memory_request,
            cpu_utilization=cpu_percent,
            memory_utilization=memory_percent,
            verdict=verdict,
            recommendation=recommendation,
        )

    def classify(
        self,
        cpu_percent: float,
        memory_percent: float,
        cpu_request: Optional[int] = 1,
        memory_request: Optional[int] = 1,
    ) -> UtilizationVerdict:
        """Bucket a pod into exactly one verdict.

        A resource without a request can make a pod neither under- nor
        overutilized.
        """
        low = self.thresholds.underutilized_percent
        high = self.thresholds.overutilized_percent
        has_cpu = bool(cpu_request)
        has_memory = bool(memory_request)

        if has_cpu and has_memory and cpu_percent < low and memory_percent < low:
            return UtilizationVerdict.UNDERUTILIZED
        if (has_cpu and cpu_percent > high) or (has_memory and memory_percent > high):
            return UtilizationVerdict.OVERUTILIZED
        return UtilizationVerdict.OPTIMAL

    def node_metrics(self, snapshot: ClusterSnapshot) -> List[NodeMetrics]:
        """Usage of every node that reported a sample."""
        if snapshot.node_usage is None:
            return []

        usage = {sample.name: sample for sample in snapshot.node_usage}
        metrics = []
        for node in snapshot.nodes:
            sample = usage.get(node.name)
            if sample is None:
                continue

            metrics.append(
                NodeMetrics(
                    name=node.name,
                    status="Ready" if node.ready else "NotReady",
                    cpu_usage=format_cpu(sample.cpu_milli),
                    memory_usage=format_bytes(sample.memory_bytes),
                    cpu_capacity=format_cpu(node.cpu_capacity_milli),
                    memory_capacity=format_bytes(node.memory_capacity_bytes),
                    cpu_usage_percent=safe_percent(sample.cpu_milli, node.cpu_capacity_milli),
                    memory_usage_percent=safe_percent(
                        sample.memory_bytes, node.memory_capacity_bytes
                    ),
                )
            )
        return metrics

    def cluster_metrics(self, snapshot: ClusterSnapshot) -> Optional[ClusterMetrics]:
        """Cluster-wide usage totals, None when node metrics are unavailable."""
        if snapshot.node_usage is None:
            return None

        cpu_usage = sum(sample.cpu_milli for sample in snapshot.node_usage)
        memory_usage = sum(sample.memory_bytes for sample in snapshot.node_usage)
        cpu_capacity = sum(node.cpu_capacity_milli for node in snapshot.nodes)
        memory_capacity = sum(node.memory_capacity_bytes for node in snapshot.nodes)

        return ClusterMetrics(
            total_cpu_usage=format_cpu(cpu_usage),
            total_memory_usage=format_bytes(memory_usage),
            total_cpu_capacity=format_cpu(cpu_capacity),
            total_memory_capacity=format_bytes(memory_capacity),
            cpu_usage_percent=safe_percent(cpu_usage, cpu_capacity),
            memory_usage_percent=safe_percent(memory_usage, memory_capacity),
            nodes_count=len(snapshot.nodes),
            pods_count=len(snapshot.pods),
            namespaces_count=len(snapshot.namespaces),
        )
