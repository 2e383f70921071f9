"""Monthly cost estimation and waste detection."""

from collections import defaultdict
from typing import Dict, List, Optional

from ..model.config import CostThresholds, PricingConfig
from ..model.cost import (
    CostAnalysis,
    CostOptimization,
    EfficiencyTier,
    NamespaceCost,
    NodeCost,
    Priority,
    UnderutilizedResource,
)
from ..model.snapshot import ClusterSnapshot, PodState, UsageSample
from ..model.utilization import ResourceUtilization
from ..utils.formatting import format_bytes, format_cpu, safe_percent
from ..utils.logger import get_logger
from .utilization import UtilizationAnalyzer

logger = get_logger(__name__)


class CostEstimator:
    """Estimates what the cluster costs per month and where money is wasted."""

    def __init__(
        self,
        pricing: Optional[PricingConfig] = None,
        thresholds: Optional[CostThresholds] = None,
        utilization_analyzer: Optional[UtilizationAnalyzer] = None,
    ):
        self.pricing = pricing or PricingConfig()
        self.thresholds = thresholds or CostThresholds()
        self.utilization_analyzer = utilization_analyzer or UtilizationAnalyzer(self.thresholds)

    def analyze(
        self,
        snapshot: ClusterSnapshot,
        utilization: Optional[List[ResourceUtilization]] = None,
    ) -> CostAnalysis:
        """Build the cost report for a snapshot.

        Pass ``utilization`` to reuse results already computed for the same
        snapshot.
        """
        if utilization is None:
            utilization = self.utilization_analyzer.analyze(snapshot)

        node_costs = self.node_costs(snapshot)
        namespace_costs = self.namespace_costs(snapshot.pods)
        underutilized = self.underutilized_resources(utilization)
        optimizations = self.optimizations(node_costs, namespace_costs, underutilized)

        total = sum(node.monthly_cost for node in node_costs)
        logger.info(
            f"Estimated monthly cost ${total:.2f} across {len(node_costs)} nodes, "
            f"{len(underutilized)} underutilized pods"
        )

        return CostAnalysis(
            total_monthly_cost=total,
            node_costs=node_costs,
            namespace_costs=namespace_costs,
            underutilized_resources=underutilized,
            cost_optimizations=optimizations,
        )

    def node_costs(self, snapshot: ClusterSnapshot) -> List[NodeCost]:
        usage: Dict[str, UsageSample] = {}
        if snapshot.node_usage is not None:
            usage = {sample.name: sample for sample in snapshot.node_usage}

        costs = []
        for node in snapshot.nodes:
            cpu_percent = memory_percent = None
            sample = usage.get(node.name)
            if sample is not None:
                cpu_percent = safe_percent(sample.cpu_milli, node.cpu_capacity_milli)
                memory_percent = safe_percent(sample.memory_bytes, node.memory_capacity_bytes)

            costs.append(
                NodeCost(
                    name=node.name,
                    instance_type=node.instance_type,
                    monthly_cost=self.pricing.node_monthly_cost(node.instance_type),
                    cpu_capacity=format_cpu(node.cpu_capacity_milli),
                    memory_capacity=format_bytes(node.memory_capacity_bytes),
                    cpu_utilization=cpu_percent,
                    memory_utilization=memory_percent,
                    efficiency=self.efficiency(cpu_percent, memory_percent),
                )
            )
        return costs

    def efficiency(
        self, cpu_percent: Optional[float], memory_percent: Optional[float]
    ) -> EfficiencyTier:
        """Tier of the average of CPU and memory utilization."""
        if cpu_percent is None or memory_percent is None:
            return EfficiencyTier.NO_METRICS

        average = (cpu_percent + memory_percent) / 2
        if average > self.thresholds.efficiency_excellent:
            return EfficiencyTier.EXCELLENT
        if average > self.thresholds.efficiency_good:
            return EfficiencyTier.GOOD
        if average > self.thresholds.efficiency_fair:
            return EfficiencyTier.FAIR
        return EfficiencyTier.POOR

    def namespace_costs(self, pods: List[PodState]) -> List[NamespaceCost]:
        """Cost of the requests in each namespace, most expensive first."""
        by_namespace: Dict[str, List[PodState]] = defaultdict(list)
        for pod in pods:
            if self.pricing.is_excluded(pod.namespace):
                continue
            by_namespace[pod.namespace].append(pod)

        costs = []
        for namespace, members in by_namespace.items():
            cpu = sum(pod.cpu_request_milli or 0 for pod in members)
            memory = sum(pod.memory_request_bytes or 0 for pod in members)
            monthly_cost = self.pricing.request_cost(cpu, memory)

            costs.append(
                NamespaceCost(
                    name=namespace,
                    monthly_cost=monthly_cost,
                    cpu_requests=format_cpu(cpu),
                    memory_requests=format_bytes(memory),
                    pods_count=len(members),
                    cost_per_pod=monthly_cost / len(members) if members else 0.0,
                )
            )

        costs.sort(key=lambda ns: (-ns.monthly_cost, ns.name))
        return costs

    def underutilized_resources(
        self, utilization: List[ResourceUtilization]
    ) -> List[UnderutilizedResource]:
        """Pods whose CPU and memory usage are both below the threshold."""
        low = self.thresholds.underutilized_percent
        aggressive = self.thresholds.aggressive_rightsizing_percent

        resources = []
        for entry in utilization:
            if not (entry.has_cpu_request and entry.has_memory_request):
                continue
            if entry.cpu_utilization >= low or entry.memory_utilization >= low:
                continue

            cpu_waste = max(0, entry.cpu_request_milli - entry.cpu_usage_milli)
            memory_waste = max(0, entry.memory_request_bytes - entry.memory_usage_bytes)

            if entry.cpu_utilization < aggressive and entry.memory_utilization < aggressive:
                recommendation = "Consider reducing requests by 50-70%"
            else:
                recommendation = "Consider reducing requests by 30-50%"

            resources.append(
                UnderutilizedResource(
                    name=entry.name,
                    namespace=entry.namespace,
                    cpu_waste=format_cpu(cpu_waste),
                    memory_waste=format_bytes(memory_waste),
                    cpu_waste_milli=cpu_waste,
                    memory_waste_bytes=memory_waste,
                    estimated_monthly_savings=self.pricing.request_cost(cpu_waste, memory_waste),
                    recommendation=recommendation,
                )
            )

        resources.sort(key=lambda r: (-r.estimated_monthly_savings, r.namespace, r.name))
        return resources

    def optimizations(
        self,
        node_costs: List[NodeCost],
        namespace_costs: List[NamespaceCost],
        underutilized: List[UnderutilizedResource],
    ) -> List[CostOptimization]:
        """Cluster-wide saving actions, the monitoring reminder always last."""
        optimizations = []

        wasted = sum(r.estimated_monthly_savings for r in underutilized)
        if wasted > self.thresholds.rightsizing_savings_minimum:
            optimizations.append(
                CostOptimization(
                    type="Resource Rightsizing",
                    description=(
                        f"Reduce resource requests for {len(underutilized)} "
                        "underutilized workloads"
                    ),
                    potential_savings=wasted,
                    priority=Priority.HIGH,
                    action="Review and adjust CPU/Memory requests for underutilized pods",
                )
            )

        idle = self.thresholds.idle_node_percent
        idle_nodes = [
            node
            for node in node_costs
            if node.cpu_utilization is not None
            and node.memory_utilization is not None
            and node.cpu_utilization < idle
            and node.memory_utilization < idle
        ]
        if idle_nodes and len(node_costs) > 1:
            ratio = self.thresholds.consolidation_savings_ratio
            optimizations.append(
                CostOptimization(
                    type="Node Consolidation",
                    description=f"Consolidate workloads from {len(idle_nodes)} underutilized nodes",
                    potential_savings=sum(node.monthly_cost * ratio for node in idle_nodes),
                    priority=Priority.MEDIUM,
                    action="Consider using node affinity to consolidate workloads",
                )
            )

        expensive = [
            ns for ns in namespace_costs if ns.monthly_cost > self.thresholds.expensive_namespace_cost
        ]
        if expensive:
            optimizations.append(
                CostOptimization(
                    type="Namespace Optimization",
                    description=f"Review resource allocation in {len(expensive)} high-cost namespaces",
                    priority=Priority.MEDIUM,
                    action="Implement resource quotas and limits in expensive namespaces",
                )
            )

        optimizations.append(
            CostOptimization(
                type="Monitoring",
                description="Set up cost monitoring and alerting",
                priority=Priority.LOW,
                action="Implement resource usage monitoring and cost alerts",
            )
        )
        return optimizations
