"""Recommendation aggregation across cost, utilization and cluster state."""

import re
from typing import List, Optional, Tuple

from ..model.cost import CostAnalysis, Priority
from ..model.recommendation import Recommendation
from ..model.snapshot import ClusterSnapshot
from ..model.utilization import ResourceUtilization, UtilizationVerdict
from ..utils.logger import get_logger

logger = get_logger(__name__)

MIN_NODES = 3
MAX_PODS_PER_NODE = 50
HIGH_RESTART_COUNT = 10
MIN_SUPPORTED_MINOR = 25
MIN_CURRENT_MINOR = 27

PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def parse_version(version_string: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse a Kubernetes version string into (major, minor)."""
    if not version_string:
        return None
    match = re.match(r"v?(\d+)\.(\d+)", version_string)
    if match:
        return int(match.group(1)), int(match.group(2))
    return None


class RecommendationAggregator:
    """Collects prioritized recommendations from every analysis."""

    def aggregate(
        self,
        snapshot: ClusterSnapshot,
        cost: Optional[CostAnalysis] = None,
        utilization: Optional[List[ResourceUtilization]] = None,
    ) -> List[Recommendation]:
        recommendations: List[Recommendation] = []
        if cost is not None:
            recommendations.extend(self.from_cost(cost))
        if utilization:
            recommendations.extend(self.from_utilization(utilization))
        recommendations.extend(self.from_nodes(snapshot))
        recommendations.extend(self.from_pods(snapshot))
        recommendations.extend(self.from_metrics(snapshot))
        recommendations.extend(self.from_version(snapshot.server_version))

        # sorted() is stable, so emission order is kept within a tier
        recommendations = sorted(recommendations, key=lambda r: PRIORITY_ORDER[r.severity])
        logger.info(f"Generated {len(recommendations)} recommendations")
        return recommendations

    def from_cost(self, cost: CostAnalysis) -> List[Recommendation]:
        return [
            Recommendation(
                type="Cost",
                severity=optimization.priority,
                title=optimization.type,
                description=optimization.description,
                action=optimization.action,
            )
            for optimization in cost.cost_optimizations
            if optimization.type != "Monitoring"
        ]

    def from_utilization(self, utilization: List[ResourceUtilization]) -> List[Recommendation]:
        underutilized = sum(1 for u in utilization if u.verdict == UtilizationVerdict.UNDERUTILIZED)
        overutilized = sum(1 for u in utilization if u.verdict == UtilizationVerdict.OVERUTILIZED)

        recommendations = []
        if overutilized:
            recommendations.append(
                Recommendation(
                    type="Resource",
                    severity=Priority.HIGH,
                    title="Overutilized Pods",
                    description=f"{overutilized} pods use more than 90% of their requests.",
                    action="Increase CPU/memory requests or scale out the affected workloads.",
                )
            )
        if underutilized:
            recommendations.append(
                Recommendation(
                    type="Resource",
                    severity=Priority.MEDIUM,
                    title="Underutilized Pods",
                    description=f"{underutilized} pods use less than 20% of their requests.",
                    action="Reduce CPU/memory requests to free capacity.",
                )
            )
        return recommendations

    def from_nodes(self, snapshot: ClusterSnapshot) -> List[Recommendation]:
        recommendations = []
        total_nodes = len(snapshot.nodes)
        total_pods = len(snapshot.pods)

        if total_nodes < MIN_NODES:
            recommendations.append(
                Recommendation(
                    type="Availability",
                    severity=Priority.MEDIUM,
                    title="Low Node Count",
                    description=(
                        f"Cluster has only {total_nodes} nodes, "
                        "which may impact high availability."
                    ),
                    action="Consider adding more nodes for better fault tolerance.",
                )
            )

        if total_nodes and total_pods > total_nodes * MAX_PODS_PER_NODE:
            recommendations.append(
                Recommendation(
                    type="Resource",
                    severity=Priority.MEDIUM,
                    title="High Pod Density",
                    description=(
                        f"Cluster has {total_pods} pods across {total_nodes} nodes "
                        f"(avg {total_pods / total_nodes:.1f} pods/node)."
                    ),
                    action="Consider adding more nodes to reduce pod density and improve performance.",
                )
            )

        not_ready = sum(1 for node in snapshot.nodes if not node.ready)
        if not_ready:
            recommendations.append(
                Recommendation(
                    type="Availability",
                    severity=Priority.HIGH,
                    title="Nodes Not Ready",
                    description=f"{not_ready} nodes are not in Ready state.",
                    action="Investigate and fix the nodes that are not ready.",
                )
            )
        return recommendations

    def from_pods(self, snapshot: ClusterSnapshot) -> List[Recommendation]:
        recommendations = []
        failed = sum(1 for pod in snapshot.pods if pod.phase == "Failed")
        restarting = sum(1 for pod in snapshot.pods if pod.restart_count > HIGH_RESTART_COUNT)

        if failed:
            recommendations.append(
                Recommendation(
                    type="Workload",
                    severity=Priority.MEDIUM,
                    title="Failed Pods Detected",
                    description=f"{failed} pods are in failed state.",
                    action="Investigate and fix failed pods, check logs for root cause.",
                )
            )
        if restarting:
            recommendations.append(
                Recommendation(
                    type="Stability",
                    severity=Priority.MEDIUM,
                    title="High Restart Count Pods",
                    description=f"{restarting} pods have more than {HIGH_RESTART_COUNT} restarts.",
                    action="Investigate pods with high restart counts for stability issues.",
                )
            )
        return recommendations

    def from_metrics(self, snapshot: ClusterSnapshot) -> List[Recommendation]:
        if snapshot.metrics_available:
            return []
        return [
            Recommendation(
                type="Monitoring",
                severity=Priority.MEDIUM,
                title="Metrics Server Not Found",
                description="Metrics server is not detected in the cluster.",
                action="Install metrics-server for resource monitoring capabilities.",
            )
        ]

    def from_version(self, server_version: Optional[str]) -> List[Recommendation]:
        version = parse_version(server_version)
        if version is None:
            return []

        major, minor = version
        if major != 1:
            return []
        if minor < MIN_SUPPORTED_MINOR:
            return [
                Recommendation(
                    type="Security",
                    severity=Priority.HIGH,
                    title="Outdated Kubernetes Version",
                    description=(
                        f"Kubernetes version {major}.{minor} is outdated "
                        "and may have security vulnerabilities."
                    ),
                    action="Plan to upgrade to a supported Kubernetes version (1.25+).",
                )
            ]
        if minor < MIN_CURRENT_MINOR:
            return [
                Recommendation(
                    type="Maintenance",
                    severity=Priority.LOW,
                    title="Consider Version Upgrade",
                    description=(
                        f"Kubernetes version {major}.{minor} could be updated "
                        "to get latest features."
                    ),
                    action="Consider upgrading to a newer version for better features and support.",
                )
            ]
        return []


def filter_recommendations(
    recommendations: List[Recommendation],
    severity: Optional[Priority] = None,
    rec_type: Optional[str] = None,
) -> List[Recommendation]:
    """Keep recommendations matching a severity and/or type (case-insensitive)."""
    filtered = recommendations
    if severity is not None:
        filtered = [r for r in filtered if r.severity == severity]
    if rec_type:
        filtered = [r for r in filtered if r.type.lower() == rec_type.lower()]
    return filtered
