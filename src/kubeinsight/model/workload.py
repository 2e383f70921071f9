"""Workload health models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .snapshot import FrozenModel


class HealthStatus(str, Enum):
    """Status tier derived from a health score."""

    HEALTHY = "Healthy"
    WARNING = "Warning"
    CRITICAL = "Critical"


class WorkloadKind(str, Enum):
    """Kinds of objects scored for health."""

    DEPLOYMENT = "Deployment"
    STATEFULSET = "StatefulSet"
    DAEMONSET = "DaemonSet"
    POD = "Pod"


class WorkloadHealth(FrozenModel):
    """Fields shared by every workload health result."""

    kind: WorkloadKind
    name: str
    namespace: str
    status: HealthStatus
    health_score: int = Field(ge=0, le=100)
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY


class DeploymentHealth(WorkloadHealth):
    kind: WorkloadKind = WorkloadKind.DEPLOYMENT
    replicas: int
    ready_replicas: int
    available_replicas: int
    unavailable_replicas: int


class StatefulSetHealth(WorkloadHealth):
    kind: WorkloadKind = WorkloadKind.STATEFULSET
    replicas: int
    ready_replicas: int
    current_replicas: int


class DaemonSetHealth(WorkloadHealth):
    kind: WorkloadKind = WorkloadKind.DAEMONSET
    desired_number_scheduled: int
    current_number_scheduled: int
    number_ready: int
    number_unavailable: int


class PodHealth(WorkloadHealth):
    kind: WorkloadKind = WorkloadKind.POD
    phase: str
    restart_count: int
    node: Optional[str] = None
    last_restart_at: Optional[datetime] = None


class WorkloadSummary(FrozenModel):
    """Cluster-wide workload health totals."""

    total_deployments: int = 0
    healthy_deployments: int = 0
    total_statefulsets: int = 0
    healthy_statefulsets: int = 0
    total_daemonsets: int = 0
    healthy_daemonsets: int = 0
    total_pods: int = 0
    healthy_pods: int = 0
    critical_issues: int = 0
    overall_health_score: int = 100


class WorkloadAnalysis(FrozenModel):
    """Complete workload health report."""

    deployment_health: List[DeploymentHealth] = Field(default_factory=list)
    statefulset_health: List[StatefulSetHealth] = Field(default_factory=list)
    daemonset_health: List[DaemonSetHealth] = Field(default_factory=list)
    pod_health: List[PodHealth] = Field(default_factory=list)
    summary: WorkloadSummary = Field(default_factory=WorkloadSummary)

    def all_health(self) -> List[WorkloadHealth]:
        """Every scored object across the four kinds."""
        return [
            *self.deployment_health,
            *self.statefulset_health,
            *self.daemonset_health,
            *self.pod_health,
        ]
