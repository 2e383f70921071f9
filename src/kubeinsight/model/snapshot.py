"""Snapshot models describing the cluster state handed to the analyzers."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INSTANCE_TYPE = "default"


class FrozenModel(BaseModel):
    """Immutable base for every snapshot and result model."""

    model_config = ConfigDict(frozen=True)


class ResourceQuantities(FrozenModel):
    """CPU and memory amounts; None means the resource was not declared."""

    cpu_milli: Optional[int] = None
    memory_bytes: Optional[int] = None


class ContainerSpec(FrozenModel):
    """Container definition from a pod template."""

    name: str
    image: str = ""
    requests: Optional[ResourceQuantities] = None
    limits: Optional[ResourceQuantities] = None
    has_liveness_probe: bool = False
    has_readiness_probe: bool = False


class ContainerStatus(FrozenModel):
    """Runtime status of a container."""

    name: str
    ready: bool = False
    restart_count: int = 0
    last_terminated_at: Optional[datetime] = None


class OwnerReference(FrozenModel):
    """Controller owning an object."""

    kind: str
    name: str


class NodeState(FrozenModel):
    """A cluster node."""

    name: str
    instance_type: str = DEFAULT_INSTANCE_TYPE
    cpu_capacity_milli: int = 0
    memory_capacity_bytes: int = 0
    conditions: Dict[str, str] = Field(default_factory=dict)
    kubelet_version: str = ""

    @property
    def ready(self) -> bool:
        """Whether the Ready condition is True."""
        return self.conditions.get("Ready") == "True"


def _sum_declared(values: List[Optional[int]]) -> Optional[int]:
    declared = [v for v in values if v]
    return sum(declared) if declared else None


class PodState(FrozenModel):
    """A pod and its containers."""

    name: str
    namespace: str
    phase: str = "Unknown"
    containers: List[ContainerSpec] = Field(default_factory=list)
    container_statuses: List[ContainerStatus] = Field(default_factory=list)
    owner_references: List[OwnerReference] = Field(default_factory=list)
    conditions: Dict[str, str] = Field(default_factory=dict)
    node_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def cpu_request_milli(self) -> Optional[int]:
        """Summed CPU requests, None when no container declares one."""
        return _sum_declared([c.requests.cpu_milli for c in self.containers if c.requests])

    @property
    def memory_request_bytes(self) -> Optional[int]:
        """Summed memory requests, None when no container declares one."""
        return _sum_declared([c.requests.memory_bytes for c in self.containers if c.requests])

    @property
    def cpu_limit_milli(self) -> Optional[int]:
        return _sum_declared([c.limits.cpu_milli for c in self.containers if c.limits])

    @property
    def memory_limit_bytes(self) -> Optional[int]:
        return _sum_declared([c.limits.memory_bytes for c in self.containers if c.limits])

    @property
    def restart_count(self) -> int:
        """Total restarts across containers."""
        return sum(status.restart_count for status in self.container_statuses)

    @property
    def last_restart_at(self) -> Optional[datetime]:
        """Most recent container termination, if any."""
        times = [s.last_terminated_at for s in self.container_statuses if s.last_terminated_at]
        return max(times) if times else None

    @property
    def is_ready(self) -> bool:
        return self.conditions.get("Ready") == "True"

    @property
    def is_job_pod(self) -> bool:
        return any(ref.kind == "Job" for ref in self.owner_references)

    @property
    def object_ref(self) -> str:
        return f"Pod/{self.name}"


class DeploymentState(FrozenModel):
    """A Deployment and its rollout status."""

    name: str
    namespace: str
    replicas: int = 1
    ready_replicas: int = 0
    available_replicas: int = 0
    unavailable_replicas: int = 0
    containers: List[ContainerSpec] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class StatefulSetState(FrozenModel):
    """A StatefulSet and its rollout status."""

    name: str
    namespace: str
    replicas: int = 1
    ready_replicas: int = 0
    current_replicas: int = 0
    volume_claim_templates: int = 0
    containers: List[ContainerSpec] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class DaemonSetState(FrozenModel):
    """A DaemonSet and its scheduling status."""

    name: str
    namespace: str
    desired_number_scheduled: int = 0
    current_number_scheduled: int = 0
    number_ready: int = 0
    number_unavailable: int = 0
    containers: List[ContainerSpec] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class UsageSample(FrozenModel):
    """Live usage of a node (namespace is None) or pod."""

    name: str
    namespace: Optional[str] = None
    cpu_milli: int = 0
    memory_bytes: int = 0


class ClusterEvent(FrozenModel):
    """A Kubernetes event."""

    type: str = "Normal"
    reason: str = ""
    message: str = ""
    involved_object: str = ""
    namespace: str = ""
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    count: int = 1
    source_component: str = "Unknown"

    @property
    def timestamp(self) -> Optional[datetime]:
        """Last occurrence, falling back to the first one."""
        return self.last_seen or self.first_seen


class ClusterSnapshot(FrozenModel):
    """Point-in-time view of the cluster.

    ``node_usage`` and ``pod_usage`` are None when the metrics API could not
    be read, which is different from an empty list of samples.
    """

    captured_at: Optional[datetime] = None
    server_version: Optional[str] = None
    nodes: List[NodeState] = Field(default_factory=list)
    pods: List[PodState] = Field(default_factory=list)
    deployments: List[DeploymentState] = Field(default_factory=list)
    statefulsets: List[StatefulSetState] = Field(default_factory=list)
    daemonsets: List[DaemonSetState] = Field(default_factory=list)
    events: List[ClusterEvent] = Field(default_factory=list)
    node_usage: Optional[List[UsageSample]] = None
    pod_usage: Optional[List[UsageSample]] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def metrics_available(self) -> bool:
        return self.node_usage is not None or self.pod_usage is not None

    @property
    def namespaces(self) -> List[str]:
        """Namespaces seen across pods, sorted."""
        return sorted({pod.namespace for pod in self.pods})
