"""Resource utilization models."""

from enum import Enum
from typing import Optional

from .snapshot import FrozenModel


class UtilizationVerdict(str, Enum):
    """Bucket a pod's usage falls into relative to its requests."""

    UNDERUTILIZED = "underutilized"
    OVERUTILIZED = "overutilized"
    OPTIMAL = "optimal"


class ResourceUtilization(FrozenModel):
    """Usage of a pod relative to its requests."""

    type: str = "Pod"
    name: str
    namespace: str
    cpu_usage_milli: int
    memory_usage_bytes: int
    cpu_request_milli: Optional[int] = None
    memory_request_bytes: Optional[int] = None
    cpu_utilization: float
    memory_utilization: float
    verdict: UtilizationVerdict
    recommendation: str

    @property
    def has_cpu_request(self) -> bool:
        return self.cpu_request_milli is not None

    @property
    def has_memory_request(self) -> bool:
        return self.memory_request_bytes is not None


class NodeMetrics(FrozenModel):
    """Live usage of a node relative to its capacity."""

    name: str
    status: str
    cpu_usage: str
    memory_usage: str
    cpu_capacity: str
    memory_capacity: str
    cpu_usage_percent: Optional[float] = None
    memory_usage_percent: Optional[float] = None


class ClusterMetrics(FrozenModel):
    """Cluster-wide usage totals."""

    total_cpu_usage: str
    total_memory_usage: str
    total_cpu_capacity: str
    total_memory_capacity: str
    cpu_usage_percent: Optional[float] = None
    memory_usage_percent: Optional[float] = None
    nodes_count: int = 0
    pods_count: int = 0
    namespaces_count: int = 0
