"""Cost analysis models."""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .snapshot import FrozenModel


class Priority(str, Enum):
    """Priority of an optimization, in display order."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class EfficiencyTier(str, Enum):
    """Qualitative bucket for a node's average utilization."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    NO_METRICS = "No metrics"


class NodeCost(FrozenModel):
    """Monthly cost and utilization of a node."""

    name: str
    instance_type: str
    monthly_cost: float
    cpu_capacity: str
    memory_capacity: str
    cpu_utilization: Optional[float] = None
    memory_utilization: Optional[float] = None
    efficiency: EfficiencyTier = EfficiencyTier.NO_METRICS


class NamespaceCost(FrozenModel):
    """Estimated monthly cost of a namespace's resource requests."""

    name: str
    monthly_cost: float
    cpu_requests: str
    memory_requests: str
    pods_count: int
    cost_per_pod: float


class UnderutilizedResource(FrozenModel):
    """A pod using well below what it requests."""

    type: str = "Pod"
    name: str
    namespace: str
    cpu_waste: str
    memory_waste: str
    cpu_waste_milli: int
    memory_waste_bytes: int
    estimated_monthly_savings: float
    recommendation: str


class CostOptimization(FrozenModel):
    """A cluster-wide cost saving action."""

    type: str
    description: str
    potential_savings: float = 0.0
    priority: Priority
    action: str


class CostAnalysis(FrozenModel):
    """Complete cost report."""

    total_monthly_cost: float = 0.0
    node_costs: List[NodeCost] = Field(default_factory=list)
    namespace_costs: List[NamespaceCost] = Field(default_factory=list)
    underutilized_resources: List[UnderutilizedResource] = Field(default_factory=list)
    cost_optimizations: List[CostOptimization] = Field(default_factory=list)

    @property
    def total_potential_savings(self) -> float:
        return sum(o.potential_savings for o in self.cost_optimizations)
