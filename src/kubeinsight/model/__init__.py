"""Data models for kube-insight."""

from .config import (
    CostThresholds,
    EventRules,
    InsightConfig,
    PricingConfig,
    ProviderSettings,
    load_config,
)
from .cost import (
    CostAnalysis,
    CostOptimization,
    EfficiencyTier,
    NamespaceCost,
    NodeCost,
    Priority,
    UnderutilizedResource,
)
from .events import (
    ClassifiedEvent,
    ErrorPattern,
    Impact,
    LogAnalysis,
    PodLogSummary,
    ResourceEvent,
    SecurityEvent,
    Severity,
)
from .export import ExportFormat
from .recommendation import Recommendation
from .report import AnalysisType, InsightReport, ReportFormat
from .snapshot import (
    ClusterEvent,
    ClusterSnapshot,
    ContainerSpec,
    ContainerStatus,
    DaemonSetState,
    DeploymentState,
    NodeState,
    OwnerReference,
    PodState,
    ResourceQuantities,
    StatefulSetState,
    UsageSample,
)
from .utilization import ClusterMetrics, NodeMetrics, ResourceUtilization, UtilizationVerdict
from .workload import (
    DaemonSetHealth,
    DeploymentHealth,
    HealthStatus,
    PodHealth,
    StatefulSetHealth,
    WorkloadAnalysis,
    WorkloadHealth,
    WorkloadKind,
    WorkloadSummary,
)

__all__ = [
    "CostThresholds",
    "EventRules",
    "InsightConfig",
    "PricingConfig",
    "ProviderSettings",
    "load_config",
    "CostAnalysis",
    "CostOptimization",
    "EfficiencyTier",
    "NamespaceCost",
    "NodeCost",
    "Priority",
    "UnderutilizedResource",
    "ClassifiedEvent",
    "ErrorPattern",
    "Impact",
    "LogAnalysis",
    "PodLogSummary",
    "ResourceEvent",
    "SecurityEvent",
    "Severity",
    "ExportFormat",
    "Recommendation",
    "AnalysisType",
    "InsightReport",
    "ReportFormat",
    "ClusterEvent",
    "ClusterSnapshot",
    "ContainerSpec",
    "ContainerStatus",
    "DaemonSetState",
    "DeploymentState",
    "NodeState",
    "OwnerReference",
    "PodState",
    "ResourceQuantities",
    "StatefulSetState",
    "UsageSample",
    "ClusterMetrics",
    "NodeMetrics",
    "ResourceUtilization",
    "UtilizationVerdict",
    "DaemonSetHealth",
    "DeploymentHealth",
    "HealthStatus",
    "PodHealth",
    "StatefulSetHealth",
    "WorkloadAnalysis",
    "WorkloadHealth",
    "WorkloadKind",
    "WorkloadSummary",
]
