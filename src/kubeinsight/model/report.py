"""Report-related models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .cost import CostAnalysis
from .events import LogAnalysis, PodLogSummary
from .recommendation import Recommendation
from .snapshot import FrozenModel
from .utilization import ClusterMetrics, NodeMetrics, ResourceUtilization
from .workload import WorkloadAnalysis


class ReportFormat(str, Enum):
    """Supported report formats."""

    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


class AnalysisType(str, Enum):
    """Analyses the engine can run over a snapshot."""

    COST = "cost"
    WORKLOAD = "workload"
    LOGS = "logs"
    UTILIZATION = "utilization"
    RECOMMENDATIONS = "recommendations"


class InsightReport(FrozenModel):
    """Joined output of every analysis requested for a snapshot."""

    generated_at: datetime
    cluster_context: Optional[str] = None
    server_version: Optional[str] = None
    cost: Optional[CostAnalysis] = None
    workload: Optional[WorkloadAnalysis] = None
    logs: Optional[LogAnalysis] = None
    pod_log_summaries: List[PodLogSummary] = Field(default_factory=list)
    utilization: List[ResourceUtilization] = Field(default_factory=list)
    node_metrics: List[NodeMetrics] = Field(default_factory=list)
    cluster_metrics: Optional[ClusterMetrics] = None
    recommendations: List[Recommendation] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
