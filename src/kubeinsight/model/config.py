"""Analyzer configuration: price tables, thresholds and event keyword tables."""

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ConfigurationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

# On-demand AWS EC2 hourly rates
DEFAULT_HOURLY_PRICES: Dict[str, float] = {
    "t3.micro": 0.0104,
    "t3.small": 0.0208,
    "t3.medium": 0.0416,
    "t3.large": 0.0832,
    "t3.xlarge": 0.1664,
    "m5.large": 0.096,
    "m5.xlarge": 0.192,
    "c5.large": 0.085,
    "c5.xlarge": 0.17,
    "default": 0.10,
}

SYSTEM_NAMESPACES = ["kube-system", "kube-public", "kube-node-lease"]


class ConfigSection(BaseModel):
    """Base for configuration sections; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class PricingConfig(ConfigSection):
    """Instance price table and per-unit request rates."""

    hourly_prices: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_HOURLY_PRICES))
    hours_per_month: float = 24 * 30
    cost_per_core: float = 20.0
    cost_per_gb: float = 5.0
    excluded_namespaces: List[str] = Field(default_factory=lambda: list(SYSTEM_NAMESPACES))

    def node_monthly_cost(self, instance_type: str) -> float:
        """Monthly cost of a node, falling back to the 'default' entry."""
        hourly = self.hourly_prices.get(instance_type)
        if hourly is None:
            hourly = self.hourly_prices.get("default", 0.0)
        return hourly * self.hours_per_month

    def request_cost(self, cpu_milli: int, memory_bytes: int) -> float:
        """Monthly cost of CPU and memory requests."""
        cores = cpu_milli / 1000
        gigabytes = memory_bytes / (1024**3)
        return cores * self.cost_per_core + gigabytes * self.cost_per_gb

    def is_excluded(self, namespace: str) -> bool:
        return namespace in self.excluded_namespaces


class CostThresholds(ConfigSection):
    """Cut-offs used by cost and utilization heuristics."""

    underutilized_percent: float = 20.0
    overutilized_percent: float = 90.0
    aggressive_rightsizing_percent: float = 10.0
    rightsizing_savings_minimum: float = 50.0
    idle_node_percent: float = 30.0
    consolidation_savings_ratio: float = 0.7
    expensive_namespace_cost: float = 100.0
    efficiency_excellent: float = 70.0
    efficiency_good: float = 50.0
    efficiency_fair: float = 30.0


class PatternText(ConfigSection):
    """Description and remediation for a recurring event reason."""

    description: str
    recommendation: str


class SecurityRule(ConfigSection):
    """Risk level and action paired with a security-relevant substring."""

    pattern: str
    description: str
    risk_level: str
    action: str


class EventRules(ConfigSection):
    """Keyword tables driving event classification."""

    critical_reasons: List[str] = Field(
        default_factory=lambda: [
            "Failed",
            "FailedScheduling",
            "FailedMount",
            "FailedAttachVolume",
            "FailedCreatePodSandBox",
            "FailedPodSandBoxStatus",
            "NetworkNotReady",
            "FailedKillPod",
            "FailedCreatePodContainer",
            "InspectFailed",
        ]
    )
    warning_reasons: List[str] = Field(
        default_factory=lambda: [
            "Unhealthy",
            "ProbeWarning",
            "BackOff",
            "ImagePullBackOff",
            "ErrImagePull",
            "NodeNotReady",
            "SystemOOM",
            "FreeDiskSpaceFailed",
            "DeadlineExceeded",
            "EvictionThresholdMet",
        ]
    )
    # Ordered: the first matching reason wins
    resource_reasons: List[Tuple[str, str]] = Field(
        default_factory=lambda: [
            ("FailedScheduling", "Scheduling Issues"),
            ("FailedMount", "Volume Issues"),
            ("SystemOOM", "Memory Issues"),
            ("FreeDiskSpaceFailed", "Disk Issues"),
            ("NodeNotReady", "Node Issues"),
            ("EvictionThresholdMet", "Resource Pressure"),
        ]
    )
    high_impact_reasons: List[str] = Field(
        default_factory=lambda: ["FailedScheduling", "SystemOOM", "NodeNotReady"]
    )
    medium_impact_reasons: List[str] = Field(
        default_factory=lambda: ["FailedMount", "FreeDiskSpaceFailed", "EvictionThresholdMet"]
    )
    security_rules: List[SecurityRule] = Field(
        default_factory=lambda: [
            SecurityRule(
                pattern="FailedMount",
                description="Volume mount failed - potential security misconfiguration",
                risk_level="Medium",
                action="Check volume permissions and security contexts",
            ),
            SecurityRule(
                pattern="ImagePullBackOff",
                description="Image pull failed - potential registry access issue",
                risk_level="Low",
                action="Verify image registry credentials and policies",
            ),
            SecurityRule(
                pattern="Forbidden",
                description="Access denied - RBAC or security policy violation",
                risk_level="High",
                action="Review RBAC permissions and security policies",
            ),
        ]
    )
    patterns: Dict[str, PatternText] = Field(
        default_factory=lambda: {
            reason: PatternText(description=description, recommendation=recommendation)
            for reason, description, recommendation in _DEFAULT_PATTERNS
        }
    )
    default_pattern: PatternText = PatternText(
        description="Unknown error pattern",
        recommendation="Review logs and cluster configuration",
    )

    def describe(self, reason: str) -> PatternText:
        return self.patterns.get(reason, self.default_pattern)


_DEFAULT_PATTERNS = [
    (
        "FailedScheduling",
        "Pod cannot be scheduled to any node",
        "Check node capacity, taints, and pod resource requests",
    ),
    (
        "FailedMount",
        "Volume mounting failed",
        "Verify volume availability and mount permissions",
    ),
    (
        "ImagePullBackOff",
        "Cannot pull container image",
        "Check image name, registry credentials, and network connectivity",
    ),
    (
        "SystemOOM",
        "Out of memory condition",
        "Increase memory limits or optimize application memory usage",
    ),
    (
        "FreeDiskSpaceFailed",
        "Insufficient disk space",
        "Clean up disk space or add more storage capacity",
    ),
    ("NodeNotReady", "Node is not in ready state", "Check node health and kubelet status"),
    (
        "EvictionThresholdMet",
        "Node resource pressure detected",
        "Add more resources or reduce workload density",
    ),
    (
        "FailedCreatePodSandBox",
        "Pod sandbox creation failed",
        "Check container runtime and network configuration",
    ),
    ("NetworkNotReady", "Network not ready for pod", "Verify CNI plugin and network policies"),
    (
        "DeadlineExceeded",
        "Operation timed out",
        "Increase timeout values or optimize operation performance",
    ),
]


class ProviderSettings(ConfigSection):
    """How the cluster is queried."""

    context: Optional[str] = None
    kubeconfig: Optional[str] = None
    max_concurrency: int = Field(5, ge=1)
    event_window_hours: int = Field(24, ge=1)
    command_timeout_seconds: int = Field(60, ge=1)


class InsightConfig(ConfigSection):
    """Complete analyzer configuration."""

    pricing: PricingConfig = Field(default_factory=PricingConfig)
    thresholds: CostThresholds = Field(default_factory=CostThresholds)
    events: EventRules = Field(default_factory=EventRules)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)


def load_config(config_path: Optional[Path] = None) -> InsightConfig:
    """Load configuration from a YAML or JSON file.

    Sections omitted from the file keep their defaults. A missing path yields
    the default configuration.
    """
    if config_path is None:
        return InsightConfig()

    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            if config_path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to parse {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    try:
        config = InsightConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}")

    logger.info(f"Loaded configuration from {config_path}")
    return config
