"""Event classification models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .snapshot import ClusterEvent, FrozenModel


class Severity(str, Enum):
    """Severity tier of a cluster event."""

    CRITICAL = "Critical"
    WARNING = "Warning"
    INFO = "Info"


class Impact(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ClassifiedEvent(ClusterEvent):
    """A cluster event with its severity."""

    severity: Severity


class ErrorPattern(FrozenModel):
    """Recurring event reason aggregated across objects."""

    pattern: str
    count: int
    last_seen: Optional[datetime] = None
    severity: Severity
    description: str
    recommendation: str


class ResourceEvent(FrozenModel):
    """Event signalling resource pressure."""

    type: str
    resource_name: str
    namespace: str
    event: str
    timestamp: Optional[datetime] = None
    impact: Impact


class SecurityEvent(FrozenModel):
    """Event with security relevance."""

    type: str = "Security"
    description: str
    object: str
    namespace: str
    timestamp: Optional[datetime] = None
    risk_level: str
    action: str


class PodLogSummary(FrozenModel):
    """Event findings for a single pod."""

    pod_name: str
    namespace: str
    status: str
    error_count: int = 0
    warning_count: int = 0
    critical_issues: List[str] = Field(default_factory=list)
    last_restart_at: Optional[datetime] = None


class LogAnalysis(FrozenModel):
    """Complete event report. The lists are independent views."""

    critical_events: List[ClassifiedEvent] = Field(default_factory=list)
    warning_events: List[ClassifiedEvent] = Field(default_factory=list)
    error_patterns: List[ErrorPattern] = Field(default_factory=list)
    resource_events: List[ResourceEvent] = Field(default_factory=list)
    security_events: List[SecurityEvent] = Field(default_factory=list)
