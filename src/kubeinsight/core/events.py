"""Event classification into severities, recurring patterns and signals."""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..model.config import EventRules
from ..model.events import (
    ClassifiedEvent,
    ErrorPattern,
    Impact,
    LogAnalysis,
    PodLogSummary,
    ResourceEvent,
    SecurityEvent,
    Severity,
)
from ..model.snapshot import ClusterEvent, PodState
from ..utils.logger import get_logger

logger = get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_time(timestamp: Optional[datetime]) -> datetime:
    if timestamp is None:
        return _EPOCH
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def _latest(first: Optional[datetime], second: Optional[datetime]) -> Optional[datetime]:
    if first is None:
        return second
    if second is None:
        return first
    return first if _sort_time(first) >= _sort_time(second) else second


class EventClassifier:
    """Sorts events into severity tiers and derives patterns and signals."""

    def __init__(self, rules: Optional[EventRules] = None):
        self.rules = rules or EventRules()

    def severity(self, event: ClusterEvent) -> Severity:
        """Critical reasons win over warning reasons, then the event type."""
        if any(keyword in event.reason for keyword in self.rules.critical_reasons):
            return Severity.CRITICAL
        if any(keyword in event.reason for keyword in self.rules.warning_reasons):
            return Severity.WARNING
        if event.type == "Warning":
            return Severity.WARNING
        return Severity.INFO

    def classify(self, events: List[ClusterEvent]) -> List[ClassifiedEvent]:
        """Attach a severity to each event, most recent first."""
        ordered = sorted(events, key=lambda e: _sort_time(e.timestamp), reverse=True)
        return [
            ClassifiedEvent(**event.model_dump(), severity=self.severity(event))
            for event in ordered
        ]

    def analyze(self, events: List[ClusterEvent]) -> LogAnalysis:
        classified = self.classify(events)

        critical = [e for e in classified if e.severity == Severity.CRITICAL]
        warnings = [e for e in classified if e.severity == Severity.WARNING]
        resource_events = [r for r in map(self.resource_event, classified) if r is not None]
        security_events = [s for s in map(self.security_event, classified) if s is not None]
        patterns = self.error_patterns(classified)

        logger.info(
            f"Classified {len(classified)} events: {len(critical)} critical, "
            f"{len(warnings)} warning, {len(patterns)} patterns"
        )

        return LogAnalysis(
            critical_events=critical,
            warning_events=warnings,
            error_patterns=patterns,
            resource_events=resource_events,
            security_events=security_events,
        )

    def error_patterns(self, classified: List[ClassifiedEvent]) -> List[ErrorPattern]:
        """Group Critical and Warning events by reason."""
        grouped: Dict[str, Dict] = {}
        for event in classified:
            if event.severity == Severity.INFO:
                continue

            entry = grouped.get(event.reason)
            if entry is None:
                grouped[event.reason] = {
                    "count": event.count,
                    "last_seen": event.timestamp,
                    "severity": event.severity,
                }
            else:
                entry["count"] += event.count
                entry["last_seen"] = _latest(entry["last_seen"], event.timestamp)

        patterns = []
        for reason, entry in grouped.items():
            text = self.rules.describe(reason)
            patterns.append(
                ErrorPattern(
                    pattern=reason,
                    count=entry["count"],
                    last_seen=entry["last_seen"],
                    severity=entry["severity"],
                    description=text.description,
                    recommendation=text.recommendation,
                )
            )

        patterns.sort(key=lambda p: (-p.count, p.pattern))
        return patterns

    def impact(self, reason: str) -> Impact:
        if any(keyword in reason for keyword in self.rules.high_impact_reasons):
            return Impact.HIGH
        if any(keyword in reason for keyword in self.rules.medium_impact_reasons):
            return Impact.MEDIUM
        return Impact.LOW

    def resource_event(self, event: ClusterEvent) -> Optional[ResourceEvent]:
        for keyword, category in self.rules.resource_reasons:
            if keyword in event.reason:
                return ResourceEvent(
                    type=category,
                    resource_name=event.involved_object,
                    namespace=event.namespace,
                    event=event.reason,
                    timestamp=event.timestamp,
                    impact=self.impact(keyword),
                )
        return None

    def security_event(self, event: ClusterEvent) -> Optional[SecurityEvent]:
        for security_rule in self.rules.security_rules:
            if security_rule.pattern in event.reason or security_rule.pattern in event.message:
                return SecurityEvent(
                    description=security_rule.description,
                    object=event.involved_object,
                    namespace=event.namespace,
                    timestamp=event.timestamp,
                    risk_level=security_rule.risk_level,
                    action=security_rule.action,
                )
        return None

    def pod_summaries(
        self, pods: List[PodState], events: List[ClusterEvent]
    ) -> List[PodLogSummary]:
        """Per-pod event findings, noisiest pods first.

        Pods with no critical or warning events are left out.
        """
        by_object: Dict[tuple, List[ClusterEvent]] = {}
        for event in events:
            by_object.setdefault((event.namespace, event.involved_object), []).append(event)

        summaries = []
        for pod in pods:
            errors = warnings = 0
            critical_issues = []
            for event in by_object.get((pod.namespace, pod.object_ref), []):
                severity = self.severity(event)
                if severity == Severity.CRITICAL:
                    errors += 1
                    critical_issues.append(f"{event.reason}: {event.message}")
                elif severity == Severity.WARNING:
                    warnings += 1

            if errors == 0 and warnings == 0:
                continue

            summaries.append(
                PodLogSummary(
                    pod_name=pod.name,
                    namespace=pod.namespace,
                    status=pod.phase,
                    error_count=errors,
                    warning_count=warnings,
                    critical_issues=critical_issues,
                    last_restart_at=pod.last_restart_at,
                )
            )

        summaries.sort(key=lambda s: -(s.error_count + s.warning_count))
        logger.debug(f"Found event findings for {len(summaries)} pods")
        return summaries
