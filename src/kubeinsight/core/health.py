"""Workload health scoring.

Every workload kind is scored by the same routine: start at 100, subtract
the penalty of each rule that fires and clamp at 0. Rules are declared per
kind as ``HealthRule`` tables.
"""

from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Tuple, TypeVar, Union

from ..model.snapshot import (
    ClusterSnapshot,
    ContainerSpec,
    DaemonSetState,
    DeploymentState,
    PodState,
    StatefulSetState,
)
from ..model.workload import (
    DaemonSetHealth,
    DeploymentHealth,
    HealthStatus,
    PodHealth,
    StatefulSetHealth,
    WorkloadAnalysis,
    WorkloadHealth,
    WorkloadSummary,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

MAX_SCORE = 100
HEALTHY_SCORE = 80
WARNING_SCORE = 60

T = TypeVar("T")

# Ordered (condition, status) pairs; the first matching condition wins
HEALTH_STATUS_RULES: List[Tuple[Callable[[int], bool], HealthStatus]] = [
    (lambda score: score >= HEALTHY_SCORE, HealthStatus.HEALTHY),
    (lambda score: score >= WARNING_SCORE, HealthStatus.WARNING),
    (lambda score: True, HealthStatus.CRITICAL),
]


def determine_health_status(health_score: int) -> HealthStatus:
    """Map a score to its status tier."""
    for condition, status in HEALTH_STATUS_RULES:
        if condition(health_score):
            return status
    return HealthStatus.CRITICAL


@dataclass(frozen=True)
class HealthRule(Generic[T]):
    """A scoring rule.

    ``findings`` returns one issue text per violation; each violation costs
    ``penalty`` points. The recommendation is emitted once if any fired.
    """

    findings: Callable[[T], List[str]]
    penalty: int
    recommendation: Optional[str] = None


def rule(
    predicate: Callable[[T], bool],
    issue: Union[str, Callable[[T], str]],
    penalty: int,
    recommendation: Optional[str] = None,
) -> HealthRule:
    """Build a rule that fires at most once."""

    def findings(obj: T) -> List[str]:
        if not predicate(obj):
            return []
        return [issue(obj) if callable(issue) else issue]

    return HealthRule(findings=findings, penalty=penalty, recommendation=recommendation)


@dataclass
class Evaluation:
    score: int = MAX_SCORE
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @property
    def status(self) -> HealthStatus:
        return determine_health_status(self.score)


def evaluate(obj: T, rules: List[HealthRule]) -> Evaluation:
    """Apply rules in order to an object."""
    result = Evaluation()
    penalty = 0
    for health_rule in rules:
        findings = health_rule.findings(obj)
        if not findings:
            continue
        result.issues.extend(findings)
        penalty += health_rule.penalty * len(findings)
        if health_rule.recommendation:
            result.recommendations.append(health_rule.recommendation)

    result.score = max(0, MAX_SCORE - penalty)
    return result


def _first_container(containers: List[ContainerSpec]) -> Optional[ContainerSpec]:
    return containers[0] if containers else None


def _lacks(attribute: str) -> Callable[[DeploymentState], bool]:
    # A deployment without containers lacks everything
    def predicate(deployment: DeploymentState) -> bool:
        container = _first_container(deployment.containers)
        return container is None or not getattr(container, attribute)

    return predicate


DEPLOYMENT_RULES: List[HealthRule] = [
    rule(
        lambda d: d.replicas != d.ready_replicas,
        lambda d: f"Not all replicas ready ({d.ready_replicas}/{d.replicas})",
        30,
    ),
    rule(
        lambda d: d.unavailable_replicas > 0,
        lambda d: f"{d.unavailable_replicas} replicas unavailable",
        20,
    ),
    rule(
        lambda d: d.replicas == 1,
        "Single replica - no high availability",
        10,
        "Consider increasing replicas for HA",
    ),
    rule(_lacks("requests"), "No resource requests defined", 15, "Define CPU and memory requests"),
    rule(_lacks("limits"), "No resource limits defined", 10, "Define CPU and memory limits"),
    rule(
        _lacks("has_liveness_probe"),
        "No liveness probe configured",
        10,
        "Add liveness probe for better health monitoring",
    ),
    rule(
        _lacks("has_readiness_probe"),
        "No readiness probe configured",
        10,
        "Add readiness probe for better traffic management",
    ),
]

STATEFULSET_RULES: List[HealthRule] = [
    rule(
        lambda s: s.replicas != s.ready_replicas,
        lambda s: f"Not all replicas ready ({s.ready_replicas}/{s.replicas})",
        30,
    ),
    rule(
        lambda s: s.current_replicas != s.replicas,
        lambda s: f"Scaling in progress ({s.current_replicas}/{s.replicas})",
        20,
    ),
    rule(
        lambda s: s.volume_claim_templates == 0,
        "No persistent storage configured",
        15,
        "Consider adding persistent volume claims",
    ),
]

DAEMONSET_RULES: List[HealthRule] = [
    rule(
        lambda d: d.number_ready != d.desired_number_scheduled,
        lambda d: f"Not all instances ready ({d.number_ready}/{d.desired_number_scheduled})",
        30,
    ),
    rule(
        lambda d: d.number_unavailable > 0,
        lambda d: f"{d.number_unavailable} instances unavailable",
        25,
    ),
    rule(
        lambda d: d.current_number_scheduled != d.desired_number_scheduled,
        "Scheduling issues detected",
        20,
    ),
]

POD_RULES: List[HealthRule] = [
    rule(
        lambda p: p.phase != "Running",
        lambda p: f"Pod not running (status: {p.phase})",
        40,
    ),
    rule(
        lambda p: p.restart_count > 5,
        lambda p: f"High restart count ({p.restart_count})",
        20,
    ),
    rule(
        lambda p: 0 < p.restart_count <= 5,
        lambda p: f"Has restarted {p.restart_count} times",
        10,
    ),
    HealthRule(
        findings=lambda p: [
            f"Container {status.name} not ready"
            for status in p.container_statuses
            if not status.ready
        ],
        penalty=15,
    ),
    # Only a reported Ready condition counts
    rule(
        lambda p: "Ready" in p.conditions and not p.is_ready,
        "Pod not ready",
        25,
    ),
]


def should_skip_pod(pod: PodState) -> bool:
    """Completed pods, Job pods included, are not scored."""
    return pod.phase == "Succeeded"


class WorkloadHealthScorer:
    """Scores deployments, statefulsets, daemonsets and pods."""

    def analyze(self, snapshot: ClusterSnapshot) -> WorkloadAnalysis:
        deployments = sorted(
            (self.score_deployment(d) for d in snapshot.deployments), key=_by_score
        )
        statefulsets = sorted(
            (self.score_statefulset(s) for s in snapshot.statefulsets), key=_by_score
        )
        daemonsets = sorted(
            (self.score_daemonset(d) for d in snapshot.daemonsets), key=_by_score
        )
        pods = sorted(
            (self.score_pod(p) for p in snapshot.pods if not should_skip_pod(p)), key=_by_score
        )

        summary = self.summarize(deployments, statefulsets, daemonsets, pods)
        logger.info(
            f"Scored {len(deployments) + len(statefulsets) + len(daemonsets) + len(pods)} "
            f"workloads, overall health {summary.overall_health_score}"
        )

        return WorkloadAnalysis(
            deployment_health=deployments,
            statefulset_health=statefulsets,
            daemonset_health=daemonsets,
            pod_health=pods,
            summary=summary,
        )

    def score_deployment(self, deployment: DeploymentState) -> DeploymentHealth:
        result = evaluate(deployment, DEPLOYMENT_RULES)
        return DeploymentHealth(
            name=deployment.name,
            namespace=deployment.namespace,
            status=result.status,
            health_score=result.score,
            issues=result.issues,
            recommendations=result.recommendations,
            created_at=deployment.created_at,
            replicas=deployment.replicas,
            ready_replicas=deployment.ready_replicas,
            available_replicas=deployment.available_replicas,
            unavailable_replicas=deployment.unavailable_replicas,
        )

    def score_statefulset(self, statefulset: StatefulSetState) -> StatefulSetHealth:
        result = evaluate(statefulset, STATEFULSET_RULES)
        return StatefulSetHealth(
            name=statefulset.name,
            namespace=statefulset.namespace,
            status=result.status,
            health_score=result.score,
            issues=result.issues,
            recommendations=result.recommendations,
            created_at=statefulset.created_at,
            replicas=statefulset.replicas,
            ready_replicas=statefulset.ready_replicas,
            current_replicas=statefulset.current_replicas,
        )

    def score_daemonset(self, daemonset: DaemonSetState) -> DaemonSetHealth:
        result = evaluate(daemonset, DAEMONSET_RULES)
        return DaemonSetHealth(
            name=daemonset.name,
            namespace=daemonset.namespace,
            status=result.status,
            health_score=result.score,
            issues=result.issues,
            recommendations=result.recommendations,
            created_at=daemonset.created_at,
            desired_number_scheduled=daemonset.desired_number_scheduled,
            current_number_scheduled=daemonset.current_number_scheduled,
            number_ready=daemonset.number_ready,
            number_unavailable=daemonset.number_unavailable,
        )

    def score_pod(self, pod: PodState) -> PodHealth:
        result = evaluate(pod, POD_RULES)
        return PodHealth(
            name=pod.name,
            namespace=pod.namespace,
            status=result.status,
            health_score=result.score,
            issues=result.issues,
            recommendations=result.recommendations,
            created_at=pod.created_at,
            phase=pod.phase,
            restart_count=pod.restart_count,
            node=pod.node_name,
            last_restart_at=pod.last_restart_at,
        )

    def summarize(
        self,
        deployments: List[DeploymentHealth],
        statefulsets: List[StatefulSetHealth],
        daemonsets: List[DaemonSetHealth],
        pods: List[PodHealth],
    ) -> WorkloadSummary:
        """Totals per kind plus the overall score across all four kinds."""
        everything: List[WorkloadHealth] = [*deployments, *statefulsets, *daemonsets, *pods]
        if everything:
            overall = sum(h.health_score for h in everything) // len(everything)
        else:
            overall = MAX_SCORE

        return WorkloadSummary(
            total_deployments=len(deployments),
            healthy_deployments=_count_healthy(deployments),
            total_statefulsets=len(statefulsets),
            healthy_statefulsets=_count_healthy(statefulsets),
            total_daemonsets=len(daemonsets),
            healthy_daemonsets=_count_healthy(daemonsets),
            total_pods=len(pods),
            healthy_pods=_count_healthy(pods),
            critical_issues=sum(1 for h in everything if h.status == HealthStatus.CRITICAL),
            overall_health_score=overall,
        )


def _by_score(health: WorkloadHealth) -> Tuple[int, str, str]:
    return health.health_score, health.namespace, health.name


def _count_healthy(results: List[WorkloadHealth]) -> int:
    return sum(1 for h in results if h.health_score >= HEALTHY_SCORE)
