"""Test workload health scoring."""

import pytest

from kubeinsight.core.health import WorkloadHealthScorer, determine_health_status
from kubeinsight.model.snapshot import (
    ClusterSnapshot,
    ContainerSpec,
    DaemonSetState,
    DeploymentState,
    StatefulSetState,
)
from kubeinsight.model.workload import HealthStatus


@pytest.fixture
def scorer():
    return WorkloadHealthScorer()


class TestDetermineHealthStatus:
    @pytest.mark.parametrize(
        "score, expected",
        [
            (100, HealthStatus.HEALTHY),
            (80, HealthStatus.HEALTHY),
            (79, HealthStatus.WARNING),
            (60, HealthStatus.WARNING),
            (59, HealthStatus.CRITICAL),
            (0, HealthStatus.CRITICAL),
        ],
    )
    def test_status_boundaries(self, score, expected):
        assert determine_health_status(score) == expected


class TestDeploymentHealth:
    def test_fully_configured_deployment(self, scorer, healthy_deployment):
        """Test a ready, configured deployment keeps a perfect score."""
        health = scorer.score_deployment(healthy_deployment)

        assert health.health_score == 100
        assert health.status == HealthStatus.HEALTHY
        assert health.issues == []
        assert health.recommendations == []

    def test_bare_single_replica(self, scorer):
        """Test every configuration gap is penalized: 100 - 10 - 15 - 10 - 10 - 10."""
        deployment = DeploymentState(
            name="bare",
            namespace="default",
            replicas=1,
            ready_replicas=1,
            available_replicas=1,
            containers=[ContainerSpec(name="app")],
        )

        health = scorer.score_deployment(deployment)

        assert health.health_score == 45
        assert health.status == HealthStatus.CRITICAL
        assert health.issues == [
            "Single replica - no high availability",
            "No resource requests defined",
            "No resource limits defined",
            "No liveness probe configured",
            "No readiness probe configured",
        ]
        assert "Consider increasing replicas for HA" in health.recommendations

    def test_unready_replicas(self, scorer, make_container):
        deployment = DeploymentState(
            name="web",
            namespace="default",
            replicas=3,
            ready_replicas=1,
            available_replicas=1,
            unavailable_replicas=2,
            containers=[make_container()],
        )

        health = scorer.score_deployment(deployment)

        assert health.health_score == 50
        assert health.issues == ["Not all replicas ready (1/3)", "2 replicas unavailable"]

    def test_only_first_container_inspected(self, scorer, make_container):
        """Test a sidecar without probes does not lower the score."""
        deployment = DeploymentState(
            name="web",
            namespace="default",
            replicas=2,
            ready_replicas=2,
            containers=[make_container(), make_container(name="sidecar", probes=False)],
        )

        assert scorer.score_deployment(deployment).health_score == 100

    def test_score_never_negative(self, scorer):
        deployment = DeploymentState(
            name="broken",
            namespace="default",
            replicas=1,
            ready_replicas=0,
            unavailable_replicas=1,
        )

        health = scorer.score_deployment(deployment)

        assert health.health_score == 0


class TestStatefulSetAndDaemonSetHealth:
    def test_statefulset_without_storage(self, scorer):
        statefulset = StatefulSetState(
            name="db", namespace="data", replicas=3, ready_replicas=2, current_replicas=2
        )

        health = scorer.score_statefulset(statefulset)

        assert health.health_score == 100 - 30 - 20 - 15
        assert health.issues == [
            "Not all replicas ready (2/3)",
            "Scaling in progress (2/3)",
            "No persistent storage configured",
        ]
        assert health.recommendations == ["Consider adding persistent volume claims"]

    def test_healthy_daemonset(self, scorer):
        daemonset = DaemonSetState(
            name="agent",
            namespace="kube-system",
            desired_number_scheduled=3,
            current_number_scheduled=3,
            number_ready=3,
        )

        assert scorer.score_daemonset(daemonset).health_score == 100

    def test_daemonset_issues(self, scorer):
        daemonset = DaemonSetState(
            name="agent",
            namespace="kube-system",
            desired_number_scheduled=3,
            current_number_scheduled=2,
            number_ready=1,
            number_unavailable=2,
        )

        health = scorer.score_daemonset(daemonset)

        assert health.health_score == 100 - 30 - 25 - 20
        assert health.status == HealthStatus.CRITICAL
        assert "2 instances unavailable" in health.issues


class TestPodHealth:
    def test_healthy_pod(self, scorer, make_pod):
        assert scorer.score_pod(make_pod()).health_score == 100

    def test_few_restarts(self, scorer, make_pod):
        health = scorer.score_pod(make_pod(restarts=3))

        assert health.health_score == 90
        assert health.issues == ["Has restarted 3 times"]

    def test_many_restarts(self, scorer, make_pod):
        health = scorer.score_pod(make_pod(restarts=6))

        assert health.health_score == 80
        assert health.issues == ["High restart count (6)"]

    def test_pending_unready_pod(self, scorer, make_pod, make_container):
        """Test each unready container is penalized separately."""
        pod = make_pod(
            phase="Pending",
            containers=[make_container(), make_container(name="sidecar")],
            ready=False,
            conditions={"Ready": "False"},
        )

        health = scorer.score_pod(pod)

        assert health.health_score == 100 - 40 - 15 - 15 - 25
        assert health.issues == [
            "Pod not running (status: Pending)",
            "Container app not ready",
            "Container sidecar not ready",
            "Pod not ready",
        ]

    def test_missing_ready_condition_not_penalized(self, scorer, make_pod):
        health = scorer.score_pod(make_pod(conditions={}))

        assert health.health_score == 100


class TestAnalyze:
    def test_empty_cluster_is_healthy(self, scorer):
        """Test zero workloads report an overall score of 100."""
        summary = scorer.analyze(ClusterSnapshot()).summary

        assert summary.overall_health_score == 100
        assert summary.critical_issues == 0

    def test_succeeded_pods_skipped(self, scorer, make_pod):
        snapshot = ClusterSnapshot(
            pods=[make_pod(name="job-1", phase="Succeeded"), make_pod(name="web-1")]
        )

        analysis = scorer.analyze(snapshot)

        assert [p.name for p in analysis.pod_health] == ["web-1"]
        assert analysis.summary.total_pods == 1

    def test_sorted_worst_first(self, scorer, make_pod):
        snapshot = ClusterSnapshot(
            pods=[
                make_pod(name="a"),
                make_pod(name="b", phase="Failed"),
                make_pod(name="c", restarts=2),
            ]
        )

        analysis = scorer.analyze(snapshot)

        assert [p.name for p in analysis.pod_health] == ["b", "c", "a"]

    def test_summary_spans_all_kinds(self, scorer, healthy_deployment, make_pod):
        """Test the overall score is the integer mean over every workload."""
        bare = DeploymentState(
            name="bare",
            namespace="default",
            replicas=1,
            ready_replicas=1,
            containers=[ContainerSpec(name="app")],
        )
        snapshot = ClusterSnapshot(
            deployments=[healthy_deployment, bare],
            pods=[make_pod(restarts=1)],
        )

        summary = scorer.analyze(snapshot).summary

        assert summary.total_deployments == 2
        assert summary.healthy_deployments == 1
        assert summary.healthy_pods == 1
        assert summary.critical_issues == 1
        assert summary.overall_health_score == (100 + 45 + 90) // 3
