"""Test configuration and fixtures."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from kubeinsight.model.snapshot import (
    ClusterEvent,
    ClusterSnapshot,
    ContainerSpec,
    ContainerStatus,
    DeploymentState,
    NodeState,
    PodState,
    ResourceQuantities,
    UsageSample,
)

GIB = 1024**3
MIB = 1024**2
NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_container():
    """Factory for container specs; pass None to leave requests/limits undefined."""

    def _make(
        name: str = "app",
        cpu_request: Optional[int] = 100,
        memory_request: Optional[int] = 128 * MIB,
        cpu_limit: Optional[int] = 500,
        memory_limit: Optional[int] = 512 * MIB,
        probes: bool = True,
    ) -> ContainerSpec:
        requests = None
        if cpu_request is not None or memory_request is not None:
            requests = ResourceQuantities(cpu_milli=cpu_request, memory_bytes=memory_request)
        limits = None
        if cpu_limit is not None or memory_limit is not None:
            limits = ResourceQuantities(cpu_milli=cpu_limit, memory_bytes=memory_limit)
        return ContainerSpec(
            name=name,
            image=f"{name}:latest",
            requests=requests,
            limits=limits,
            has_liveness_probe=probes,
            has_readiness_probe=probes,
        )

    return _make


@pytest.fixture
def make_pod(make_container):
    """Factory for running, ready pods."""

    def _make(
        name: str = "web-1",
        namespace: str = "default",
        phase: str = "Running",
        containers: Optional[List[ContainerSpec]] = None,
        restarts: int = 0,
        ready: bool = True,
        conditions: Optional[Dict[str, str]] = None,
        node_name: str = "node-1",
    ) -> PodState:
        containers = containers if containers is not None else [make_container()]
        return PodState(
            name=name,
            namespace=namespace,
            phase=phase,
            containers=containers,
            container_statuses=[
                ContainerStatus(name=c.name, ready=ready, restart_count=restarts)
                for c in containers
            ],
            conditions=conditions if conditions is not None else {"Ready": "True"},
            node_name=node_name,
        )

    return _make


@pytest.fixture
def make_node():
    def _make(
        name: str = "node-1",
        instance_type: str = "m5.large",
        cpu: int = 2000,
        memory: int = 8 * GIB,
        ready: bool = True,
    ) -> NodeState:
        return NodeState(
            name=name,
            instance_type=instance_type,
            cpu_capacity_milli=cpu,
            memory_capacity_bytes=memory,
            conditions={"Ready": "True" if ready else "False"},
            kubelet_version="v1.28.0",
        )

    return _make


@pytest.fixture
def make_event():
    def _make(
        reason: str = "FailedScheduling",
        message: str = "0/3 nodes are available",
        event_type: str = "Warning",
        count: int = 1,
        last_seen: datetime = NOW,
        involved_object: str = "Pod/web-1",
        namespace: str = "default",
    ) -> ClusterEvent:
        return ClusterEvent(
            type=event_type,
            reason=reason,
            message=message,
            involved_object=involved_object,
            namespace=namespace,
            first_seen=last_seen,
            last_seen=last_seen,
            count=count,
            source_component="kubelet",
        )

    return _make


@pytest.fixture
def healthy_deployment(make_container) -> DeploymentState:
    """Three ready replicas with requests, limits and probes."""
    return DeploymentState(
        name="web",
        namespace="default",
        replicas=3,
        ready_replicas=3,
        available_replicas=3,
        unavailable_replicas=0,
        containers=[make_container()],
    )


@pytest.fixture
def sample_snapshot(make_node, make_pod, make_container, make_event, healthy_deployment):
    """Small cluster with metrics: one idle pod, one busy pod, one warning event."""
    idle = make_pod(
        name="idle",
        containers=[make_container(cpu_request=1000, memory_request=GIB)],
    )
    busy = make_pod(
        name="busy",
        namespace="shop",
        containers=[make_container(cpu_request=100, memory_request=100 * MIB)],
    )
    return ClusterSnapshot(
        captured_at=NOW,
        server_version="v1.28.3",
        nodes=[make_node("node-1"), make_node("node-2", instance_type="t3.medium")],
        pods=[idle, busy],
        deployments=[healthy_deployment],
        events=[make_event()],
        node_usage=[
            UsageSample(name="node-1", cpu_milli=1500, memory_bytes=6 * GIB),
            UsageSample(name="node-2", cpu_milli=200, memory_bytes=GIB),
        ],
        pod_usage=[
            UsageSample(name="idle", namespace="default", cpu_milli=100, memory_bytes=100 * MIB),
            UsageSample(name="busy", namespace="shop", cpu_milli=95, memory_bytes=50 * MIB),
        ],
    )


@pytest.fixture
def node_list_json() -> Dict[str, Any]:
    """kubectl get nodes -o json output."""
    return {
        "items": [
            {
                "metadata": {
                    "name": "node-1",
                    "labels": {"node.kubernetes.io/instance-type": "m5.large"},
                },
                "status": {
                    "capacity": {"cpu": "2", "memory": "8Gi"},
                    "conditions": [{"type": "Ready", "status": "True"}],
                    "nodeInfo": {"kubeletVersion": "v1.28.0"},
                },
            },
            {
                "metadata": {
                    "name": "node-2",
                    "labels": {"beta.kubernetes.io/instance-type": "t3.small"},
                },
                "status": {
                    "capacity": {"cpu": "4", "memory": "16Gi"},
                    "conditions": [{"type": "Ready", "status": "False"}],
                    "nodeInfo": {"kubeletVersion": "v1.28.0"},
                },
            },
            {"metadata": {"name": "node-3", "labels": {}}, "status": {}},
        ]
    }


@pytest.fixture
def pod_list_json() -> Dict[str, Any]:
    """kubectl get pods -o json output."""
    return {
        "items": [
            {
                "metadata": {
                    "name": "web-1",
                    "namespace": "default",
                    "creationTimestamp": "2024-01-01T10:00:00Z",
                    "ownerReferences": [{"kind": "ReplicaSet", "name": "web-abc"}],
                },
                "spec": {
                    "nodeName": "node-1",
                    "containers": [
                        {
                            "name": "app",
                            "image": "nginx:1.25",
                            "resources": {
                                "requests": {"cpu": "250m", "memory": "256Mi"},
                                "limits": {"cpu": "1", "memory": "1Gi"},
                            },
                            "livenessProbe": {"httpGet": {"path": "/"}},
                        },
                        {"name": "sidecar", "image": "envoy"},
                    ],
                },
                "status": {
                    "phase": "Running",
                    "conditions": [{"type": "Ready", "status": "True"}],
                    "containerStatuses": [
                        {
                            "name": "app",
                            "ready": True,
                            "restartCount": 2,
                            "lastState": {
                                "terminated": {"finishedAt": "2024-01-01T11:00:00Z"}
                            },
                        },
                        {"name": "sidecar", "ready": True, "restartCount": 0, "lastState": {}},
                    ],
                },
            },
            {"metadata": {"namespace": "default"}},
        ]
    }


@pytest.fixture
def event_list_json() -> Dict[str, Any]:
    """kubectl get events -o json output; one event is older than a day."""
    return {
        "items": [
            {
                "metadata": {"name": "web-1.1", "namespace": "default"},
                "type": "Warning",
                "reason": "BackOff",
                "message": "Back-off restarting failed container",
                "involvedObject": {"kind": "Pod", "name": "web-1", "namespace": "default"},
                "firstTimestamp": "2024-01-01T09:00:00Z",
                "lastTimestamp": "2024-01-01T11:30:00Z",
                "count": 4,
                "source": {"component": "kubelet"},
            },
            {
                "metadata": {"name": "web-1.2", "namespace": "default"},
                "type": "Normal",
                "reason": "Pulled",
                "message": "Image pulled",
                "involvedObject": {"kind": "Pod", "name": "web-1", "namespace": "default"},
                "firstTimestamp": "2023-12-30T09:00:00Z",
                "lastTimestamp": "2023-12-30T09:00:00Z",
                "count": 1,
                "source": {"component": "kubelet"},
            },
            {
                "metadata": {"name": "db-0.1", "namespace": "data"},
                "type": "Warning",
                "reason": "FailedScheduling",
                "message": "0/3 nodes are available",
                "involvedObject": {"kind": "Pod", "name": "db-0", "namespace": "data"},
                "eventTime": "2024-01-01T11:59:00.000000Z",
                "reportingComponent": "default-scheduler",
            },
        ]
    }
