"""Typed access to cluster state through kubectl JSON output."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar

from pydantic import ValidationError

from ..exceptions import DataProviderError, MetricsUnavailableError
from ..model.snapshot import (
    DEFAULT_INSTANCE_TYPE,
    ClusterEvent,
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
from ..utils.formatting import parse_cpu, parse_memory
from ..utils.logger import get_logger
from .client import K8sClient

logger = get_logger(__name__)

METRICS_API = "/apis/metrics.k8s.io/v1beta1"
INSTANCE_TYPE_LABELS = ["node.kubernetes.io/instance-type", "beta.kubernetes.io/instance-type"]

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as emitted by the API server."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value}")
        return None


def parse_quantities(resources: Optional[Dict[str, Any]]) -> Optional[ResourceQuantities]:
    """Requests or limits block of a container, None when absent."""
    if not resources:
        return None
    return ResourceQuantities(
        cpu_milli=parse_cpu(resources.get("cpu")),
        memory_bytes=parse_memory(resources.get("memory")),
    )


def parse_containers(pod_spec: Dict[str, Any]) -> List[ContainerSpec]:
    containers = []
    for container in pod_spec.get("containers", []):
        resources = container.get("resources", {})
        containers.append(
            ContainerSpec(
                name=container["name"],
                image=container.get("image", ""),
                requests=parse_quantities(resources.get("requests")),
                limits=parse_quantities(resources.get("limits")),
                has_liveness_probe="livenessProbe" in container,
                has_readiness_probe="readinessProbe" in container,
            )
        )
    return containers


def parse_conditions(status: Dict[str, Any]) -> Dict[str, str]:
    return {c["type"]: c.get("status", "Unknown") for c in status.get("conditions", [])}


def parse_node(item: Dict[str, Any]) -> NodeState:
    metadata = item["metadata"]
    status = item.get("status", {})
    labels = metadata.get("labels", {})

    instance_type = DEFAULT_INSTANCE_TYPE
    for label in INSTANCE_TYPE_LABELS:
        if label in labels:
            instance_type = labels[label]
            break

    capacity = status.get("capacity", {})
    return NodeState(
        name=metadata["name"],
        instance_type=instance_type,
        cpu_capacity_milli=parse_cpu(capacity.get("cpu")) or 0,
        memory_capacity_bytes=parse_memory(capacity.get("memory")) or 0,
        conditions=parse_conditions(status),
        kubelet_version=status.get("nodeInfo", {}).get("kubeletVersion", ""),
    )


def parse_pod(item: Dict[str, Any]) -> PodState:
    metadata = item["metadata"]
    status = item.get("status", {})

    container_statuses = []
    for cs in status.get("containerStatuses", []):
        terminated = cs.get("lastState", {}).get("terminated") or {}
        container_statuses.append(
            ContainerStatus(
                name=cs["name"],
                ready=cs.get("ready", False),
                restart_count=cs.get("restartCount", 0),
                last_terminated_at=parse_timestamp(terminated.get("finishedAt")),
            )
        )

    return PodState(
        name=metadata["name"],
        namespace=metadata.get("namespace", "default"),
        phase=status.get("phase", "Unknown"),
        containers=parse_containers(item.get("spec", {})),
        container_statuses=container_statuses,
        owner_references=[
            OwnerReference(kind=ref["kind"], name=ref["name"])
            for ref in metadata.get("ownerReferences", [])
        ],
        conditions=parse_conditions(status),
        node_name=item.get("spec", {}).get("nodeName"),
        created_at=parse_timestamp(metadata.get("creationTimestamp")),
    )


def parse_deployment(item: Dict[str, Any]) -> DeploymentState:
    metadata = item["metadata"]
    spec = item.get("spec", {})
    status = item.get("status", {})
    return DeploymentState(
        name=metadata["name"],
        namespace=metadata.get("namespace", "default"),
        replicas=spec.get("replicas", 1),
        ready_replicas=status.get("readyReplicas", 0),
        available_replicas=status.get("availableReplicas", 0),
        unavailable_replicas=status.get("unavailableReplicas", 0),
        containers=parse_containers(spec.get("template", {}).get("spec", {})),
        created_at=parse_timestamp(metadata.get("creationTimestamp")),
    )


def parse_statefulset(item: Dict[str, Any]) -> StatefulSetState:
    metadata = item["metadata"]
    spec = item.get("spec", {})
    status = item.get("status", {})
    return StatefulSetState(
        name=metadata["name"],
        namespace=metadata.get("namespace", "default"),
        replicas=spec.get("replicas", 1),
        ready_replicas=status.get("readyReplicas", 0),
        current_replicas=status.get("currentReplicas", 0),
        volume_claim_templates=len(spec.get("volumeClaimTemplates", [])),
        containers=parse_containers(spec.get("template", {}).get("spec", {})),
        created_at=parse_timestamp(metadata.get("creationTimestamp")),
    )


def parse_daemonset(item: Dict[str, Any]) -> DaemonSetState:
    metadata = item["metadata"]
    spec = item.get("spec", {})
    status = item.get("status", {})
    return DaemonSetState(
        name=metadata["name"],
        namespace=metadata.get("namespace", "default"),
        desired_number_scheduled=status.get("desiredNumberScheduled", 0),
        current_number_scheduled=status.get("currentNumberScheduled", 0),
        number_ready=status.get("numberReady", 0),
        number_unavailable=status.get("numberUnavailable", 0),
        containers=parse_containers(spec.get("template", {}).get("spec", {})),
        created_at=parse_timestamp(metadata.get("creationTimestamp")),
    )


def parse_event(item: Dict[str, Any]) -> ClusterEvent:
    metadata = item.get("metadata", {})
    involved = item.get("involvedObject", {})
    first_seen = parse_timestamp(item.get("firstTimestamp")) or parse_timestamp(
        item.get("eventTime")
    )
    last_seen = parse_timestamp(item.get("lastTimestamp")) or first_seen
    component = (item.get("source") or {}).get("component") or item.get("reportingComponent")

    return ClusterEvent(
        type=item.get("type", "Normal"),
        reason=item.get("reason", ""),
        message=item.get("message", ""),
        involved_object=f"{involved.get('kind', '')}/{involved.get('name', '')}",
        namespace=involved.get("namespace") or metadata.get("namespace", ""),
        first_seen=first_seen or parse_timestamp(metadata.get("creationTimestamp")),
        last_seen=last_seen,
        count=item.get("count") or 1,
        source_component=component or "Unknown",
    )


def parse_usage(item: Dict[str, Any], namespaced: bool) -> UsageSample:
    """Usage of a node, or of a pod summed across its containers."""
    metadata = item["metadata"]
    if namespaced:
        usages = [c.get("usage", {}) for c in item.get("containers", [])]
    else:
        usages = [item.get("usage", {})]

    return UsageSample(
        name=metadata["name"],
        namespace=metadata.get("namespace") if namespaced else None,
        cpu_milli=sum(parse_cpu(u.get("cpu")) or 0 for u in usages),
        memory_bytes=sum(parse_memory(u.get("memory")) or 0 for u in usages),
    )


class ClusterDataProvider:
    """Lists cluster objects and metrics as snapshot models.

    ``namespace=None`` means all namespaces.
    """

    def __init__(self, client: K8sClient, clock: Callable[[], datetime] = utc_now):
        self.client = client
        self.clock = clock

    def _list(
        self,
        resource_type: str,
        parser: Callable[[Dict[str, Any]], T],
        namespace: Optional[str] = None,
        cluster_scoped: bool = False,
    ) -> List[T]:
        if cluster_scoped:
            success, data = self.client.get_json(resource_type)
        else:
            success, data = self.client.get_json(
                resource_type, namespace=namespace, all_namespaces=namespace is None
            )
        if not success:
            raise DataProviderError(resource_type, str(data).strip())

        return self._parse_items(resource_type, data, parser)

    def _parse_items(
        self, resource_type: str, data: Any, parser: Callable[[Dict[str, Any]], T]
    ) -> List[T]:
        items = []
        for item in data.get("items", []) if isinstance(data, dict) else []:
            try:
                items.append(parser(item))
            except (KeyError, TypeError, ValueError, ValidationError) as e:
                name = item.get("metadata", {}).get("name", "?") if isinstance(item, dict) else "?"
                logger.warning(f"Skipping malformed {resource_type} item {name}: {e}")

        logger.debug(f"Parsed {len(items)} {resource_type}")
        return items

    def list_nodes(self) -> List[NodeState]:
        return self._list("nodes", parse_node, cluster_scoped=True)

    def list_pods(self, namespace: Optional[str] = None) -> List[PodState]:
        return self._list("pods", parse_pod, namespace)

    def list_deployments(self, namespace: Optional[str] = None) -> List[DeploymentState]:
        return self._list("deployments", parse_deployment, namespace)

    def list_statefulsets(self, namespace: Optional[str] = None) -> List[StatefulSetState]:
        return self._list("statefulsets", parse_statefulset, namespace)

    def list_daemonsets(self, namespace: Optional[str] = None) -> List[DaemonSetState]:
        return self._list("daemonsets", parse_daemonset, namespace)

    def list_events(
        self, namespace: Optional[str] = None, since_hours: int = 24
    ) -> List[ClusterEvent]:
        """Events last seen within ``since_hours`` of now."""
        events = self._list("events", parse_event, namespace)
        cutoff = self.clock() - timedelta(hours=since_hours)

        recent = []
        for event in events:
            timestamp = event.timestamp
            if timestamp is None:
                continue
            if timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=timezone.utc)
            if timestamp >= cutoff:
                recent.append(event)

        logger.debug(f"Kept {len(recent)} of {len(events)} events from the last {since_hours}h")
        return recent

    def _metrics(self, path: str, kind: str, namespaced: bool) -> List[UsageSample]:
        success, data = self.client.get_raw(f"{METRICS_API}/{path}")
        if not success:
            raise MetricsUnavailableError(kind, str(data).strip())
        return self._parse_items(kind, data, lambda item: parse_usage(item, namespaced))

    def get_node_usage(self) -> List[UsageSample]:
        return self._metrics("nodes", "node metrics", namespaced=False)

    def get_pod_usage(self, namespace: Optional[str] = None) -> List[UsageSample]:
        path = f"namespaces/{namespace}/pods" if namespace else "pods"
        return self._metrics(path, "pod metrics", namespaced=True)

    def get_server_version(self) -> Optional[str]:
        version = self.client.get_version()
        if not version:
            return None
        return version.get("serverVersion", {}).get("gitVersion")
