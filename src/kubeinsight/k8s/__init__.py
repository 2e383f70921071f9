"""Kubernetes interaction module."""

from .client import K8sClient
from .collector import SnapshotCollector
from .provider import ClusterDataProvider

__all__ = ["K8sClient", "SnapshotCollector", "ClusterDataProvider"]
