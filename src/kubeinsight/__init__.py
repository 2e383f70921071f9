"""Cost, workload health and event insights from Kubernetes cluster snapshots."""

__version__ = "0.1.0"
