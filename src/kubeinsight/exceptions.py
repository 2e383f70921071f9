"""Exceptions raised by kube-insight."""

from typing import Any, Dict, Optional


class InsightError(Exception):
    """Base exception for kube-insight."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DataProviderError(InsightError):
    """Raised when a resource kind cannot be retrieved from the cluster."""

    def __init__(
        self, resource_kind: str, message: str, details: Optional[Dict[str, Any]] = None
    ):
        self.resource_kind = resource_kind
        super().__init__(f"Failed to list {resource_kind}: {message}", details)


class MetricsUnavailableError(DataProviderError):
    """Raised when the metrics API is not served by the cluster."""


class ConfigurationError(InsightError):
    """Raised when configuration is invalid."""


class KubectlNotFoundError(RuntimeError):
    """Raised when the kubectl binary is not installed."""
