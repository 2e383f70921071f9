"""Export-related models."""

from enum import Enum


class ExportFormat(str, Enum):
    """Supported export formats."""

    JSON = "json"
    YAML = "yaml"
    CSV = "csv"
    PROMETHEUS = "prometheus"
