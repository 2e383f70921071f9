"""Insight report exporters."""

from pathlib import Path

from ..model.export import ExportFormat
from .base import Exporter
from .csv_exporter import CsvExporter
from .json_exporter import JsonExporter
from .prometheus_exporter import PrometheusExporter
from .yaml_exporter import YamlExporter

EXPORTERS = {
    ExportFormat.JSON: JsonExporter,
    ExportFormat.YAML: YamlExporter,
    ExportFormat.CSV: CsvExporter,
    ExportFormat.PROMETHEUS: PrometheusExporter,
}


def get_exporter(export_format: ExportFormat, output_dir: Path) -> Exporter:
    """Exporter instance for a format."""
    return EXPORTERS[export_format](output_dir)


__all__ = [
    "Exporter",
    "CsvExporter",
    "JsonExporter",
    "PrometheusExporter",
    "YamlExporter",
    "EXPORTERS",
    "get_exporter",
]
