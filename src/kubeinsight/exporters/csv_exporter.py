"""CSV exporter."""

import csv
from pathlib import Path
from typing import List, Optional

from ..model.events import ClassifiedEvent
from ..model.report import InsightReport
from ..utils.formatting import UNAVAILABLE
from ..utils.logger import get_logger
from .base import Exporter

logger = get_logger(__name__)

NODE_COST_HEADERS = [
    "Node",
    "Type",
    "Monthly_Cost",
    "CPU_Capacity",
    "Memory_Capacity",
    "CPU_Utilization",
    "Memory_Utilization",
    "Efficiency",
]
NAMESPACE_COST_HEADERS = [
    "Namespace",
    "Monthly_Cost",
    "Pods_Count",
    "Cost_Per_Pod",
    "CPU_Requests",
    "Memory_Requests",
]
NODE_METRICS_HEADERS = [
    "Node",
    "Status",
    "CPU_Usage",
    "CPU_Usage_Percent",
    "Memory_Usage",
    "Memory_Usage_Percent",
    "CPU_Capacity",
    "Memory_Capacity",
]
UTILIZATION_HEADERS = [
    "Type",
    "Name",
    "Namespace",
    "CPU_Utilization",
    "Memory_Utilization",
    "Verdict",
    "Recommendation",
]
EVENT_HEADERS = [
    "Timestamp",
    "Type",
    "Severity",
    "Reason",
    "Object",
    "Namespace",
    "Message",
    "Count",
    "Component",
]


def _number(value: Optional[float]) -> str:
    return UNAVAILABLE if value is None else f"{value:.2f}"


class CsvExporter(Exporter):
    """Export report sections as one CSV file each.

    Sections absent from the report are not written.
    """

    extension = ".csv"

    def export(self, report: InsightReport, filename: Optional[str] = None) -> List[Path]:
        written = []

        if report.cost is not None:
            written.append(self._export_cost(report, filename))
        if report.node_metrics:
            written.append(self._export_node_metrics(report, filename))
        if report.utilization:
            written.append(self._export_utilization(report, filename))
        if report.logs is not None:
            written.append(self._export_events(report, filename))

        logger.info(f"Exported {len(written)} CSV files to {self.output_dir}")
        return written

    def _section_path(self, prefix: str, filename: Optional[str]) -> Path:
        return self.output_path(prefix, f"{filename}-{prefix}" if filename else None)

    def _export_cost(self, report: InsightReport, filename: Optional[str]) -> Path:
        filepath = self._section_path("cost-analysis", filename)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["=== NODE COSTS ==="])
            writer.writerow(NODE_COST_HEADERS)
            for node in report.cost.node_costs:
                writer.writerow(
                    [
                        node.name,
                        node.instance_type,
                        f"{node.monthly_cost:.2f}",
                        node.cpu_capacity,
                        node.memory_capacity,
                        _number(node.cpu_utilization),
                        _number(node.memory_utilization),
                        node.efficiency.value,
                    ]
                )

            writer.writerow([])
            writer.writerow(["=== NAMESPACE COSTS ==="])
            writer.writerow(NAMESPACE_COST_HEADERS)
            for ns in report.cost.namespace_costs:
                writer.writerow(
                    [
                        ns.name,
                        f"{ns.monthly_cost:.2f}",
                        ns.pods_count,
                        f"{ns.cost_per_pod:.2f}",
                        ns.cpu_requests,
                        ns.memory_requests,
                    ]
                )
        return filepath

    def _export_node_metrics(self, report: InsightReport, filename: Optional[str]) -> Path:
        filepath = self._section_path("node-metrics", filename)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(NODE_METRICS_HEADERS)
            for node in report.node_metrics:
                writer.writerow(
                    [
                        node.name,
                        node.status,
                        node.cpu_usage,
                        _number(node.cpu_usage_percent),
                        node.memory_usage,
                        _number(node.memory_usage_percent),
                        node.cpu_capacity,
                        node.memory_capacity,
                    ]
                )
        return filepath

    def _export_utilization(self, report: InsightReport, filename: Optional[str]) -> Path:
        filepath = self._section_path("resource-utilization", filename)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(UTILIZATION_HEADERS)
            for entry in report.utilization:
                writer.writerow(
                    [
                        entry.type,
                        entry.name,
                        entry.namespace,
                        _number(entry.cpu_utilization),
                        _number(entry.memory_utilization),
                        entry.verdict.value,
                        entry.recommendation,
                    ]
                )
        return filepath

    def _export_events(self, report: InsightReport, filename: Optional[str]) -> Path:
        filepath = self._section_path("cluster-events", filename)
        events: List[ClassifiedEvent] = sorted(
            [*report.logs.critical_events, *report.logs.warning_events],
            key=lambda e: e.timestamp.isoformat() if e.timestamp else "",
            reverse=True,
        )
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(EVENT_HEADERS)
            for event in events:
                writer.writerow(
                    [
                        event.timestamp.isoformat() if event.timestamp else "",
                        event.type,
                        event.severity.value,
                        event.reason,
                        event.involved_object,
                        event.namespace,
                        event.message,
                        event.count,
                        event.source_component,
                    ]
                )
        return filepath
