"""Prometheus text exposition exporter."""

from pathlib import Path
from typing import List, Optional, Tuple

from ..model.report import InsightReport
from ..utils.logger import get_logger
from .base import Exporter

logger = get_logger(__name__)

Sample = Tuple[str, Optional[float]]


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class PrometheusExporter(Exporter):
    """Write gauges in the Prometheus text format.

    Samples without a value (metrics unavailable) are omitted rather than
    written as NaN.
    """

    extension = ".txt"

    def export(self, report: InsightReport, filename: Optional[str] = None) -> List[Path]:
        filepath = self.output_path("prometheus-metrics", filename)

        with open(filepath, "w") as f:
            f.write(self.render(report))

        logger.info(f"Exported Prometheus metrics to {filepath}")
        return [filepath]

    def render(self, report: InsightReport) -> str:
        timestamp = int(report.generated_at.timestamp() * 1000)
        lines: List[str] = []

        def gauge(name: str, help_text: str, samples: List[Sample]):
            samples = [(labels, value) for labels, value in samples if value is not None]
            if not samples:
                return
            lines.append(f"# HELP {name} {help_text}")
            lines.append(f"# TYPE {name} gauge")
            for labels, value in samples:
                lines.append(f"{name}{labels} {value:.2f} {timestamp}")

        metrics = report.cluster_metrics
        if metrics is not None:
            gauge(
                "k8s_cluster_cpu_usage_percent",
                "Cluster CPU usage percentage",
                [("", metrics.cpu_usage_percent)],
            )
            gauge(
                "k8s_cluster_memory_usage_percent",
                "Cluster memory usage percentage",
                [("", metrics.memory_usage_percent)],
            )
            gauge("k8s_cluster_nodes_total", "Total number of nodes", [("", metrics.nodes_count)])
            gauge("k8s_cluster_pods_total", "Total number of pods", [("", metrics.pods_count)])

        if report.node_metrics:
            gauge(
                "k8s_node_cpu_usage_percent",
                "Node CPU usage percentage",
                [
                    (f'{{node="{_escape(n.name)}"}}', n.cpu_usage_percent)
                    for n in report.node_metrics
                ],
            )
            gauge(
                "k8s_node_memory_usage_percent",
                "Node memory usage percentage",
                [
                    (f'{{node="{_escape(n.name)}"}}', n.memory_usage_percent)
                    for n in report.node_metrics
                ],
            )

        if report.cost is not None:
            gauge(
                "k8s_cluster_monthly_cost_usd",
                "Estimated monthly cost in USD",
                [("", report.cost.total_monthly_cost)],
            )

        if report.workload is not None:
            gauge(
                "k8s_cluster_health_score",
                "Overall workload health score",
                [("", report.workload.summary.overall_health_score)],
            )

        return "\n".join(lines) + "\n" if lines else ""
