"""Insight report rendering."""

import json
from typing import Any, Dict, List

import yaml

from ..model.report import InsightReport, ReportFormat
from ..utils.formatting import format_currency, format_percent
from ..utils.logger import get_logger

logger = get_logger(__name__)

TOP_ENTRIES = 10


def report_to_dict(report: InsightReport) -> Dict[str, Any]:
    """Plain, JSON-compatible representation of a report."""
    return report.model_dump(mode="json")


class InsightReporter:
    """Renders an InsightReport as text, JSON or YAML."""

    def render(self, report: InsightReport, output_format: ReportFormat) -> str:
        logger.info(f"Rendering insight report as {output_format.value}")

        if output_format == ReportFormat.JSON:
            return json.dumps(report_to_dict(report), indent=2)
        elif output_format == ReportFormat.YAML:
            return yaml.dump(report_to_dict(report), default_flow_style=False, sort_keys=False)
        else:
            return self._format_text_report(report)

    def _format_text_report(self, report: InsightReport) -> str:
        lines = []
        lines.append("=" * 80)
        lines.append("KUBERNETES CLUSTER INSIGHT REPORT")
        lines.append("=" * 80)
        lines.append(f"Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M:%S')}")
        if report.cluster_context:
            lines.append(f"Context: {report.cluster_context}")
        if report.server_version:
            lines.append(f"Server Version: {report.server_version}")
        lines.append("")

        if report.cost is not None:
            lines.extend(self._cost_section(report))
        if report.workload is not None:
            lines.extend(self._workload_section(report))
        if report.logs is not None:
            lines.extend(self._logs_section(report))
        if report.cluster_metrics is not None or report.utilization:
            lines.extend(self._utilization_section(report))
        if report.recommendations:
            lines.extend(self._recommendations_section(report))

        if report.warnings:
            lines.append("WARNINGS")
            lines.append("-" * 40)
            for warning in report.warnings:
                lines.append(f"  ! {warning}")
            lines.append("")

        return "\n".join(lines)

    def _cost_section(self, report: InsightReport) -> List[str]:
        cost = report.cost
        lines = ["COST ANALYSIS", "-" * 40]
        lines.append(f"Total Monthly Cost: {format_currency(cost.total_monthly_cost)}")
        lines.append(f"Potential Savings: {format_currency(cost.total_potential_savings)}")

        if cost.node_costs:
            lines.append("\nNodes:")
            for node in cost.node_costs:
                lines.append(
                    f"  {node.name} ({node.instance_type}): "
                    f"{format_currency(node.monthly_cost)}, "
                    f"CPU {format_percent(node.cpu_utilization)}, "
                    f"Memory {format_percent(node.memory_utilization)}, "
                    f"{node.efficiency.value}"
                )

        if cost.namespace_costs:
            lines.append(f"\nNamespaces (top {TOP_ENTRIES}):")
            for ns in cost.namespace_costs[:TOP_ENTRIES]:
                lines.append(
                    f"  {ns.name}: {format_currency(ns.monthly_cost)} "
                    f"({ns.pods_count} pods, {format_currency(ns.cost_per_pod)}/pod)"
                )

        if cost.underutilized_resources:
            lines.append("\nUnderutilized Pods:")
            for resource in cost.underutilized_resources[:TOP_ENTRIES]:
                lines.append(
                    f"  {resource.namespace}/{resource.name}: waste CPU {resource.cpu_waste}, "
                    f"Memory {resource.memory_waste} "
                    f"({format_currency(resource.estimated_monthly_savings)}/month)"
                )

        if cost.cost_optimizations:
            lines.append("\nOptimizations:")
            for optimization in cost.cost_optimizations:
                lines.append(
                    f"  [{optimization.priority.value}] {optimization.type}: "
                    f"{optimization.description}"
                )
                lines.append(f"    ➤ {optimization.action}")
        lines.append("")
        return lines

    def _workload_section(self, report: InsightReport) -> List[str]:
        summary = report.workload.summary
        lines = ["WORKLOAD HEALTH", "-" * 40]
        lines.append(f"Overall Health Score: {summary.overall_health_score}/100")
        lines.append(f"Critical Issues: {summary.critical_issues}")
        lines.append(
            f"Deployments: {summary.healthy_deployments}/{summary.total_deployments} healthy"
        )
        lines.append(
            f"StatefulSets: {summary.healthy_statefulsets}/{summary.total_statefulsets} healthy"
        )
        lines.append(f"DaemonSets: {summary.healthy_daemonsets}/{summary.total_daemonsets} healthy")
        lines.append(f"Pods: {summary.healthy_pods}/{summary.total_pods} healthy")

        unhealthy = [h for h in report.workload.all_health() if not h.is_healthy]
        if unhealthy:
            lines.append("\nUnhealthy Workloads:")
            for health in sorted(unhealthy, key=lambda h: h.health_score)[:TOP_ENTRIES]:
                lines.append(
                    f"  {health.kind.value} {health.namespace}/{health.name}: "
                    f"{health.health_score} ({health.status.value})"
                )
                for issue in health.issues:
                    lines.append(f"    • {issue}")
        lines.append("")
        return lines

    def _logs_section(self, report: InsightReport) -> List[str]:
        logs = report.logs
        lines = ["EVENT ANALYSIS", "-" * 40]
        lines.append(f"Critical Events: {len(logs.critical_events)}")
        lines.append(f"Warning Events: {len(logs.warning_events)}")
        lines.append(f"Resource Events: {len(logs.resource_events)}")
        lines.append(f"Security Events: {len(logs.security_events)}")

        if logs.error_patterns:
            lines.append("\nError Patterns:")
            for pattern in logs.error_patterns[:TOP_ENTRIES]:
                lines.append(
                    f"  {pattern.pattern} x{pattern.count} ({pattern.severity.value}): "
                    f"{pattern.description}"
                )
                lines.append(f"    ➤ {pattern.recommendation}")

        if logs.security_events:
            lines.append("\nSecurity:")
            for event in logs.security_events[:TOP_ENTRIES]:
                lines.append(f"  ⚠️  [{event.risk_level}] {event.object}: {event.description}")

        if report.pod_log_summaries:
            lines.append("\nPods With Findings:")
            for summary in report.pod_log_summaries[:TOP_ENTRIES]:
                lines.append(
                    f"  {summary.namespace}/{summary.pod_name}: "
                    f"{summary.error_count} errors, {summary.warning_count} warnings"
                )
        lines.append("")
        return lines

    def _utilization_section(self, report: InsightReport) -> List[str]:
        lines = ["RESOURCE UTILIZATION", "-" * 40]
        metrics = report.cluster_metrics
        if metrics is not None:
            lines.append(
                f"CPU: {metrics.total_cpu_usage} / {metrics.total_cpu_capacity} "
                f"({format_percent(metrics.cpu_usage_percent)})"
            )
            lines.append(
                f"Memory: {metrics.total_memory_usage} / {metrics.total_memory_capacity} "
                f"({format_percent(metrics.memory_usage_percent)})"
            )
            lines.append(
                f"Nodes: {metrics.nodes_count}, Pods: {metrics.pods_count}, "
                f"Namespaces: {metrics.namespaces_count}"
            )
        else:
            lines.append("Metrics: unavailable")

        flagged = [u for u in report.utilization if u.verdict.value != "optimal"]
        if flagged:
            lines.append("\nPods Outside Target Range:")
            for entry in flagged[:TOP_ENTRIES]:
                lines.append(
                    f"  {entry.namespace}/{entry.name}: CPU {entry.cpu_utilization:.1f}%, "
                    f"Memory {entry.memory_utilization:.1f}% ({entry.verdict.value})"
                )
        lines.append("")
        return lines

    def _recommendations_section(self, report: InsightReport) -> List[str]:
        lines = ["RECOMMENDATIONS", "-" * 40]
        for rec in report.recommendations:
            lines.append(f"  [{rec.severity.value}] {rec.title} ({rec.type})")
            lines.append(f"    {rec.description}")
            lines.append(f"    ➤ {rec.action}")
        lines.append("")
        return lines
