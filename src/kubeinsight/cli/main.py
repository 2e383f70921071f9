"""Main CLI interface using Typer."""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..core import (
    InsightEngine,
    InsightReporter,
    determine_health_status,
    filter_recommendations,
)
from ..exporters import get_exporter
from ..k8s import ClusterDataProvider, K8sClient, SnapshotCollector
from ..model.config import InsightConfig, load_config
from ..model.cost import Priority
from ..model.export import ExportFormat
from ..model.report import AnalysisType, InsightReport, ReportFormat
from ..model.workload import HealthStatus
from ..utils.formatting import format_currency, format_percent
from ..utils.logger import get_logger, set_log_level

app = typer.Typer(
    name="kube-insight",
    help="Cost, workload health and event insight for Kubernetes clusters",
    add_completion=True,
)

console = Console()
logger = get_logger(__name__)

STATUS_STYLES = {
    HealthStatus.HEALTHY: "green",
    HealthStatus.WARNING: "yellow",
    HealthStatus.CRITICAL: "red",
}
PRIORITY_STYLES = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "cyan",
}


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _load_settings(
    config_path: Optional[Path], context: Optional[str], verbose: bool
) -> Tuple[InsightConfig, Optional[str]]:
    if verbose:
        set_log_level("DEBUG")
    config = load_config(config_path)
    return config, context or config.provider.context


def build_report(
    analyses: Iterable[AnalysisType],
    context: Optional[str] = None,
    namespaces: Optional[List[str]] = None,
    config_path: Optional[Path] = None,
    verbose: bool = False,
    since_hours: Optional[int] = None,
) -> InsightReport:
    """Collect a snapshot from the cluster and run the given analyses on it."""
    analyses = list(analyses)
    config, context = _load_settings(config_path, context, verbose)
    settings = config.provider

    client = K8sClient(
        context=context,
        kubeconfig=settings.kubeconfig,
        timeout=settings.command_timeout_seconds,
    )
    collector = SnapshotCollector(ClusterDataProvider(client), settings)
    snapshot = collector.collect_sync(analyses, namespaces or None, since_hours)

    return InsightEngine(config).run(snapshot, analyses, cluster_context=context)


def _print_warnings(report: InsightReport) -> None:
    for warning in report.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


ContextOption = typer.Option(None, "--context", "-c", help="Kubernetes context to use")
NamespaceOption = typer.Option(
    [], "--namespace", "-n", help="Namespace to analyze (repeatable, default: all namespaces)"
)
ConfigOption = typer.Option(None, "--config", help="Path to a YAML or JSON configuration file")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


@app.command()
def cost(
    context: Optional[str] = ContextOption,
    namespace: List[str] = NamespaceOption,
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """Estimate monthly cost and find waste."""
    try:
        with console.status("[bold green]Analyzing cluster cost..."):
            report = build_report([AnalysisType.COST], context, namespace, config, verbose)
        analysis = report.cost

        console.print(
            f"\n[bold]Total Monthly Cost:[/bold] {format_currency(analysis.total_monthly_cost)}"
        )
        console.print(
            f"[bold]Potential Savings:[/bold] {format_currency(analysis.total_potential_savings)}\n"
        )

        table = Table(title="Node Costs", show_header=True, header_style="bold magenta")
        table.add_column("Node", style="cyan")
        table.add_column("Type")
        table.add_column("Monthly Cost", justify="right", style="green")
        table.add_column("CPU", justify="right")
        table.add_column("Memory", justify="right")
        table.add_column("Efficiency")
        for node in analysis.node_costs:
            table.add_row(
                node.name,
                node.instance_type,
                format_currency(node.monthly_cost),
                format_percent(node.cpu_utilization),
                format_percent(node.memory_utilization),
                node.efficiency.value,
            )
        console.print(table)

        if analysis.namespace_costs:
            table = Table(title="Namespace Costs", show_header=True, header_style="bold magenta")
            table.add_column("Namespace", style="cyan")
            table.add_column("Monthly Cost", justify="right", style="green")
            table.add_column("CPU Requests", justify="right")
            table.add_column("Memory Requests", justify="right")
            table.add_column("Pods", justify="right")
            table.add_column("Cost/Pod", justify="right")
            for ns in analysis.namespace_costs:
                table.add_row(
                    ns.name,
                    format_currency(ns.monthly_cost),
                    ns.cpu_requests,
                    ns.memory_requests,
                    str(ns.pods_count),
                    format_currency(ns.cost_per_pod),
                )
            console.print(table)

        if analysis.underutilized_resources:
            table = Table(
                title="Underutilized Pods", show_header=True, header_style="bold magenta"
            )
            table.add_column("Pod", style="cyan")
            table.add_column("Namespace")
            table.add_column("CPU Waste", justify="right")
            table.add_column("Memory Waste", justify="right")
            table.add_column("Savings", justify="right", style="green")
            table.add_column("Recommendation")
            for resource in analysis.underutilized_resources:
                table.add_row(
                    resource.name,
                    resource.namespace,
                    resource.cpu_waste,
                    resource.memory_waste,
                    format_currency(resource.estimated_monthly_savings),
                    resource.recommendation,
                )
            console.print(table)

        console.print("\n[bold]Optimizations:[/bold]")
        for optimization in analysis.cost_optimizations:
            style = PRIORITY_STYLES[optimization.priority]
            console.print(
                f"  {_styled(optimization.priority.value, style)} {optimization.type}: "
                f"{optimization.description}"
            )
            console.print(f"    ➤ {optimization.action}")

        _print_warnings(report)

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def workload(
    context: Optional[str] = ContextOption,
    namespace: List[str] = NamespaceOption,
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    show_all: bool = typer.Option(False, "--all", "-a", help="Show healthy workloads too"),
):
    """Score the health of deployments, statefulsets, daemonsets and pods."""
    try:
        with console.status("[bold green]Analyzing workload health..."):
            report = build_report([AnalysisType.WORKLOAD], context, namespace, config, verbose)
        analysis = report.workload
        summary = analysis.summary

        score_style = STATUS_STYLES[determine_health_status(summary.overall_health_score)]
        console.print(
            f"\n[bold]Overall Health Score:[/bold] "
            f"{_styled(str(summary.overall_health_score), score_style)}/100"
        )
        console.print(f"[bold]Critical Issues:[/bold] {summary.critical_issues}\n")

        table = Table(title="Summary", show_header=True, header_style="bold magenta")
        table.add_column("Kind", style="cyan")
        table.add_column("Healthy", justify="right", style="green")
        table.add_column("Total", justify="right")
        table.add_row("Deployments", str(summary.healthy_deployments), str(summary.total_deployments))
        table.add_row(
            "StatefulSets", str(summary.healthy_statefulsets), str(summary.total_statefulsets)
        )
        table.add_row("DaemonSets", str(summary.healthy_daemonsets), str(summary.total_daemonsets))
        table.add_row("Pods", str(summary.healthy_pods), str(summary.total_pods))
        console.print(table)

        results = [h for h in analysis.all_health() if show_all or not h.is_healthy]
        if results:
            table = Table(title="Workloads", show_header=True, header_style="bold magenta")
            table.add_column("Kind", style="cyan")
            table.add_column("Name")
            table.add_column("Namespace")
            table.add_column("Score", justify="right")
            table.add_column("Status")
            table.add_column("Issues")
            for health in sorted(results, key=lambda h: h.health_score):
                table.add_row(
                    health.kind.value,
                    health.name,
                    health.namespace,
                    str(health.health_score),
                    _styled(health.status.value, STATUS_STYLES[health.status]),
                    "\n".join(health.issues),
                )
            console.print(table)
        else:
            console.print("[green]✓[/green] All workloads are healthy")

        _print_warnings(report)

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def logs(
    context: Optional[str] = ContextOption,
    namespace: List[str] = NamespaceOption,
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    hours: Optional[int] = typer.Option(
        None, "--hours", help="Event window in hours (default from configuration)"
    ),
):
    """Classify recent events into severities, patterns and signals."""
    try:
        with console.status("[bold green]Analyzing cluster events..."):
            report = build_report([AnalysisType.LOGS], context, namespace, config, verbose, hours)
        analysis = report.logs

        console.print(
            f"\n[bold]Critical:[/bold] {len(analysis.critical_events)}  "
            f"[bold]Warning:[/bold] {len(analysis.warning_events)}  "
            f"[bold]Resource:[/bold] {len(analysis.resource_events)}  "
            f"[bold]Security:[/bold] {len(analysis.security_events)}\n"
        )

        if analysis.error_patterns:
            table = Table(title="Error Patterns", show_header=True, header_style="bold magenta")
            table.add_column("Pattern", style="cyan")
            table.add_column("Count", justify="right")
            table.add_column("Severity")
            table.add_column("Description")
            table.add_column("Recommendation")
            for pattern in analysis.error_patterns:
                table.add_row(
                    pattern.pattern,
                    str(pattern.count),
                    pattern.severity.value,
                    pattern.description,
                    pattern.recommendation,
                )
            console.print(table)

        if analysis.resource_events:
            table = Table(title="Resource Events", show_header=True, header_style="bold magenta")
            table.add_column("Type", style="cyan")
            table.add_column("Object")
            table.add_column("Namespace")
            table.add_column("Event")
            table.add_column("Impact")
            for event in analysis.resource_events:
                table.add_row(
                    event.type,
                    event.resource_name,
                    event.namespace,
                    event.event,
                    event.impact.value,
                )
            console.print(table)

        for event in analysis.security_events:
            console.print(
                f"[red]⚠️  [{event.risk_level}][/red] {event.namespace}/{event.object}: "
                f"{event.description} ➤ {event.action}"
            )

        if report.pod_log_summaries:
            table = Table(title="Pods With Findings", show_header=True, header_style="bold magenta")
            table.add_column("Pod", style="cyan")
            table.add_column("Namespace")
            table.add_column("Status")
            table.add_column("Errors", justify="right", style="red")
            table.add_column("Warnings", justify="right", style="yellow")
            for summary in report.pod_log_summaries:
                table.add_row(
                    summary.pod_name,
                    summary.namespace,
                    summary.status,
                    str(summary.error_count),
                    str(summary.warning_count),
                )
            console.print(table)

        if not analysis.critical_events and not analysis.warning_events:
            console.print("[green]✓[/green] No critical or warning events found")

        _print_warnings(report)

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def metrics(
    context: Optional[str] = ContextOption,
    namespace: List[str] = NamespaceOption,
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """Show live usage against capacity and requests."""
    try:
        with console.status("[bold green]Reading cluster metrics..."):
            report = build_report([AnalysisType.UTILIZATION], context, namespace, config, verbose)

        cluster = report.cluster_metrics
        if cluster is None:
            console.print("[yellow]Metrics unavailable - is metrics-server installed?[/yellow]")
        else:
            console.print(
                f"\n[bold]CPU:[/bold] {cluster.total_cpu_usage} / {cluster.total_cpu_capacity} "
                f"({format_percent(cluster.cpu_usage_percent)})"
            )
            console.print(
                f"[bold]Memory:[/bold] {cluster.total_memory_usage} / "
                f"{cluster.total_memory_capacity} ({format_percent(cluster.memory_usage_percent)})"
            )
            console.print(
                f"[bold]Nodes:[/bold] {cluster.nodes_count}  [bold]Pods:[/bold] "
                f"{cluster.pods_count}  [bold]Namespaces:[/bold] {cluster.namespaces_count}\n"
            )

        if report.node_metrics:
            table = Table(title="Nodes", show_header=True, header_style="bold magenta")
            table.add_column("Node", style="cyan")
            table.add_column("Status")
            table.add_column("CPU", justify="right")
            table.add_column("CPU %", justify="right")
            table.add_column("Memory", justify="right")
            table.add_column("Memory %", justify="right")
            for node in report.node_metrics:
                table.add_row(
                    node.name,
                    node.status,
                    f"{node.cpu_usage} / {node.cpu_capacity}",
                    format_percent(node.cpu_usage_percent),
                    f"{node.memory_usage} / {node.memory_capacity}",
                    format_percent(node.memory_usage_percent),
                )
            console.print(table)

        if report.utilization:
            table = Table(title="Pod Utilization", show_header=True, header_style="bold magenta")
            table.add_column("Pod", style="cyan")
            table.add_column("Namespace")
            table.add_column("CPU %", justify="right")
            table.add_column("Memory %", justify="right")
            table.add_column("Verdict")
            table.add_column("Recommendation")
            for entry in report.utilization:
                table.add_row(
                    entry.name,
                    entry.namespace,
                    format_percent(entry.cpu_utilization),
                    format_percent(entry.memory_utilization),
                    entry.verdict.value,
                    entry.recommendation,
                )
            console.print(table)

        _print_warnings(report)

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def recommend(
    context: Optional[str] = ContextOption,
    namespace: List[str] = NamespaceOption,
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    severity: Optional[Priority] = typer.Option(
        None, "--severity", "-s", help="Only show recommendations of this severity"
    ),
    rec_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Only show recommendations of this type"
    ),
):
    """Prioritized recommendations for the cluster."""
    try:
        with console.status("[bold green]Generating recommendations..."):
            report = build_report(
                [AnalysisType.RECOMMENDATIONS], context, namespace, config, verbose
            )
        recommendations = filter_recommendations(report.recommendations, severity, rec_type)

        if not recommendations:
            console.print("[green]✓[/green] No recommendations - the cluster looks good")
            return

        table = Table(title="Recommendations", show_header=True, header_style="bold magenta")
        table.add_column("Severity")
        table.add_column("Type", style="cyan")
        table.add_column("Title")
        table.add_column("Description")
        table.add_column("Action")
        for rec in recommendations:
            table.add_row(
                _styled(rec.severity.value, PRIORITY_STYLES[rec.severity]),
                rec.type,
                rec.title,
                rec.description,
                rec.action,
            )
        console.print(table)

        _print_warnings(report)

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def report(
    context: Optional[str] = ContextOption,
    namespace: List[str] = NamespaceOption,
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    format: ReportFormat = typer.Option(
        ReportFormat.TEXT, "--format", "-f", help="Format for the insight report"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Directory to save the report in"
    ),
):
    """Run every analysis and render a complete report."""
    try:
        with console.status("[bold green]Generating insight report..."):
            insight_report = build_report(list(AnalysisType), context, namespace, config, verbose)
            report_content = InsightReporter().render(insight_report, format)

        if output is not None:
            extension_map = {
                ReportFormat.TEXT: "txt",
                ReportFormat.JSON: "json",
                ReportFormat.YAML: "yaml",
            }
            output.mkdir(parents=True, exist_ok=True)
            report_path = output / f"insight-report.{extension_map[format]}"
            with open(report_path, "w") as f:
                f.write(report_content)
            console.print(f"[green]✓[/green] Report saved to: [cyan]{report_path}[/cyan]")

        console.print(report_content, markup=False, highlight=False)

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def export(
    context: Optional[str] = ContextOption,
    namespace: List[str] = NamespaceOption,
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    format: ExportFormat = typer.Option(
        ExportFormat.JSON, "--format", "-f", help="Export format"
    ),
    output: Path = typer.Option(
        "./kube-insight-export", "--output", "-o", help="Output directory for exported files"
    ),
    filename: Optional[str] = typer.Option(
        None, "--filename", help="Base filename (default: timestamped)"
    ),
):
    """Export analysis results to files."""
    try:
        with console.status(f"[bold green]Exporting cluster data as {format.value}..."):
            insight_report = build_report(list(AnalysisType), context, namespace, config, verbose)
            files = get_exporter(format, output).export(insight_report, filename)

        for path in files:
            console.print(f"[green]✓[/green] Exported to: [cyan]{path}[/cyan]")

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]kube-insight[/bold] version {__version__}")
    console.print("Cost, workload health and event insight for Kubernetes clusters")


if __name__ == "__main__":
    app()
