"""Test report exporters."""

import csv
import json
from datetime import datetime, timezone

import pytest
import yaml

from kubeinsight.core.engine import InsightEngine
from kubeinsight.exporters import (
    CsvExporter,
    JsonExporter,
    PrometheusExporter,
    YamlExporter,
    get_exporter,
)
from kubeinsight.model.export import ExportFormat
from kubeinsight.model.report import AnalysisType, InsightReport
from kubeinsight.model.snapshot import ClusterSnapshot

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
NOW_MS = 1704110400000


@pytest.fixture
def report(sample_snapshot):
    report = InsightEngine().run(sample_snapshot)
    return report.model_copy(update={"generated_at": NOW})


class TestGetExporter:
    @pytest.mark.parametrize(
        "export_format, exporter_class",
        [
            (ExportFormat.JSON, JsonExporter),
            (ExportFormat.YAML, YamlExporter),
            (ExportFormat.CSV, CsvExporter),
            (ExportFormat.PROMETHEUS, PrometheusExporter),
        ],
    )
    def test_get_exporter(self, tmp_path, export_format, exporter_class):
        assert isinstance(get_exporter(export_format, tmp_path), exporter_class)

    def test_output_dir_created(self, tmp_path):
        JsonExporter(tmp_path / "nested" / "out")

        assert (tmp_path / "nested" / "out").is_dir()


class TestJsonAndYamlExporters:
    def test_json_export(self, tmp_path, report):
        [path] = JsonExporter(tmp_path).export(report, "cluster")

        assert path == tmp_path / "cluster.json"
        data = json.loads(path.read_text())
        assert data["server_version"] == "v1.28.3"
        assert len(data["cost"]["node_costs"]) == 2

    def test_default_filename_is_timestamped(self, tmp_path, report):
        [path] = JsonExporter(tmp_path).export(report)

        assert path.name.startswith("k8s-cluster-data-")
        assert path.suffix == ".json"

    def test_yaml_export(self, tmp_path, report):
        [path] = YamlExporter(tmp_path).export(report, "cluster")

        data = yaml.safe_load(path.read_text())
        assert path.suffix == ".yaml"
        assert data["workload"]["summary"]["total_deployments"] == 1


class TestCsvExporter:
    def test_writes_one_file_per_section(self, tmp_path, report):
        paths = CsvExporter(tmp_path).export(report, "prod")

        assert sorted(p.name for p in paths) == [
            "prod-cluster-events.csv",
            "prod-cost-analysis.csv",
            "prod-node-metrics.csv",
            "prod-resource-utilization.csv",
        ]

    def test_cost_file_layout(self, tmp_path, report):
        CsvExporter(tmp_path).export(report, "prod")

        with open(tmp_path / "prod-cost-analysis.csv", newline="") as f:
            rows = list(csv.reader(f))

        assert rows[0] == ["=== NODE COSTS ==="]
        assert rows[1][0] == "Node"
        assert rows[2][:3] == ["node-1", "m5.large", "69.12"]
        assert rows[4] == []
        assert rows[5] == ["=== NAMESPACE COSTS ==="]
        assert rows[7][:2] == ["default", "25.00"]

    def test_unavailable_metrics(self, tmp_path, make_node):
        """Test missing utilization is written as 'unavailable'."""
        report = InsightEngine().run(ClusterSnapshot(nodes=[make_node()]), [AnalysisType.COST])

        [path] = CsvExporter(tmp_path).export(report, "bare")

        with open(path, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[2][5:] == ["unavailable", "unavailable", "No metrics"]

    def test_sections_follow_report(self, tmp_path, sample_snapshot):
        report = InsightEngine().run(sample_snapshot, [AnalysisType.LOGS])

        paths = CsvExporter(tmp_path).export(report, "logs")

        assert [p.name for p in paths] == ["logs-cluster-events.csv"]
        with open(paths[0], newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["Reason"] == "FailedScheduling"
        assert rows[0]["Severity"] == "Critical"


class TestPrometheusExporter:
    def test_render(self, tmp_path, report):
        text = PrometheusExporter(tmp_path).render(report)

        assert "# TYPE k8s_cluster_cpu_usage_percent gauge" in text
        assert f"k8s_cluster_cpu_usage_percent 42.50 {NOW_MS}" in text
        assert f"k8s_cluster_nodes_total 2.00 {NOW_MS}" in text
        assert f'k8s_node_cpu_usage_percent{{node="node-1"}} 75.00 {NOW_MS}' in text
        assert f"k8s_cluster_monthly_cost_usd 99.07 {NOW_MS}" in text
        assert f"k8s_cluster_health_score 100.00 {NOW_MS}" in text
        assert "NaN" not in text

    def test_missing_metrics_omitted(self, tmp_path):
        report = InsightReport(generated_at=NOW)

        assert PrometheusExporter(tmp_path).render(report) == ""

    def test_export(self, tmp_path, report):
        [path] = PrometheusExporter(tmp_path).export(report, "metrics")

        assert path == tmp_path / "metrics.txt"
        assert path.read_text().endswith("\n")
