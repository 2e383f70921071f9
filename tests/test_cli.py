"""Test the command line interface."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from kubeinsight import __version__
from kubeinsight.cli.main import app, build_report
from kubeinsight.core.engine import InsightEngine
from kubeinsight.exceptions import DataProviderError
from kubeinsight.model.report import AnalysisType

runner = CliRunner()


@pytest.fixture
def full_report(sample_snapshot):
    return InsightEngine().run(sample_snapshot, cluster_context="prod")


class TestCommands:
    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    @patch("kubeinsight.cli.main.build_report")
    def test_cost(self, mock_build, full_report):
        mock_build.return_value = full_report

        result = runner.invoke(app, ["cost", "--context", "prod", "-n", "default", "-n", "shop"])

        assert result.exit_code == 0
        assert "Total Monthly Cost" in result.stdout
        assert "$99.07" in result.stdout
        args = mock_build.call_args[0]
        assert args[0] == [AnalysisType.COST]
        assert args[1] == "prod"
        assert args[2] == ["default", "shop"]

    @patch("kubeinsight.cli.main.build_report")
    def test_workload(self, mock_build, full_report):
        mock_build.return_value = full_report

        result = runner.invoke(app, ["workload"])

        assert result.exit_code == 0
        assert "Overall Health Score" in result.stdout
        assert "All workloads are healthy" in result.stdout

    @patch("kubeinsight.cli.main.build_report")
    def test_logs_hours(self, mock_build, full_report):
        mock_build.return_value = full_report

        result = runner.invoke(app, ["logs", "--hours", "6"])

        assert result.exit_code == 0
        assert "Error Patterns" in result.stdout
        assert mock_build.call_args[0][5] == 6

    @patch("kubeinsight.cli.main.build_report")
    def test_metrics(self, mock_build, full_report):
        mock_build.return_value = full_report

        result = runner.invoke(app, ["metrics"])

        assert result.exit_code == 0
        assert "42.5%" in result.stdout

    @patch("kubeinsight.cli.main.build_report")
    def test_recommend_filtered(self, mock_build, full_report):
        mock_build.return_value = full_report

        result = runner.invoke(app, ["recommend", "--severity", "High"])

        assert result.exit_code == 0
        assert "Overutilized" in result.stdout
        assert "Low Node Count" not in result.stdout

    @patch("kubeinsight.cli.main.build_report")
    def test_report_json_saved(self, mock_build, full_report, tmp_path):
        mock_build.return_value = full_report

        result = runner.invoke(app, ["report", "--format", "json", "--output", str(tmp_path)])

        assert result.exit_code == 0
        data = json.loads((tmp_path / "insight-report.json").read_text())
        assert data["cluster_context"] == "prod"

    @patch("kubeinsight.cli.main.build_report")
    def test_export_csv(self, mock_build, full_report, tmp_path):
        mock_build.return_value = full_report

        result = runner.invoke(
            app, ["export", "--format", "csv", "--output", str(tmp_path), "--filename", "prod"]
        )

        assert result.exit_code == 0
        assert (tmp_path / "prod-cost-analysis.csv").exists()

    @patch("kubeinsight.cli.main.build_report")
    def test_errors_exit_non_zero(self, mock_build):
        """Test failures are printed and exit with status 1."""
        mock_build.side_effect = DataProviderError("nodes", "connection refused")

        result = runner.invoke(app, ["cost"])

        assert result.exit_code == 1
        assert "Error:" in result.stdout
        assert "connection refused" in result.stdout


class TestBuildReport:
    @patch("kubeinsight.cli.main.SnapshotCollector")
    @patch("kubeinsight.cli.main.K8sClient")
    def test_wires_client_collector_and_engine(
        self, mock_client, mock_collector, sample_snapshot, tmp_path
    ):
        config_file = tmp_path / "insight.yaml"
        config_file.write_text("provider:\n  context: from-config\n  command_timeout_seconds: 5\n")
        mock_collector.return_value.collect_sync.return_value = sample_snapshot

        report = build_report([AnalysisType.COST], namespaces=["default"], config_path=config_file)

        mock_client.assert_called_once_with(context="from-config", kubeconfig=None, timeout=5)
        mock_collector.return_value.collect_sync.assert_called_once_with(
            [AnalysisType.COST], ["default"], None
        )
        assert report.cluster_context == "from-config"
        assert report.cost is not None
        assert report.workload is None
