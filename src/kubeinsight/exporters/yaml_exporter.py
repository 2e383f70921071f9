"""YAML exporter."""

from pathlib import Path
from typing import List, Optional

import yaml

from ..core.reporter import report_to_dict
from ..model.report import InsightReport
from ..utils.logger import get_logger
from .base import Exporter

logger = get_logger(__name__)


class YamlExporter(Exporter):
    """Export the full report as a YAML document."""

    extension = ".yaml"

    def export(self, report: InsightReport, filename: Optional[str] = None) -> List[Path]:
        filepath = self.output_path("k8s-cluster-data", filename)

        with open(filepath, "w") as f:
            yaml.dump(report_to_dict(report), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Exported insight report to {filepath}")
        return [filepath]
