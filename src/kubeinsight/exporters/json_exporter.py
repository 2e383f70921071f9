"""JSON exporter."""

import json
from pathlib import Path
from typing import List, Optional

from ..core.reporter import report_to_dict
from ..model.report import InsightReport
from ..utils.logger import get_logger
from .base import Exporter

logger = get_logger(__name__)


class JsonExporter(Exporter):
    """Export the full report as a JSON document."""

    extension = ".json"

    def export(self, report: InsightReport, filename: Optional[str] = None) -> List[Path]:
        filepath = self.output_path("k8s-cluster-data", filename)

        with open(filepath, "w") as f:
            json.dump(report_to_dict(report), f, indent=2)

        logger.info(f"Exported insight report to {filepath}")
        return [filepath]
