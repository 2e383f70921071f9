"""Base exporter class."""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..model.report import InsightReport

TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


class Exporter(ABC):
    """Base class for insight report exporters."""

    extension = ""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def export(self, report: InsightReport, filename: Optional[str] = None) -> List[Path]:
        """Write the report and return the files created."""
        pass

    def output_path(self, prefix: str, filename: Optional[str] = None) -> Path:
        """Path for a file, defaulting to a timestamped name."""
        if not filename:
            filename = f"{prefix}-{datetime.now().strftime(TIMESTAMP_FORMAT)}"
        if not filename.endswith(self.extension):
            filename += self.extension
        return self.output_dir / filename
