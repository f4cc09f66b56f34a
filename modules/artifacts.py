"""
Portfolio Capture - Output Artifacts

Timestamped file naming and the JSON writer for parsed portfolio data.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

# Module logger
artifact_logger = logging.getLogger("portfolio_capture.artifacts")

SHORT_TIMESTAMP_FORMAT = "%m%d%y_%H%M"
LONG_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def short_timestamp(now: Optional[datetime] = None) -> str:
    """MMDDYY_HHMM, e.g. 031524_0930."""
    return (now or datetime.now()).strftime(SHORT_TIMESTAMP_FORMAT)


def long_timestamp(now: Optional[datetime] = None) -> str:
    """YYYYMMDD_HHMMSS, e.g. 20240315_093012."""
    return (now or datetime.now()).strftime(LONG_TIMESTAMP_FORMAT)


def write_json(path: Path, data: Any) -> Path:
    """Write ``data`` as 2-space indented UTF-8 JSON."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return path


class ArtifactWriter:
    """Names and writes the files produced by one run."""

    def __init__(self, output_dir: Path, timestamp: Optional[str] = None):
        self.output_dir = Path(output_dir)
        self.timestamp = timestamp or short_timestamp()
        self.written: list[Path] = []

    def ensure_dir(self) -> Path:
        if not self.output_dir.exists():
            self.output_dir.mkdir(parents=True, exist_ok=True)
            artifact_logger.info(f"Created output directory {self.output_dir}")
        return self.output_dir

    def path(self, filename: str) -> Path:
        return self.output_dir / filename

    def screenshot_path(self, label: str) -> Path:
        """``screenshot_<label>_<ts>.png``; tab labels are lowercased."""
        return self.path(f"screenshot_{label.lower()}_{self.timestamp}.png")

    @property
    def json_path(self) -> Path:
        return self.path(f"json_{self.timestamp}.json")

    @property
    def pdf_path(self) -> Path:
        return self.path(f"print_{self.timestamp}.pdf")

    def record(self, path: Path) -> Path:
        """Remember a file the run produced for the closing summary."""
        self.written.append(Path(path))
        return Path(path)

    def write_json(self, data: Any, path: Optional[Path] = None) -> Path:
        target = write_json(path or self.json_path, data)
        artifact_logger.info(f"Saved JSON data: {target.name}")
        return self.record(target)
