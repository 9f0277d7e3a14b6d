"""Standalone HTML renderer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from file_utils import write_text
from models import AnalysisReport

from .base import BaseRenderer
from .templates import render_html

logger = logging.getLogger(__name__)


class ReportHTMLRenderer(BaseRenderer):
    name = "report_html"

    def render(self, report: AnalysisReport, report_dir: str) -> List[str]:
        output_path = Path(report_dir) / "analysis_report.html"
        write_text(output_path, render_html(report))
        logger.debug(f"Wrote {output_path}")
        return [str(output_path)]
