"""Markdown renderer for the normalized analysis report."""

from __future__ import annotations

from pathlib import Path
from typing import List

from file_utils import write_text
from models import AnalysisReport

from .base import BaseRenderer
from .templates import render_markdown


class ReportMarkdownRenderer(BaseRenderer):
    """Narrative fields stay as inline HTML, which Markdown passes through."""

    name = "report_markdown"

    def render(self, report: AnalysisReport, report_dir: str) -> List[str]:
        output_path = Path(report_dir) / "analysis_report.md"
        write_text(output_path, render_markdown(report).strip() + "\n")
        return [str(output_path)]
