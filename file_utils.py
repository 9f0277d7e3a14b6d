"""
File utilities for the CRI analysis workflow.

Handles report directory creation, atomic JSON/text saves and dispatch to
the configured renderers.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Dict, Iterable, List, Optional

from config import DEFAULT_OUTPUT_DIR, DEFAULT_RENDERERS
from models import AnalysisReport
from renderers import get_renderer

logger = logging.getLogger(__name__)


def compute_content_sha(content: str) -> str:
    return hashlib.sha256((content or "").encode("utf-8")).hexdigest()


def _atomic_write_text(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("w", delete=False, encoding="utf-8", dir=str(path.parent)) as tmp:
        tmp.write(data)
        tmp_name = tmp.name
    os.replace(tmp_name, path)


def write_text(path: Path, content: str) -> None:
    _atomic_write_text(path, content)


def write_json(path: Path, payload: Any) -> None:
    serialized = json.dumps(payload, indent=2, ensure_ascii=False)
    _atomic_write_text(path, serialized)


class ReportFileManager:
    def __init__(self, base_output_dir: str = DEFAULT_OUTPUT_DIR):
        self.base_output_dir = base_output_dir

    def create_report_directory(self, user_context: str, lang: str) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        slug = "".join(c.lower() if c.isalnum() else "_" for c in user_context)[:24]
        path = Path(self.base_output_dir) / f"cri_{lang}_{timestamp}_{slug}"
        path.mkdir(parents=True, exist_ok=True)
        return str(path)

    def save_report(
        self,
        report: AnalysisReport,
        report_dir: str,
        renderers: Iterable[str] = DEFAULT_RENDERERS,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        """Write ``analysis_report.json`` + ``metadata.json`` and run each renderer."""
        base = Path(report_dir)
        payload = report.to_payload()
        write_json(base / "analysis_report.json", payload)

        meta = {
            "generated_at": datetime.now().isoformat(),
            "content_sha": compute_content_sha(json.dumps(payload, sort_keys=True, ensure_ascii=False)),
            "total_score": report.conflict_index.total_score,
            "risk_level": report.conflict_index.risk_level.value,
            "statistics": {
                "timeline_events": len(report.timeline),
                "potential_targets": len(report.potential_targets),
                "source_count": len(report.sources),
            },
            "no_data": report.is_empty,
        }
        meta.update(metadata or {})
        write_json(base / "metadata.json", meta)

        written = [str(base / "analysis_report.json"), str(base / "metadata.json")]
        for renderer_name in renderers:
            try:
                renderer = get_renderer(renderer_name)
            except ValueError:
                logger.warning(f"Skipping unknown renderer '{renderer_name}'")
                continue
            written.extend(renderer.render(report, report_dir))
        logger.info(f"Saved {len(written)} report artifacts to {report_dir}")
        return written

    def save_error(self, report_dir: str, error_info: Dict[str, Any]) -> str:
        path = Path(report_dir) / "error.json"
        write_json(path, error_info)
        return str(path)


__all__ = ["ReportFileManager", "compute_content_sha", "write_json", "write_text"]
