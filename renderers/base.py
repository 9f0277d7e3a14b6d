"""Base classes for report renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from models import AnalysisReport


class BaseRenderer(ABC):
    """Shared interface for any report renderer."""

    name: str = "base"

    @abstractmethod
    def render(self, report: AnalysisReport, report_dir: str) -> List[str]:
        """Render the report into artifacts and return the written file paths."""
