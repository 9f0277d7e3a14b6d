"""Renderer registry."""

from __future__ import annotations

from typing import List

from .base import BaseRenderer


def _normalized(name: str) -> str:
    return (name or "").strip().lower()


def get_renderer(name: str) -> BaseRenderer:
    normalized = _normalized(name)
    if normalized in {"report_markdown", "markdown", "md"}:
        from .report_markdown import ReportMarkdownRenderer

        return ReportMarkdownRenderer()
    if normalized in {"report_html", "html"}:
        from .report_html import ReportHTMLRenderer

        return ReportHTMLRenderer()
    raise ValueError(f"Unknown renderer '{name}'")


def available_renderers() -> List[str]:
    return ["report_markdown", "report_html"]
