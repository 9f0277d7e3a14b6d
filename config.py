"""
CRI Configuration

Explicit configuration object for the conflict-risk analysis pipeline.
Callers build an ``AnalysisConfig`` (directly or via ``from_env``) and hand it
to ``AnalysisPipeline``; nothing here is read implicitly at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

PROVIDER_GEMINI = "gemini"
PROVIDER_OPENAI = "openai"
SUPPORTED_PROVIDERS = (PROVIDER_GEMINI, PROVIDER_OPENAI)

DEFAULT_MODELS = {
    PROVIDER_GEMINI: "gemini-2.5-flash",
    PROVIDER_OPENAI: "gpt-5-mini-2025-08-07",
}
DEFAULT_SOURCE_TITLE = "Reference Source"
DEFAULT_OUTPUT_DIR = "cri_reports"
DEFAULT_RENDERERS = ("report_markdown", "report_html")


def _split_csv(raw: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class AnalysisConfig:
    """Runtime settings owned by the caller for the lifetime of a pipeline."""

    api_key: str = ""
    provider: str = PROVIDER_GEMINI
    model: str = ""
    temperature: float = 0.15
    enable_search: bool = True
    output_dir: str = DEFAULT_OUTPUT_DIR
    renderers: Tuple[str, ...] = field(default=DEFAULT_RENDERERS)
    openai_organization: Optional[str] = None

    def __post_init__(self) -> None:
        provider = (self.provider or PROVIDER_GEMINI).strip().lower()
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unknown provider '{self.provider}'. Expected one of {SUPPORTED_PROVIDERS}.")
        object.__setattr__(self, "provider", provider)
        if not self.model:
            object.__setattr__(self, "model", DEFAULT_MODELS[provider])

    @property
    def has_credentials(self) -> bool:
        return bool((self.api_key or "").strip())

    @classmethod
    def from_env(cls, provider: Optional[str] = None, dotenv: bool = True) -> "AnalysisConfig":
        """Build a config from the process environment (and ``.env`` when present)."""
        if dotenv:
            load_dotenv()
        provider = (provider or os.getenv("CRI_PROVIDER", PROVIDER_GEMINI)).strip().lower()
        if provider == PROVIDER_OPENAI:
            api_key = os.getenv("OPENAI_API_KEY", "")
        else:
            api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
        return cls(
            api_key=api_key,
            provider=provider,
            model=os.getenv("CRI_MODEL", ""),
            temperature=float(os.getenv("CRI_MODEL_TEMPERATURE", "0.15")),
            enable_search=os.getenv("CRI_ENABLE_SEARCH", "true").lower() != "false",
            output_dir=os.getenv("CRI_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
            renderers=_split_csv(os.getenv("CRI_RENDERERS", ",".join(DEFAULT_RENDERERS))),
            openai_organization=os.getenv("OPENAI_ORGANIZATION"),
        )
