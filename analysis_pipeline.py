"""
Conflict Risk Analysis Pipeline

Single public operation: ``request_analysis(user_context, lang)``.

    PromptBuilder -> generator -> ResponseExtractor -> SchemaNormalizer
    (RiskScoreEngine) -> SourceDeduplicator -> AnalysisReport

The awaited generator call is the only suspension point. Cancelling the
awaiting task cancels that call; nothing is persisted mid-pipeline, so there
is nothing to roll back. Each invocation owns its intermediates and returns
its own frozen report.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import prompt_builder
import response_extractor
import schema_normalizer
import source_dedup
from config import AnalysisConfig
from errors import AnalysisGenerationError, ConfigurationError
from generators import GenerationResult, TextGenerator, build_generator
from logging_utils import log_exception
from models import AnalysisReport, Language

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Builds one ``AnalysisReport`` per request from a caller-owned config."""

    def __init__(self, config: AnalysisConfig, generator: Optional[TextGenerator] = None):
        self.config = config
        self._generator = generator

    @property
    def generator(self) -> TextGenerator:
        if self._generator is None:
            self._generator = build_generator(self.config)
        return self._generator

    async def request_analysis(self, user_context: str, lang: Union[Language, str]) -> AnalysisReport:
        if not self.config.has_credentials:
            raise ConfigurationError(
                "API Key not found. Please set the API key for the configured provider."
            )
        language = prompt_builder.coerce_language(lang)
        prompt = prompt_builder.build(user_context, language)
        logger.info(f"Requesting analysis ({self.config.provider}/{self.config.model}, lang={language.value})")
        logger.debug(f"Prompt ({len(prompt)} chars):\n{prompt}")

        try:
            result = await self.generator.generate(
                prompt,
                model=self.config.model,
                enable_search=self.config.enable_search,
            )
        except Exception as exc:
            log_exception(logger, exc, context="generator call", query=user_context)
            raise

        return self.ingest(result)

    def ingest(self, result: GenerationResult) -> AnalysisReport:
        """Synchronous tail of the pipeline: extract, normalize, attach sources."""
        candidate = response_extractor.extract(result.text)
        try:
            report = schema_normalizer.normalize(candidate)
        except AnalysisGenerationError:
            logger.error(f"Failed to parse JSON from generator response: {result.text[:500]!r}")
            raise

        sources = source_dedup.dedupe(result.grounding_chunks)
        report = report.model_copy(update={"sources": sources})
        if report.is_empty:
            logger.warning("Generator payload carried no usable report fields; returning no-data report")
        logger.info(
            f"Report ready: score={report.conflict_index.total_score} "
            f"level={report.conflict_index.risk_level.value} "
            f"events={len(report.timeline)} sources={len(report.sources)}"
        )
        return report


async def request_analysis(
    user_context: str,
    lang: Union[Language, str],
    config: Optional[AnalysisConfig] = None,
    generator: Optional[TextGenerator] = None,
) -> AnalysisReport:
    """Convenience wrapper building a one-off ``AnalysisPipeline``."""
    pipeline = AnalysisPipeline(config or AnalysisConfig.from_env(), generator=generator)
    return await pipeline.request_analysis(user_context, lang)


__all__ = ["AnalysisPipeline", "request_analysis"]
