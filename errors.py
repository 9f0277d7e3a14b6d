"""Error taxonomy for the conflict-risk analysis pipeline."""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for every pipeline error."""


class ConfigurationError(AnalysisError):
    """Missing or invalid generator credential. Fatal to the request."""


class ExtractionError(AnalysisError):
    """No JSON-like span in the generator response. Absorbed by the extractor."""


class AnalysisGenerationError(AnalysisError):
    """The generator output could not be decoded into a report at all."""


__all__ = [
    "AnalysisError",
    "ConfigurationError",
    "ExtractionError",
    "AnalysisGenerationError",
]
