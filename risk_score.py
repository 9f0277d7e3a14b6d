"""Deterministic SJM-CRI 2.0 composite risk scoring.

This module is the single source of truth for the index weights and the
risk-level cut-offs. Prompt text and renderers read them from here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union

from models import RiskIndices, RiskLevel

INDEX_WEIGHTS: Tuple[Tuple[str, str, float], ...] = (
    # (wire field, formula symbol, weight)
    ("taiwanStrait", "I_TS", 0.35),
    ("eastChinaSea", "I_ECS", 0.20),
    ("sinoUsRelation", "I_SUR", 0.15),
    ("internalPolitics", "I_IPS", 0.15),
    ("thirdParty", "I_TPI", 0.15),
)

# Inclusive lower bounds, checked highest first.
RISK_THRESHOLDS: Tuple[Tuple[float, RiskLevel], ...] = (
    (8.0, RiskLevel.CRITICAL),
    (6.0, RiskLevel.HIGH),
    (4.0, RiskLevel.MEDIUM),
)

INDEX_MIN = 0.0
INDEX_MAX = 10.0
MULTIPLIER_FLOOR = 1.0
SCORE_PRECISION = 3
# Only absorbs float noise in the weighted sum; far below the stored precision.
CLASSIFY_PRECISION = 9


@dataclass(frozen=True)
class RiskScore:
    total_score: float
    risk_level: RiskLevel


def clamp_index(value: float) -> float:
    return max(INDEX_MIN, min(INDEX_MAX, float(value)))


def clamp_multiplier(value: float) -> float:
    return max(MULTIPLIER_FLOOR, float(value))


def _index_values(indices: Union[RiskIndices, Mapping[str, Any]]) -> Mapping[str, Any]:
    if isinstance(indices, RiskIndices):
        return indices.model_dump(by_alias=True)
    return indices


def base_score(indices: Union[RiskIndices, Mapping[str, Any]]) -> float:
    """Weighted sum of the clamped sub-indices (missing ones count as 0)."""
    values = _index_values(indices)
    return sum(weight * clamp_index(values.get(field) or 0.0) for field, _, weight in INDEX_WEIGHTS)


def classify(total: float) -> RiskLevel:
    for lower_bound, level in RISK_THRESHOLDS:
        if total >= lower_bound:
            return level
    return RiskLevel.LOW


def risk_band(value: float) -> RiskLevel:
    """Level for any 0-10 figure (total or single index) for presentation."""
    return classify(float(value))


def score(indices: Union[RiskIndices, Mapping[str, Any]], multiplier: float = 1.0) -> RiskScore:
    total = base_score(indices) * clamp_multiplier(multiplier)
    return RiskScore(
        total_score=round(total, SCORE_PRECISION),
        risk_level=classify(round(total, CLASSIFY_PRECISION)),
    )


def formula_text() -> str:
    """Human-readable formula built from ``INDEX_WEIGHTS``."""
    terms = " + ".join(f"({weight:.2f} * {symbol})" for _, symbol, weight in INDEX_WEIGHTS)
    return f"Base_Score = {terms}\nTotal_Risk = Base_Score * M"


__all__ = [
    "INDEX_WEIGHTS",
    "RISK_THRESHOLDS",
    "RiskScore",
    "base_score",
    "classify",
    "clamp_index",
    "clamp_multiplier",
    "formula_text",
    "risk_band",
    "score",
]
