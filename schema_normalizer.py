"""
Schema normalization for generator payloads.

Maps a loosely typed, possibly incomplete JSON payload onto ``AnalysisReport``
with safe defaults. Field-level malformation is never an error; the only
failure surfaced to callers is ``AnalysisGenerationError`` when nothing could
be decoded at all.
"""

from __future__ import annotations

import json
import logging
import math
import sys
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from bs4 import BeautifulSoup, Tag

import risk_score
import source_dedup
from errors import AnalysisGenerationError
from models import (
    NARRATIVE_FIELDS,
    REPORT_FIELDS,
    AnalysisReport,
    EventCategory,
    RiskIndexData,
    RiskIndices,
    RiskLevel,
    RiskMultiplier,
    TimelineEvent,
)
from prompt_builder import ALLOWED_TAGS

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

DROP_WITH_CONTENT = {"script", "style"}
SCORE_TOLERANCE = 0.05


# ---------------------------------------------------------------------------
# Primitive coercions
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _as_float(value: Any, default: float) -> float:
    if not _is_number(value):
        return default
    try:
        return float(value)
    except OverflowError:
        # JSON integers are unbounded; saturate so the clamps still apply.
        return sys.float_info.max if value > 0 else -sys.float_info.max


def _str_items(value: Any) -> Tuple[str, ...]:
    return tuple(item for item in _as_list(value) if isinstance(item, str))


def _coerce_enum(value: Any, enum_cls: Type[E], default: E) -> E:
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().upper())
        except ValueError:
            pass
    return default


def restrict_markup(text: str) -> str:
    """Limit narrative markup to the prompt's tag set.

    Disallowed tags are unwrapped (``script``/``style`` dropped with their
    content) and attributes removed. Clean input is returned unchanged.
    """
    if not text or "<" not in text:
        return text
    soup = BeautifulSoup(text, "html.parser")
    tags = soup.find_all(True)
    if all(tag.name in ALLOWED_TAGS and not tag.attrs for tag in tags):
        return text
    for tag in tags:
        if not isinstance(tag, Tag) or tag.decomposed:
            continue
        if tag.name in DROP_WITH_CONTENT:
            tag.decompose()
        elif tag.name not in ALLOWED_TAGS:
            tag.unwrap()
        else:
            tag.attrs = {}
    logger.debug("Stripped disallowed markup from narrative field")
    return str(soup)


def _markup(value: Any) -> str:
    return restrict_markup(_as_str(value))


# ---------------------------------------------------------------------------
# Section normalizers
# ---------------------------------------------------------------------------

def _normalize_timeline(raw: Any) -> Tuple[TimelineEvent, ...]:
    events: List[TimelineEvent] = []
    for entry in _as_list(raw):
        if not isinstance(entry, Mapping):
            continue
        category = _coerce_enum(entry.get("category"), EventCategory, EventCategory.UNKNOWN)
        if category is EventCategory.UNKNOWN and entry.get("category") not in (None, EventCategory.UNKNOWN.value):
            logger.debug(f"Unknown timeline category {entry.get('category')!r}; filed as UNKNOWN")
        events.append(
            TimelineEvent(
                date=_as_str(entry.get("date")).strip(),
                title=_as_str(entry.get("title")),
                summary=_as_str(entry.get("summary")),
                category=category,
            )
        )
    return tuple(events)


def _normalize_indices(raw: Any) -> RiskIndices:
    values = _as_mapping(raw)
    clamped = {
        field: risk_score.clamp_index(_as_float(values.get(field), 0.0))
        for field, _, _ in risk_score.INDEX_WEIGHTS
    }
    return RiskIndices.model_validate(clamped)


def _normalize_conflict_index(raw: Any) -> RiskIndexData:
    block = _as_mapping(raw)
    if not block:
        logger.info("conflictIndex missing; using default-zero index block")
    indices = _normalize_indices(block.get("indices"))
    multiplier_raw = _as_mapping(block.get("riskMultiplier"))
    multiplier = risk_score.clamp_multiplier(_as_float(multiplier_raw.get("value"), 1.0))
    result = risk_score.score(indices, multiplier)

    reported = block.get("totalScore")
    if _is_number(reported) and abs(_as_float(reported, 0.0) - result.total_score) > SCORE_TOLERANCE:
        logger.warning(
            f"Generator totalScore {reported} disagrees with recomputed {result.total_score}; "
            "keeping recomputed value"
        )
    reported_level = _coerce_enum(block.get("riskLevel"), RiskLevel, result.risk_level)
    if reported_level is not result.risk_level:
        logger.debug(f"Generator riskLevel {reported_level.value} replaced by {result.risk_level.value}")

    return RiskIndexData(
        total_score=result.total_score,
        risk_level=result.risk_level,
        risk_multiplier=RiskMultiplier(value=multiplier, reason=_as_str(multiplier_raw.get("reason"))),
        indices=indices,
        drivers=tuple(restrict_markup(item) for item in _str_items(block.get("drivers"))),
        mitigators=tuple(restrict_markup(item) for item in _str_items(block.get("mitigators"))),
    )


def _normalize_probability(raw: Any) -> int:
    if not _is_number(raw):
        return 0
    if isinstance(raw, int):
        return max(0, min(100, raw))
    return max(0, min(100, int(round(raw))))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_payload(payload: Any) -> AnalysisReport:
    """Map any decoded value onto a fully defaulted ``AnalysisReport``. Never raises."""
    if not isinstance(payload, Mapping):
        logger.warning(f"Payload is {type(payload).__name__}, not an object; defaulting every field")
        payload = {}

    narrative = {field: _markup(payload.get(field)) for field in NARRATIVE_FIELDS}
    return AnalysisReport(
        timeline=_normalize_timeline(payload.get("timeline")),
        conflict_index=_normalize_conflict_index(payload.get("conflictIndex")),
        impulse_analysis=narrative["impulseAnalysis"],
        impulse_probability=_normalize_probability(payload.get("impulseProbability")),
        strategic_analysis=narrative["strategicAnalysis"],
        future_prediction=narrative["futurePrediction"],
        surprise_attack_analysis=narrative["surpriseAttackAnalysis"],
        potential_targets=_str_items(payload.get("potentialTargets")),
        sources=source_dedup.dedupe_references(_as_list(payload.get("sources"))),
    )


def decode(candidate_json: str) -> Any:
    """Decode the extracted candidate or raise ``AnalysisGenerationError``."""
    text = (candidate_json or "").strip()
    if not text:
        raise AnalysisGenerationError("Generator returned no analysis data.")
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as exc:
        # ValueError covers JSONDecodeError and over-long integer literals.
        logger.error(f"JSON decode error: {exc}")
        raise AnalysisGenerationError("Failed to generate valid analysis data structure.") from exc
    if isinstance(data, Mapping) and not data:
        raise AnalysisGenerationError("Generator returned an empty analysis object.")
    return data


def normalize(candidate_json: str) -> AnalysisReport:
    """Decode and normalize an extracted JSON candidate."""
    return normalize_payload(decode(candidate_json))


def normalize_report(report: AnalysisReport) -> AnalysisReport:
    """Re-run normalization over an existing report (a no-op for normalized input)."""
    return normalize_payload(report.to_payload())


def missing_fields(payload: Any, fields: Optional[Iterable[str]] = None) -> List[str]:
    """Top-level report fields absent from ``payload``; used for run diagnostics."""
    present = payload if isinstance(payload, Mapping) else {}
    return [field for field in (fields or REPORT_FIELDS) if field not in present]


__all__ = [
    "decode",
    "missing_fields",
    "normalize",
    "normalize_payload",
    "normalize_report",
    "restrict_markup",
]
