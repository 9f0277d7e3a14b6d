from __future__ import annotations

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Language(str, Enum):
    """Output language for generated analysis."""
    ZH = "zh"
    EN = "en"


class EventCategory(str, Enum):
    DIPLOMATIC = "DIPLOMATIC"
    MILITARY = "MILITARY"
    PUBLIC_OPINION = "PUBLIC_OPINION"
    UNKNOWN = "UNKNOWN"  # anything the generator invents outside the three buckets


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ReportModel(BaseModel):
    """Frozen base: snake_case attributes, camelCase wire names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TimelineEvent(ReportModel):
    date: str = ""  # YYYY-MM-DD as received
    title: str = ""
    summary: str = ""
    category: EventCategory = EventCategory.UNKNOWN


class RiskMultiplier(ReportModel):
    value: float = Field(default=1.0, ge=1.0)
    reason: str = ""


class RiskIndices(ReportModel):
    """The five SJM-CRI sub-indices, each on a 0-10 scale."""

    taiwan_strait: float = Field(default=0.0, ge=0.0, le=10.0)
    east_china_sea: float = Field(default=0.0, ge=0.0, le=10.0)
    sino_us_relation: float = Field(default=0.0, ge=0.0, le=10.0)
    internal_politics: float = Field(default=0.0, ge=0.0, le=10.0)
    third_party: float = Field(default=0.0, ge=0.0, le=10.0)


class RiskIndexData(ReportModel):
    total_score: float = Field(default=0.0, ge=0.0)
    risk_level: RiskLevel = RiskLevel.LOW
    risk_multiplier: RiskMultiplier = Field(default_factory=RiskMultiplier)
    indices: RiskIndices = Field(default_factory=RiskIndices)
    drivers: Tuple[str, ...] = ()
    mitigators: Tuple[str, ...] = ()


class Source(ReportModel):
    title: str
    uri: str = Field(min_length=1)


class AnalysisReport(ReportModel):
    """Normalized, deep-immutable output of one pipeline invocation."""

    timeline: Tuple[TimelineEvent, ...] = ()
    conflict_index: RiskIndexData = Field(default_factory=RiskIndexData)
    impulse_analysis: str = ""
    impulse_probability: int = Field(default=0, ge=0, le=100)
    strategic_analysis: str = ""
    future_prediction: str = ""
    surprise_attack_analysis: str = ""
    potential_targets: Tuple[str, ...] = ()
    sources: Tuple[Source, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True for the defaulted "no data" state (nothing usable came back)."""
        return self == AnalysisReport(sources=self.sources)

    def to_payload(self) -> dict:
        """Wire-shaped dict (camelCase keys, enum values as strings)."""
        return self.model_dump(mode="json", by_alias=True)


NARRATIVE_FIELDS: Tuple[str, ...] = (
    "impulseAnalysis",
    "strategicAnalysis",
    "futurePrediction",
    "surpriseAttackAnalysis",
)

REPORT_FIELDS: Tuple[str, ...] = (
    "timeline",
    "conflictIndex",
    "impulseAnalysis",
    "impulseProbability",
    "strategicAnalysis",
    "futurePrediction",
    "surpriseAttackAnalysis",
    "potentialTargets",
)
