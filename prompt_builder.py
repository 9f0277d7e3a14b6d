"""Deterministic prompt assembly for the SJM-CRI 2.0 analysis request."""

from __future__ import annotations

from typing import Dict, Union

from models import Language
from risk_score import INDEX_WEIGHTS, formula_text

ALLOWED_TAGS = ("p", "ul", "li", "strong", "h3")

LANGUAGE_DIRECTIVES: Dict[Language, str] = {
    Language.ZH: (
        "OUTPUT LANGUAGE: Simplified Chinese (简体中文). All analysis content, titles, summaries, "
        "and predictions MUST be written in Simplified Chinese."
    ),
    Language.EN: (
        "OUTPUT LANGUAGE: English. All analysis content, titles, summaries, and predictions "
        "MUST be written in English."
    ),
}

ROLE_BLOCK = (
    "# Role: Geopolitical Risk Analyst (SJM-CRI 2.0 Specialist)\n\n"
    "## Core Objective\n"
    "You are an expert AI analyst responsible for monitoring and assessing the risk of military "
    "conflict between China and Japan. Your task is to execute the **SJM-CRI 2.0 "
    "(Sino-Japanese Military Conflict Risk Index)** protocol."
)

WORKFLOW_BLOCK = (
    "## Workflow\n"
    "1. **Data Acquisition**: You have access to Google Search. You must search for:\n"
    "   - Official Travel Advisories (US/CN/JP) in the last 30 days.\n"
    "   - PLA and JSDF military movements (Taiwan Strait, East China Sea).\n"
    "   - Political rhetoric (Tokyo statements and Beijing responses).\n"
    "   - Third-party stances (EU/NATO/ASEAN).\n"
    "2. **Information Refinement**: Cross-reference sources. Prioritize official government "
    "statements and military logs over opinion pieces.\n"
    "3. **Dynamic Scoring (SJM-CRI 2.0 Model)**: Calculate the risk using the following STRICT weights."
)

INDEX_DESCRIPTIONS = {
    "I_TS": "Taiwan Strait Stability. Assess military sorties, median line crossings, and political "
    "confrontation regarding Taiwan.",
    "I_ECS": "East China Sea. Assess Coast Guard incursions (Senkaku/Diaoyu), radar lock-ons, and "
    "grey zone operations.",
    "I_SUR": "Sino-US Relations. Assess high-level comms (hotlines), sanctions, and carrier strike "
    "group deployments.",
    "I_IPS": "Internal Politics. Assess domestic economic pressure, nationalism levels, and leadership "
    "political survival needs.",
    "I_TPI": "Third Party Influence. Assess statements/actions from EU, NATO, G7, and ASEAN.",
}

MULTIPLIER_BLOCK = (
    "**M (Risk Multiplier)**:\n"
    "- Base: 1.0\n"
    "- +0.2: If active \"Reconsider Travel\" or higher warning from CN or JP.\n"
    "- +0.5: If US issues \"Do Not Travel\" or evacuates non-essential personnel.\n"
    "- +0.3: If any direct physical casualty or warning shots fired."
)

JSON_STRUCTURE = """{
  "timeline": [
    { "date": "YYYY-MM-DD", "title": "Short Headline", "summary": "Concise event summary", "category": "DIPLOMATIC" | "MILITARY" | "PUBLIC_OPINION" }
  ],
  "conflictIndex": {
    "totalScore": 0.0,
    "riskLevel": "LOW" | "MEDIUM" | "HIGH" | "CRITICAL",
    "riskMultiplier": { "value": 1.0, "reason": "Explanation of multiplier" },
    "indices": {
      "taiwanStrait": 0.0,
      "eastChinaSea": 0.0,
      "sinoUsRelation": 0.0,
      "internalPolitics": 0.0,
      "thirdParty": 0.0
    },
    "drivers": ["<p>Key driver 1...</p>", "<p>Key driver 2...</p>"],
    "mitigators": ["<p>Key mitigator 1...</p>", "<p>Key mitigator 2...</p>"]
  },
  "impulseAnalysis": "<p>Analysis of leadership impulse vs rationality...</p>",
  "impulseProbability": 0,
  "strategicAnalysis": "<p>Confirmation of militarization intent...</p>",
  "futurePrediction": "<p>Prediction of conflict trajectory...</p>",
  "surpriseAttackAnalysis": "<h3>Feasibility Analysis</h3><p>...</p>",
  "potentialTargets": ["Target 1", "Target 2"]
}"""


def coerce_language(lang: Union[Language, str]) -> Language:
    try:
        return Language((lang.value if isinstance(lang, Language) else str(lang)).strip().lower())
    except ValueError:
        raise ValueError(f"Unsupported language '{lang}'. Expected 'zh' or 'en'.") from None


def _indices_block() -> str:
    lines = ["**Indices** (each scored 0-10):"]
    for field, symbol, weight in INDEX_WEIGHTS:
        lines.append(f"- **{symbol}** ({field}) [Weight {weight:.2f}]: {INDEX_DESCRIPTIONS[symbol]}")
    return "\n".join(lines)


def _formatting_block() -> str:
    tags = ", ".join(f"`<{tag}>`" for tag in ALLOWED_TAGS)
    return (
        "**Formatting**:\n"
        f"- Use HTML tags ({tags}) for all string analysis fields.\n"
        "- Do NOT use Markdown or any other HTML tags or attributes.\n"
        "- Ensure the tone is objective, professional, and intelligence-focused."
    )


def build(user_context: str, lang: Union[Language, str]) -> str:
    """Compose the analysis prompt. Same inputs always give the same string."""
    language = coerce_language(lang)
    sections = [
        ROLE_BLOCK,
        "## Context & Hypothesis\n" f"User Context: \"{user_context}\"",
        WORKFLOW_BLOCK,
        "**Formula**:\n" + formula_text(),
        _indices_block(),
        MULTIPLIER_BLOCK,
        "## Output Requirements\n" + LANGUAGE_DIRECTIVES[language],
        _formatting_block(),
        "**JSON Structure**:\n"
        "Return a SINGLE valid JSON object and nothing else, matching this structure. "
        "impulseProbability is an integer 0-100; every index is a number 0-10.\n" + JSON_STRUCTURE,
    ]
    return "\n\n".join(sections) + "\n"


__all__ = ["ALLOWED_TAGS", "LANGUAGE_DIRECTIVES", "build", "coerce_language"]
