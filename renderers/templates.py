"""Templating utilities for report renderers."""

from __future__ import annotations

from typing import Any, Dict, List

from jinja2 import BaseLoader, Environment
from markupsafe import Markup

import risk_score
from models import AnalysisReport, EventCategory, RiskLevel

REPORT_TITLE = "SJM-CRI 2.0 Risk Index"
REPORT_SUBTITLE = "Sino-Japanese Military Conflict Risk Index (30-Day Rolling)"

RISK_LEVEL_COLORS = {
    RiskLevel.CRITICAL: "#dc2626",
    RiskLevel.HIGH: "#f97316",
    RiskLevel.MEDIUM: "#eab308",
    RiskLevel.LOW: "#22c55e",
}

CATEGORY_LABELS = {
    EventCategory.DIPLOMATIC: "Diplomatic",
    EventCategory.MILITARY: "Military",
    EventCategory.PUBLIC_OPINION: "Public Opinion",
    EventCategory.UNKNOWN: "Other",
}

INDEX_LABELS = {
    "taiwanStrait": "Taiwan Strait Stability",
    "eastChinaSea": "East China Sea",
    "sinoUsRelation": "Sino-US Relations",
    "internalPolitics": "Internal Politics",
    "thirdParty": "Third Party Influence",
}

MARKDOWN_ENV = Environment(
    loader=BaseLoader(),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    variable_start_string="[[",
    variable_end_string="]]",
)

HTML_ENV = Environment(
    loader=BaseLoader(),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)

MARKDOWN_TEMPLATE = MARKDOWN_ENV.from_string(
    """# [[ title ]]

_[[ subtitle ]]_

{% if no_data -%}
> No data: the generator returned no usable analysis. Scores below are defaults.

{% endif -%}
**Total risk:** [[ total_score ]] ([[ risk_level ]]) · Multiplier x[[ multiplier ]]
{% if multiplier_reason %}
_[[ multiplier_reason ]]_
{% endif %}

| Index | Weight | Score | Band |
|---|---|---|---|
{% for row in indices -%}
| [[ row.label ]] | [[ row.weight ]] | [[ row.value ]] | [[ row.band ]] |
{% endfor %}

{% if drivers -%}
## Drivers

{% for item in drivers -%}
[[ item ]]
{% endfor %}

{% endif -%}
{% if mitigators -%}
## Mitigators

{% for item in mitigators -%}
[[ item ]]
{% endfor %}

{% endif -%}
{% if timeline -%}
## Timeline

{% for event in timeline -%}
- **[[ event.date or 'Undated' ]]** · [[ event.category ]] · [[ event.title ]]: [[ event.summary ]]
{% endfor %}

{% endif -%}
## Impulse Analysis (probability [[ impulse_probability ]]%)

[[ impulse_analysis ]]

## Strategic Analysis

[[ strategic_analysis ]]

## Future Prediction

[[ future_prediction ]]

## Surprise Attack Analysis

[[ surprise_attack_analysis ]]
{% if potential_targets %}

**Potential targets:** [[ potential_targets | join(', ') ]]
{% endif %}
{% if sources %}

## Sources

{% for source in sources -%}
- [[ "[" + source.title + "](" + source.uri + ")" ]]
{% endfor %}
{% endif %}
"""
)

HTML_TEMPLATE = HTML_ENV.from_string(
    """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
</head>
<body>
<header>
<h1>{{ title }}</h1>
<p>{{ subtitle }}</p>
{% if no_data %}
<p class="no-data">No data: the generator returned no usable analysis.</p>
{% endif %}
</header>
<section class="risk-index">
<p class="total" style="color: {{ risk_color }}">{{ total_score }} <strong>{{ risk_level }}</strong></p>
<p class="multiplier">Multiplier x{{ multiplier }}{% if multiplier_reason %}: {{ multiplier_reason }}{% endif %}</p>
<table>
{% for row in indices %}
<tr><td>{{ row.label }} ({{ row.weight }})</td><td style="color: {{ row.color }}">{{ row.value }}</td></tr>
{% endfor %}
</table>
{% if drivers %}
<h2>Drivers</h2>
{% for item in drivers %}{{ item }}{% endfor %}
{% endif %}
{% if mitigators %}
<h2>Mitigators</h2>
{% for item in mitigators %}{{ item }}{% endfor %}
{% endif %}
</section>
{% if timeline %}
<section class="timeline">
<h2>Timeline</h2>
<ul>
{% for event in timeline %}
<li><time>{{ event.date }}</time> <em>{{ event.category }}</em> <strong>{{ event.title }}</strong> {{ event.summary }}</li>
{% endfor %}
</ul>
</section>
{% endif %}
<section class="analysis">
<h2>Impulse Analysis ({{ impulse_probability }}%)</h2>
{{ impulse_analysis }}
<h2>Strategic Analysis</h2>
{{ strategic_analysis }}
<h2>Future Prediction</h2>
{{ future_prediction }}
<h2>Surprise Attack Analysis</h2>
{{ surprise_attack_analysis }}
{% if potential_targets %}
<ul class="targets">{% for target in potential_targets %}<li>{{ target }}</li>{% endfor %}</ul>
{% endif %}
</section>
{% if sources %}
<section class="sources">
<h2>Sources</h2>
<ol>
{% for source in sources %}
<li><a href="{{ source.uri }}">{{ source.title }}</a></li>
{% endfor %}
</ol>
</section>
{% endif %}
</body>
</html>
"""
)


def _index_rows(report: AnalysisReport) -> List[Dict[str, Any]]:
    values = report.conflict_index.indices.model_dump(by_alias=True)
    rows = []
    for field, _, weight in risk_score.INDEX_WEIGHTS:
        value = values[field]
        band = risk_score.risk_band(value)
        rows.append(
            {
                "label": INDEX_LABELS[field],
                "weight": f"{weight:.0%}",
                "value": f"{value:.1f}",
                "band": band.value,
                "color": RISK_LEVEL_COLORS[band],
            }
        )
    return rows


def build_context(report: AnalysisReport, markup: bool = False) -> Dict[str, Any]:
    """Template context; ``markup=True`` marks narrative HTML safe for autoescaping."""
    wrap = Markup if markup else str
    index = report.conflict_index
    level = index.risk_level
    return {
        "title": REPORT_TITLE,
        "subtitle": REPORT_SUBTITLE,
        "no_data": report.is_empty,
        "total_score": f"{index.total_score:.2f}",
        "risk_level": level.value,
        "risk_color": RISK_LEVEL_COLORS[level],
        "multiplier": f"{index.risk_multiplier.value:.1f}",
        "multiplier_reason": index.risk_multiplier.reason,
        "indices": _index_rows(report),
        "drivers": [wrap(item) for item in index.drivers],
        "mitigators": [wrap(item) for item in index.mitigators],
        "timeline": [
            {
                "date": event.date,
                "title": event.title,
                "summary": event.summary,
                "category": CATEGORY_LABELS[event.category],
            }
            for event in report.timeline
        ],
        "impulse_probability": report.impulse_probability,
        "impulse_analysis": wrap(report.impulse_analysis),
        "strategic_analysis": wrap(report.strategic_analysis),
        "future_prediction": wrap(report.future_prediction),
        "surprise_attack_analysis": wrap(report.surprise_attack_analysis),
        "potential_targets": list(report.potential_targets),
        "sources": [{"title": source.title, "uri": source.uri} for source in report.sources],
    }


def render_markdown(report: AnalysisReport) -> str:
    return MARKDOWN_TEMPLATE.render(**build_context(report))


def render_html(report: AnalysisReport) -> str:
    return HTML_TEMPLATE.render(**build_context(report, markup=True))
