"""Locate the JSON report object inside free-form generator output.

Generators wrap the requested object in prose, markdown fences or trailing
remarks despite being told not to. Two passes recover it:

1. strict: decode from every ``{`` with ``json.JSONDecoder.raw_decode`` and
   keep the first object that carries at least one report field;
2. heuristic: the span from the first ``{`` to the last ``}``.

The heuristic is not a balanced-brace parser. Extra objects after the report
end up inside the span and fail to decode downstream, which callers treat as
a recoverable generation error.
"""

from __future__ import annotations

import json
import logging

from errors import ExtractionError
from models import REPORT_FIELDS

logger = logging.getLogger(__name__)

EMPTY_OBJECT = "{}"

_decoder = json.JSONDecoder()


def _strict_span(text: str) -> str:
    start = text.find("{")
    while start != -1:
        try:
            obj, end = _decoder.raw_decode(text, start)
        except (ValueError, RecursionError):
            pass
        else:
            if isinstance(obj, dict) and any(key in obj for key in REPORT_FIELDS):
                return text[start:end]
        start = text.find("{", start + 1)
    return ""


def _heuristic_span(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return ""
    return text[start:end + 1]


def find_json_span(raw_text: str) -> str:
    """Return the candidate JSON substring or raise ``ExtractionError``."""
    text = raw_text or ""
    span = _strict_span(text)
    if span:
        return span
    span = _heuristic_span(text)
    if span:
        logger.debug("Strict JSON scan found no report object; using brace heuristic")
        return span
    raise ExtractionError("No JSON object found in generator response")


def extract(raw_text: str) -> str:
    """Best-effort candidate; falls back to ``"{}"`` so normalization always runs."""
    try:
        return find_json_span(raw_text)
    except ExtractionError as exc:
        preview = (raw_text or "")[:200].replace("\n", " ")
        logger.warning(f"{exc}; substituting empty object. Response preview: {preview!r}")
        return EMPTY_OBJECT


__all__ = ["EMPTY_OBJECT", "extract", "find_json_span"]
