import asyncio
import json

import pytest

from analysis_pipeline import AnalysisPipeline, request_analysis
from config import AnalysisConfig
from errors import AnalysisGenerationError, ConfigurationError
from generators import GenerationResult
from models import RiskLevel


class StubGenerator:
    def __init__(self, text="", chunks=None, exc=None):
        self.text = text
        self.chunks = chunks or []
        self.exc = exc
        self.calls = []

    async def generate(self, prompt, *, model, enable_search=True):
        self.calls.append({"prompt": prompt, "model": model, "enable_search": enable_search})
        if self.exc is not None:
            raise self.exc
        return GenerationResult(text=self.text, grounding_chunks=self.chunks)


def _config(**overrides):
    params = {"api_key": "test-key", "provider": "gemini"}
    params.update(overrides)
    return AnalysisConfig(**params)


def _payload():
    return {
        "timeline": [{"date": "2025-11-03", "title": "Radar lock-on", "summary": "Reported by MoD.",
                      "category": "MILITARY"}],
        "conflictIndex": {
            "totalScore": 1.0,
            "riskLevel": "LOW",
            "riskMultiplier": {"value": 1.5, "reason": "US advisory raised"},
            "indices": {"taiwanStrait": 8, "eastChinaSea": 7, "sinoUsRelation": 6,
                        "internalPolitics": 5, "thirdParty": 4},
            "drivers": [],
            "mitigators": [],
        },
        "impulseAnalysis": "<p>Impulse.</p>",
        "impulseProbability": 42,
        "strategicAnalysis": "<p>Strategy.</p>",
        "futurePrediction": "<p>Outlook.</p>",
        "surpriseAttackAnalysis": "<h3>Feasibility</h3><p>Moderate.</p>",
        "potentialTargets": ["Senkaku"],
        "sources": [{"title": "Ignored", "uri": "https://example.com/model-invented"}],
    }


def _run(coro):
    return asyncio.run(coro)


def test_full_pipeline_produces_scored_report_with_sources():
    chunks = [
        {"web": {"uri": "https://example.com/a", "title": "A"}},
        {"web": {"uri": "https://example.com/a", "title": "A again"}},
        {"web": {"title": "no uri"}},
        {"web": {"uri": "https://example.com/b"}},
    ]
    text = "Here is the analysis:\n```json\n" + json.dumps(_payload()) + "\n```\nLet me know."
    generator = StubGenerator(text=text, chunks=chunks)
    pipeline = AnalysisPipeline(_config(), generator=generator)

    report = _run(pipeline.request_analysis("Drills near Yonaguni", "en"))

    base = 0.35 * 8 + 0.20 * 7 + 0.15 * 6 + 0.15 * 5 + 0.15 * 4
    assert report.conflict_index.total_score == round(base * 1.5, 3)
    assert report.conflict_index.risk_level is RiskLevel.CRITICAL
    assert report.impulse_probability == 42
    assert [(s.title, s.uri) for s in report.sources] == [
        ("A", "https://example.com/a"),
        ("Reference Source", "https://example.com/b"),
    ]
    assert len(generator.calls) == 1
    assert "Drills near Yonaguni" in generator.calls[0]["prompt"]
    assert generator.calls[0]["model"] == "gemini-2.5-flash"


def test_missing_credentials_raise_before_generator_call():
    generator = StubGenerator(text="{}")
    pipeline = AnalysisPipeline(_config(api_key=""), generator=generator)
    with pytest.raises(ConfigurationError):
        _run(pipeline.request_analysis("ctx", "zh"))
    assert generator.calls == []


def test_response_without_json_raises_generation_error():
    pipeline = AnalysisPipeline(_config(), generator=StubGenerator(text="I cannot help with that."))
    with pytest.raises(AnalysisGenerationError):
        _run(pipeline.request_analysis("ctx", "en"))


def test_empty_response_text_raises_generation_error():
    pipeline = AnalysisPipeline(_config(), generator=StubGenerator(text=""))
    with pytest.raises(AnalysisGenerationError):
        _run(pipeline.request_analysis("ctx", "en"))


def test_unrecognized_payload_returns_no_data_report():
    pipeline = AnalysisPipeline(_config(), generator=StubGenerator(text='{"status": "ok"}'))
    report = _run(pipeline.request_analysis("ctx", "en"))
    assert report.is_empty
    assert report.conflict_index.total_score == 0.0


def test_transport_errors_propagate_unchanged():
    boom = TimeoutError("upstream timed out")
    pipeline = AnalysisPipeline(_config(), generator=StubGenerator(exc=boom))
    with pytest.raises(TimeoutError):
        _run(pipeline.request_analysis("ctx", "en"))


def test_search_flag_forwarded():
    generator = StubGenerator(text=json.dumps(_payload()))
    pipeline = AnalysisPipeline(_config(enable_search=False), generator=generator)
    _run(pipeline.request_analysis("ctx", "en"))
    assert generator.calls[0]["enable_search"] is False


def test_concurrent_requests_are_independent():
    first = StubGenerator(text=json.dumps(_payload()))
    second = StubGenerator(text=json.dumps({"impulseProbability": 5}))

    async def both():
        return await asyncio.gather(
            AnalysisPipeline(_config(), generator=first).request_analysis("one", "en"),
            AnalysisPipeline(_config(), generator=second).request_analysis("two", "zh"),
        )

    report_one, report_two = _run(both())
    assert report_one.impulse_probability == 42
    assert report_two.impulse_probability == 5
    assert report_two.timeline == ()


def test_cancellation_propagates():
    class SlowGenerator(StubGenerator):
        async def generate(self, prompt, *, model, enable_search=True):
            await asyncio.sleep(10)
            return GenerationResult(text="{}")

    async def cancel_soon():
        task = asyncio.ensure_future(
            AnalysisPipeline(_config(), generator=SlowGenerator()).request_analysis("ctx", "en")
        )
        await asyncio.sleep(0)
        task.cancel()
        await task

    with pytest.raises(asyncio.CancelledError):
        _run(cancel_soon())


def test_module_level_wrapper_uses_given_config():
    generator = StubGenerator(text=json.dumps(_payload()))
    report = _run(request_analysis("ctx", "en", config=_config(), generator=generator))
    assert report.impulse_probability == 42
