import pytest

from models import RiskIndices, RiskLevel
from risk_score import INDEX_WEIGHTS, RISK_THRESHOLDS, base_score, classify, formula_text, risk_band, score


def _indices(ts=0.0, ecs=0.0, sur=0.0, ips=0.0, tpi=0.0):
    return {
        "taiwanStrait": ts,
        "eastChinaSea": ecs,
        "sinoUsRelation": sur,
        "internalPolitics": ips,
        "thirdParty": tpi,
    }


def test_weights_sum_to_one():
    assert sum(weight for _, _, weight in INDEX_WEIGHTS) == pytest.approx(1.0)


def test_all_tens_is_critical():
    result = score(_indices(10, 10, 10, 10, 10), 1.0)
    assert result.total_score == 10.0
    assert result.risk_level is RiskLevel.CRITICAL


def test_all_zeros_is_low():
    result = score(_indices(), 1.0)
    assert result.total_score == 0.0
    assert result.risk_level is RiskLevel.LOW


def test_weighted_formula_and_multiplier():
    indices = _indices(ts=6, ecs=5, sur=4, ips=3, tpi=2)
    expected = 0.35 * 6 + 0.20 * 5 + 0.15 * 4 + 0.15 * 3 + 0.15 * 2
    assert base_score(indices) == pytest.approx(expected)
    result = score(indices, 1.5)
    assert result.total_score == round(expected * 1.5, 3)
    assert result.risk_level is RiskLevel.HIGH


def test_accepts_model_indices():
    indices = RiskIndices(taiwan_strait=8.0, east_china_sea=8.0, sino_us_relation=8.0,
                          internal_politics=8.0, third_party=8.0)
    assert score(indices).total_score == 8.0
    assert score(indices).risk_level is RiskLevel.CRITICAL


def test_thresholds_are_inclusive_lower_bounds():
    assert classify(8.0) is RiskLevel.CRITICAL
    assert classify(7.999) is RiskLevel.HIGH
    assert classify(6.0) is RiskLevel.HIGH
    assert classify(5.999) is RiskLevel.MEDIUM
    assert classify(4.0) is RiskLevel.MEDIUM
    assert classify(3.999) is RiskLevel.LOW
    assert classify(12.5) is RiskLevel.CRITICAL


def test_inputs_are_clamped():
    result = score(_indices(ts=50, ecs=-3), 0.2)
    assert result.total_score == round(0.35 * 10, 3)


def test_score_is_deterministic():
    indices = _indices(ts=7.3, ecs=4.1, sur=6.6, ips=2.2, tpi=5.5)
    first = score(indices, 1.2)
    assert all(score(indices, 1.2) == first for _ in range(10))


def test_risk_band_uses_same_thresholds():
    for lower_bound, level in RISK_THRESHOLDS:
        assert risk_band(lower_bound) is level


def test_formula_text_mentions_every_weight():
    text = formula_text()
    for _, symbol, weight in INDEX_WEIGHTS:
        assert f"{weight:.2f} * {symbol}" in text
    assert "Total_Risk = Base_Score * M" in text


def test_level_comes_from_unrounded_total():
    value = 5.9996
    result = score(_indices(ts=value, ecs=value, sur=value, ips=value, tpi=value), 1.0)
    assert result.total_score == 6.0
    assert result.risk_level is RiskLevel.MEDIUM


def test_threshold_totals_survive_float_noise():
    result = score(_indices(ts=8, ecs=8, sur=8, ips=8, tpi=8), 1.0)
    assert result.risk_level is RiskLevel.CRITICAL
    result = score(_indices(ts=6, ecs=6, sur=6, ips=6, tpi=6), 1.0)
    assert result.risk_level is RiskLevel.HIGH
