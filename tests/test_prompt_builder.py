import pytest

from models import Language
from prompt_builder import ALLOWED_TAGS, LANGUAGE_DIRECTIVES, build


def test_prompt_is_deterministic():
    assert build("PLA drills near Yonaguni", "en") == build("PLA drills near Yonaguni", Language.EN)


def test_user_context_embedded_verbatim():
    context = 'Hypothesis: "blockade" <b>within</b> 30 days {x}'
    assert context in build(context, "zh")


def test_language_directive_selected():
    zh = build("ctx", "zh")
    en = build("ctx", "en")
    assert LANGUAGE_DIRECTIVES[Language.ZH] in zh
    assert LANGUAGE_DIRECTIVES[Language.EN] not in zh
    assert LANGUAGE_DIRECTIVES[Language.EN] in en


def test_formula_and_weights_present():
    prompt = build("ctx", "en")
    assert "(0.35 * I_TS) + (0.20 * I_ECS) + (0.15 * I_SUR) + (0.15 * I_IPS) + (0.15 * I_TPI)" in prompt
    assert "Total_Risk = Base_Score * M" in prompt
    assert "+0.5" in prompt


def test_output_contract_present():
    prompt = build("ctx", "en")
    assert "SINGLE valid JSON object" in prompt
    assert "Do NOT use Markdown" in prompt
    for tag in ALLOWED_TAGS:
        assert f"<{tag}>" in prompt
    for key in ("timeline", "conflictIndex", "impulseProbability", "potentialTargets"):
        assert f'"{key}"' in prompt


def test_unknown_language_rejected():
    with pytest.raises(ValueError):
        build("ctx", "fr")
