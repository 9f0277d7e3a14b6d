import pytest

from config import DEFAULT_MODELS, AnalysisConfig
from errors import ConfigurationError
from generators import GeminiGenerator, OpenAIGenerator, build_generator


def test_default_model_follows_provider():
    assert AnalysisConfig(provider="gemini").model == DEFAULT_MODELS["gemini"]
    assert AnalysisConfig(provider="OpenAI").model == DEFAULT_MODELS["openai"]
    assert AnalysisConfig(provider="gemini", model="custom").model == "custom"


def test_unknown_provider_rejected():
    with pytest.raises(ValueError):
        AnalysisConfig(provider="llama")


def test_from_env_reads_gemini_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "abc")
    monkeypatch.setenv("CRI_ENABLE_SEARCH", "false")
    monkeypatch.setenv("CRI_RENDERERS", "report_markdown, ")
    config = AnalysisConfig.from_env(provider="gemini", dotenv=False)
    assert config.api_key == "abc"
    assert config.has_credentials
    assert config.enable_search is False
    assert config.renderers == ("report_markdown",)


def test_from_env_openai_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    config = AnalysisConfig.from_env(provider="openai", dotenv=False)
    assert config.provider == "openai"
    assert config.api_key == "sk-test"


def test_build_generator_requires_credentials():
    with pytest.raises(ConfigurationError):
        build_generator(AnalysisConfig(api_key="  "))


def test_build_generator_selects_provider():
    assert isinstance(build_generator(AnalysisConfig(api_key="k", provider="gemini")), GeminiGenerator)
    assert isinstance(build_generator(AnalysisConfig(api_key="k", provider="openai")), OpenAIGenerator)
