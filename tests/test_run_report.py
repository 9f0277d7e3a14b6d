import json
import logging

import pytest

import run_report
from analysis_pipeline import AnalysisPipeline
from errors import AnalysisGenerationError, ConfigurationError
from logging_utils import get_error_info


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _clear_keys(monkeypatch, tmp_path):
    for name in ("GEMINI_API_KEY", "API_KEY", "OPENAI_API_KEY", "CRI_PROVIDER", "CRI_MODEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CRI_OUTPUT_DIR", str(tmp_path))
    monkeypatch.chdir(tmp_path)


def test_missing_key_exits_with_error_sidecar(monkeypatch, tmp_path, capsys):
    _clear_keys(monkeypatch, tmp_path)
    assert run_report.main(["Drills near Yonaguni", "--lang", "en"]) == 1
    error_files = list(tmp_path.glob("cri_en_*/error.json"))
    assert len(error_files) == 1
    info = json.loads(error_files[0].read_text(encoding="utf-8"))
    assert info["error_type"] == "ConfigurationError"
    assert info["retryable"] is False


def test_generation_failure_offers_retry(monkeypatch, tmp_path, capsys):
    _clear_keys(monkeypatch, tmp_path)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")

    async def failing(self, user_context, lang):
        raise AnalysisGenerationError("Failed to generate valid analysis data structure.")

    monkeypatch.setattr(AnalysisPipeline, "request_analysis", failing)
    assert run_report.main(["ctx", "--lang", "zh"]) == 1
    out = capsys.readouterr().out
    assert "Retry" in out
    assert not list(tmp_path.glob("cri_zh_*/analysis_report.json"))
    info = json.loads(next(tmp_path.glob("cri_zh_*/error.json")).read_text(encoding="utf-8"))
    assert info["retryable"] is True


def test_status_lines_are_mirrored_into_run_log(monkeypatch, tmp_path, capsys):
    _clear_keys(monkeypatch, tmp_path)
    assert run_report.main(["Drills near Yonaguni", "--lang", "en"]) == 1
    out = capsys.readouterr().out
    assert "SJM-CRI 2.0 Analysis" in out
    log_text = next(tmp_path.glob("cri_en_*/run_log_*.log")).read_text(encoding="utf-8")
    assert "SJM-CRI 2.0 Analysis" in log_text
    assert "API Key not found" in log_text
    assert out.count("SJM-CRI 2.0 Analysis") == 1


def test_error_info_retryable_follows_exception_type():
    class StaleCredentials(ConfigurationError):
        pass

    assert get_error_info(StaleCredentials("expired"))["retryable"] is False
    assert get_error_info(AnalysisGenerationError("bad json"))["retryable"] is True
    assert get_error_info(TimeoutError("slow"))["retryable"] is True
