#!/usr/bin/env python3
"""
CLI entrypoint for the conflict-risk analysis pipeline.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import sys
from typing import List, Optional

from analysis_pipeline import AnalysisPipeline
from config import SUPPORTED_PROVIDERS, AnalysisConfig
from errors import AnalysisGenerationError, ConfigurationError
from file_utils import ReportFileManager
from logging_utils import announce, get_error_info, log_exception, setup_run_logging
from models import Language


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate an SJM-CRI 2.0 conflict-risk report.")
    parser.add_argument("context", type=str, help="Hypothesis or context for the analysis.")
    parser.add_argument("--lang", choices=[lang.value for lang in Language], default=Language.EN.value)
    parser.add_argument("--provider", choices=list(SUPPORTED_PROVIDERS), default=None)
    parser.add_argument("--no-search", action="store_true", help="Disable search grounding.")
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = AnalysisConfig.from_env(provider=args.provider)
    if args.no_search:
        config = dataclasses.replace(config, enable_search=False)

    file_manager = ReportFileManager(config.output_dir)
    report_dir = file_manager.create_report_directory(args.context, args.lang)
    run_logger, log_path = setup_run_logging(report_dir, args.context, debug=args.debug)

    announce("🛰  SJM-CRI 2.0 Analysis")
    announce(f"📝 Context: {args.context}")
    announce(f"🌐 Language: {args.lang} · Provider: {config.provider} ({config.model})")
    announce("=" * 60)

    pipeline = AnalysisPipeline(config)
    try:
        report = asyncio.run(pipeline.request_analysis(args.context, args.lang))
    except ConfigurationError as exc:
        file_manager.save_error(report_dir, get_error_info(exc, {"provider": config.provider}))
        announce(f"❌ {exc}")
        return 1
    except AnalysisGenerationError as exc:
        log_exception(run_logger, exc, context="request_analysis", query=args.context)
        file_manager.save_error(report_dir, get_error_info(exc, {"provider": config.provider}))
        announce(f"❌ Analysis failed: {exc}")
        announce("↻ Retry: run the same command again.")
        return 1
    except Exception as exc:
        log_exception(run_logger, exc, context="generator transport", query=args.context)
        file_manager.save_error(report_dir, get_error_info(exc, {"provider": config.provider}))
        announce(f"❌ Generator request failed: {exc}")
        announce("↻ Retry: run the same command again.")
        return 1

    try:
        file_manager.save_report(report, report_dir, renderers=config.renderers)
    except Exception as exc:
        log_exception(run_logger, exc, context="save_report", query=args.context)
        announce("❌ Failed to persist report artifacts.")
        return 1

    index = report.conflict_index
    if report.is_empty:
        announce("\n⚠️  No data: the generator returned no usable analysis fields.")
    announce("\n✅ Report ready.")
    announce(f"📁 Output directory: {report_dir}")
    announce(f"📄 Run log: {log_path}")
    announce(f"🧭 Risk: {index.total_score:.2f} ({index.risk_level.value})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
