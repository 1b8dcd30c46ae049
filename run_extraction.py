#!/usr/bin/env python3
"""
Command-line entry point for TypeScript exported-function extraction.

Extracts the exported function signatures of a TypeScript file or project
and writes one JSON line per source file, followed by a JSON run report.

Usage:
    python run_extraction.py src/
    python run_extraction.py src/api.ts --output-file out/api.jsonl
    python run_extraction.py src/ --config tsanalyzer.yml --with-target-types
"""

import argparse
import json
import logging
import os
import sys
import time
from dataclasses import replace
from typing import Any, Dict

from core.run_artifacts import build_run_report, write_run_report
from core.settings import AnalyzerSettings, ConfigValidationError, load_analyzer_settings, resolve_log_level
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id, source_scope
from tsanalyzer.extractor import ExtractionStats, extract_file, iter_extract_directory
from tsanalyzer.models import FileExtraction
from tsanalyzer.parser import ParserUnavailableError
from tsanalyzer.type_mapping import target_signature

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="TypeScript exported-function signature extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_extraction.py ./src\n"
            "  python run_extraction.py ./src --all-functions --output-file out/all.jsonl\n"
        )
    )

    parser.add_argument(
        "source",
        help="TypeScript file or directory to extract from."
    )
    parser.add_argument(
        "--output-file",
        default="output/functions.jsonl",
        help="Path for the JSONL output. Default: output/functions.jsonl"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML settings file."
    )
    parser.add_argument(
        "--all-functions",
        action="store_true",
        default=False,
        help="Also extract top-level functions that are not exported."
    )
    parser.add_argument(
        "--no-docs",
        action="store_true",
        default=False,
        help="Do not attach JSDoc comments."
    )
    parser.add_argument(
        "--with-target-types",
        action="store_true",
        default=False,
        help="Add normalized target types next to each function."
    )
    parser.add_argument(
        "--report-dir",
        default="output/run_reports",
        help="Directory for the JSON run report. Default: output/run_reports"
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=None,
        help="Fail on invalid settings instead of falling back to defaults."
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=False,
        help="Stop at the first file that cannot be extracted."
    )

    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> AnalyzerSettings:
    """Load settings and apply command-line overrides."""
    settings = load_analyzer_settings(args.config, strict=args.strict_config)
    if args.all_functions:
        settings = replace(settings, export_only=False)
    if args.no_docs:
        settings = replace(settings, include_documentation=False)
    return settings


def _serialize(result: FileExtraction, with_target_types: bool) -> Dict[str, Any]:
    payload = result.to_dict()
    if with_target_types:
        payload["targets"] = [target_signature(f) for f in result.functions]
    return payload


def extract_to_jsonl(
    source: str,
    output_file: str,
    settings: AnalyzerSettings,
    with_target_types: bool = False,
    fail_fast: bool = False,
) -> ExtractionStats:
    """Extract functions from a file or directory and write them as JSONL.

    Args:
        source: TypeScript file or directory.
        output_file: Path to write the JSONL output.
        settings: Resolved analyzer settings.
        with_target_types: Whether to include normalized target types.
        fail_fast: Whether to stop at the first failing file.

    Returns:
        Statistics for the run.

    Raises:
        FileNotFoundError: If source does not exist.
        ParserUnavailableError: If the parser cannot be initialized.
    """
    source = os.path.abspath(source)
    if not os.path.exists(source):
        raise FileNotFoundError(f"Source not found: {source}")

    logger.info(f"Source           : {source}")
    logger.info(f"Output file      : {os.path.abspath(output_file)}")
    logger.info(f"Export only      : {settings.export_only}")

    os.makedirs(os.path.dirname(os.path.abspath(output_file)), exist_ok=True)
    stats = ExtractionStats()

    if os.path.isfile(source):
        # An explicitly named file is never skipped; its errors end the run.
        with source_scope(os.path.basename(source)):
            result = extract_file(
                source,
                export_only=settings.export_only,
                include_documentation=settings.include_documentation,
                extensions=settings.extensions,
            )
        stats.record(result)
        results = iter([result])
    else:
        results = iter_extract_directory(
            source,
            stats=stats,
            continue_on_error=not fail_fast,
            file_scope=source_scope,
            **settings.extraction_options(),
        )

    with open(output_file, "w", encoding="utf-8") as f:
        for result in results:
            f.write(json.dumps(_serialize(result, with_target_types), ensure_ascii=False) + "\n")

    return stats


def main(argv=None) -> int:
    """Main entry point for the extraction CLI."""
    args = parse_args(argv)
    configure_structured_logging(resolve_log_level())
    run_id = set_run_id()

    try:
        with phase_scope("config"):
            settings = resolve_settings(args)

        with phase_scope("extract"):
            t0 = time.time()
            stats = extract_to_jsonl(
                args.source,
                args.output_file,
                settings,
                with_target_types=args.with_target_types,
                fail_fast=args.fail_fast,
            )
            logger.info("Extraction completed in %.2fs: %s", time.time() - t0, stats)

        with phase_scope("report"):
            report = build_run_report(args.source, args.output_file, stats.to_dict(), settings)
            path = write_run_report(report, run_id, args.report_dir)
            logger.info(f"Run report written to {path}")

    except ConfigValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
        return 1
    except ParserUnavailableError as e:
        logger.error(f"Parser unavailable: {e}")
        return 1
    except Exception as e:
        logger.error(f"Extraction failed: {e}", exc_info=True)
        return 1

    if stats.functions_extracted == 0:
        logger.warning("No exported functions found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
