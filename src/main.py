# src/main.py — v2
"""CLI entry point: analyze and validate commands.

Usage:
    lansonesscan analyze <image>... [--save] [--results-dir DIR] [--json]
    lansonesscan validate <image>...

Exit codes: 0 success, 1 analysis failure, 2 validation failure, 130 interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from lansonesscan.version import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2
EXIT_INTERRUPTED = 130


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_FAILURE

    try:
        settings = _load_settings(args)
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return EXIT_FAILURE


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="lansonesscan",
        description=f"lansonesscan v{__version__} - lansones fruit and leaf disease analysis",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Analyze one or more images",
    )
    p_analyze.add_argument("images", type=Path, nargs="+", help="Image files (JPEG or PNG)")
    p_analyze.add_argument(
        "--save", action="store_true",
        help="Save each outcome as a JSON document",
    )
    p_analyze.add_argument(
        "--results-dir", type=Path, default=None,
        help="Directory for saved results (default: RESULTS_DIR setting)",
    )
    p_analyze.add_argument(
        "--json", dest="as_json", action="store_true",
        help="Print outcomes as JSON lines instead of a summary",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- validate ---
    p_validate = subparsers.add_parser(
        "validate", help="Check images against size, format and geometry limits",
    )
    p_validate.add_argument("images", type=Path, nargs="+", help="Image files")
    p_validate.set_defaults(func=_cmd_validate)

    return parser


def _load_settings(args: argparse.Namespace):
    from lansonesscan.config.settings import Settings
    from lansonesscan.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    return settings


async def _cmd_analyze(args: argparse.Namespace, settings) -> int:
    """Analyze every image with one shared pipeline."""
    from lansonesscan.api.facade import create_pipeline
    from lansonesscan.cache.fingerprint import compute_fingerprint
    from lansonesscan.core.errors import LansonesScanError
    from lansonesscan.preprocessing.image_validator import ImageValidator, guess_media_type
    from lansonesscan.storage.json_result_store import JsonResultStore

    validator = ImageValidator.from_settings(settings)
    pipeline = create_pipeline(settings)
    store = JsonResultStore(args.results_dir or settings.results_dir) if args.save else None

    failed = invalid = 0
    for path in args.images:
        if not path.is_file():
            logger.error("File not found: %s", path)
            failed += 1
            continue

        validation = validator.validate_file(path)
        if not validation.ok:
            print(f"{path.name}: invalid image - {validation.message}", file=sys.stderr)
            invalid += 1
            continue

        raw_bytes = path.read_bytes()
        try:
            outcome = await pipeline.analyze(raw_bytes, guess_media_type(path))
            record_id = None
            if store is not None:
                record_id = store.save(outcome, compute_fingerprint(raw_bytes), source_name=path.name)
        except LansonesScanError as exc:
            print(f"{path.name}: {exc.message}", file=sys.stderr)
            failed += 1
            continue

        if args.as_json:
            payload = {"file": str(path), "outcome": outcome.model_dump(mode="json")}
            if record_id:
                payload["record_id"] = record_id
            print(json.dumps(payload))
        else:
            _print_outcome(path, outcome, record_id)

    print(pipeline.performance_stats().summary(), file=sys.stderr)
    if failed:
        return EXIT_FAILURE
    if invalid:
        return EXIT_INVALID
    return EXIT_OK


async def _cmd_validate(args: argparse.Namespace, settings) -> int:
    """Validate images without calling the model."""
    from lansonesscan.preprocessing.image_validator import ImageValidator

    validator = ImageValidator.from_settings(settings)
    invalid = 0
    for path in args.images:
        if not path.is_file():
            print(f"{path}: file not found")
            invalid += 1
            continue
        result = validator.validate_file(path)
        if result.ok:
            info = result.image_info
            print(f"{path.name}: OK ({info.dimensions}, {info.file_size_mb:.2f} MB)")
        else:
            print(f"{path.name}: {result.message}")
            invalid += 1
    return EXIT_INVALID if invalid else EXIT_OK


def _print_outcome(path: Path, outcome, record_id: str | None) -> None:
    """Print a human-readable summary of an AnalysisOutcome."""
    print(f"\n{path.name}: {outcome.status_text}")
    print(f"  Category:    {outcome.item_category}")
    print(f"  Confidence:  {outcome.confidence_percentage}%")
    if outcome.disease_detected:
        print(f"  Severity:    {outcome.severity}")
    if outcome.symptoms:
        label = "Observations" if outcome.item_category == "unrelated" else "Symptoms"
        print(f"  {label}:")
        for symptom in outcome.symptoms:
            print(f"    - {symptom}")
    if outcome.recommendations:
        print("  Recommendations:")
        for advice in outcome.recommendations:
            print(f"    - {advice}")
    if outcome.variety_result is not None:
        variety = outcome.variety_result
        print(f"  Variety:     {variety.variety} ({int(variety.confidence * 100)}%)")
    if record_id:
        print(f"  Saved as:    {record_id}")


if __name__ == "__main__":
    sys.exit(main())
