from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from iconprep.errors import PipelineError
from iconprep.fetch import HttpFetcher
from iconprep.manifest import load_manifest
from iconprep.pipeline import RunContext, run_pipeline
from iconprep.settings import get_settings
from iconprep.tools.optimize import PngquantCompressor


def _configure_logging(log_file: str | None, verbose: bool = False) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download process icons, rasterize them to PNG and optimize the result."
    )
    parser.add_argument("--log-file", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-file debug detail.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()

    log_file = args.log_file
    if log_file and not Path(log_file).is_absolute():
        log_file = str(settings.project_root / log_file)
    _configure_logging(log_file, args.verbose)
    logger = logging.getLogger("iconprep")

    try:
        ctx = RunContext(
            settings=settings,
            entries=load_manifest(),
            fetcher=HttpFetcher(timeout=settings.http_timeout, retries=settings.http_retries),
            compressor=PngquantCompressor(settings.pngquant_bin),
            logger=logger,
        )
        report = run_pipeline(ctx)
    except PipelineError as exc:
        logger.error("Error: %s", exc)
        return 1

    summary = {
        "fetched": len(report.fetched),
        "skipped": len(report.skipped),
        "rasterized": len(report.rasterized),
        "rasterizer": report.rasterizer,
        "optimized": None if report.optimizer_skipped else len(report.optimized) - len(report.optimize_failures),
        "problems": len(report.problems),
    }
    logger.info("SUMMARY %s", json.dumps(summary, ensure_ascii=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
