from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from iconprep.errors import (
    CompressError,
    DirectoryError,
    PipelineError,
    RasterizeError,
    RasterizerUnavailable,
)
from iconprep.fetch import Fetcher, fetch_icons
from iconprep.manifest import ManifestEntry, expected_identifiers
from iconprep.placeholder import write_placeholder
from iconprep.report import OutputRow, format_listing, list_outputs, verify_outputs
from iconprep.settings import Settings
from iconprep.tools.optimize import Compressor
from iconprep.tools.rasterize import Rasterizer, select_rasterizer


@dataclass
class OptimizeOutcome:
    path: Path
    ok: bool
    error: str | None = None


@dataclass
class RunReport:
    fetched: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    placeholder: Path | None = None
    rasterizer: str | None = None
    rasterized: list[Path] = field(default_factory=list)
    optimizer_skipped: bool = False
    optimized: list[OptimizeOutcome] = field(default_factory=list)
    listing: list[OutputRow] = field(default_factory=list)
    problems: list[str] = field(default_factory=list)

    @property
    def optimize_failures(self) -> list[OptimizeOutcome]:
        return [outcome for outcome in self.optimized if not outcome.ok]


@dataclass
class RunContext:
    settings: Settings
    entries: tuple[ManifestEntry, ...]
    fetcher: Fetcher
    rasterizer: Rasterizer | None = None
    compressor: Compressor | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("iconprep"))
    report: RunReport = field(default_factory=RunReport)


def ensure_directories(ctx: RunContext) -> None:
    ctx.logger.info("Creating directories...")
    for directory in (ctx.settings.sources_dir, ctx.settings.generated_dir):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryError(f"cannot create {directory}: {exc}") from exc


def fetch_stage(ctx: RunContext) -> None:
    ctx.logger.info("Downloading icon SVGs...")
    result = fetch_icons(
        ctx.entries,
        ctx.settings.sources_dir,
        ctx.fetcher,
        logger=logging.getLogger("iconprep.fetch"),
    )
    ctx.report.fetched = result.fetched
    ctx.report.skipped = result.skipped


def placeholder_stage(ctx: RunContext) -> None:
    ctx.logger.info("  Creating generic icon...")
    ctx.report.placeholder = write_placeholder(ctx.settings.sources_dir)


def raster_name(identifier: str, settings: Settings) -> str:
    return f"{identifier}{settings.density_suffix}.png"


def rasterize_all(ctx: RunContext) -> None:
    settings = ctx.settings
    size = settings.icon_size
    ctx.logger.info("Converting SVGs to PNG (%sx%s %s)...", size, size, settings.density_suffix)
    rasterizer = ctx.rasterizer or select_rasterizer(settings)
    if not rasterizer.available():
        raise RasterizerUnavailable(f"{rasterizer.name} not found")
    ctx.report.rasterizer = rasterizer.name

    for svg in sorted(settings.sources_dir.glob("*.svg")):
        identifier = svg.stem
        output = settings.generated_dir / raster_name(identifier, settings)
        ctx.logger.info("  Converting %s...", identifier)
        png = rasterizer.rasterize(svg, size)
        try:
            output.write_bytes(png)
        except OSError as exc:
            raise RasterizeError(svg, f"cannot write {output}: {exc}") from exc
        ctx.report.rasterized.append(output)


def optimize_all(ctx: RunContext) -> None:
    compressor = ctx.compressor
    if compressor is None or not compressor.available():
        name = compressor.name if compressor is not None else "compressor"
        ctx.logger.info("Note: %s not found, skipping optimization", name)
        ctx.report.optimizer_skipped = True
        return

    ctx.logger.info("Optimizing PNGs with %s...", compressor.name)
    quality_range = ctx.settings.quality_range
    for png in sorted(ctx.settings.generated_dir.glob("*.png")):
        try:
            compressor.compress(png, quality_range)
        except CompressError as exc:
            ctx.logger.debug("OPTIMIZE FAILED %s", exc)
            ctx.report.optimized.append(OptimizeOutcome(png, ok=False, error=str(exc)))
            continue
        ctx.report.optimized.append(OptimizeOutcome(png, ok=True))


def report_stage(ctx: RunContext) -> None:
    settings = ctx.settings
    rows = list_outputs(settings.generated_dir)
    ctx.report.listing = rows
    print("", flush=True)
    print(f"Done! Generated icons in {settings.generated_dir}:", flush=True)
    print(format_listing(rows), flush=True)
    ctx.report.problems = verify_outputs(
        expected_identifiers(ctx.entries),
        settings.generated_dir,
        settings.icon_size,
        settings.density_suffix,
    )


STAGES: list[tuple[str, Callable[[RunContext], None]]] = [
    ("directories", ensure_directories),
    ("fetch", fetch_stage),
    ("placeholder", placeholder_stage),
    ("rasterize", rasterize_all),
    ("optimize", optimize_all),
    ("report", report_stage),
]


def run_pipeline(ctx: RunContext, stages=None) -> RunReport:
    for name, stage in stages or STAGES:
        ctx.logger.debug("STAGE %s", name)
        try:
            stage(ctx)
        except PipelineError as exc:
            if exc.fatal:
                raise
            ctx.logger.warning("STAGE %s %s", name, exc)
    return ctx.report
