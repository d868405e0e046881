import logging

import pytest
from PIL import Image

import iconprep.run as run
from iconprep.errors import CompressError, DirectoryError, RasterizeError, RasterizerUnavailable
from iconprep.manifest import ManifestEntry
from iconprep.pipeline import STAGES, RunContext, run_pipeline
from iconprep.placeholder import GENERIC_ICON_SVG

SVG = b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"></svg>'

ENTRIES = (
    ManifestEntry("go", "go/go-original.svg"),
    ManifestEntry("redis", "redis/redis-original.svg"),
)


class FakeFetcher:
    def __init__(self) -> None:
        self.urls = []

    def fetch(self, url: str) -> bytes:
        self.urls.append(url)
        return SVG


class FakeRasterizer:
    name = "fake"

    def __init__(self, make_png, present: bool = True, fail_on: str | None = None) -> None:
        self.make_png = make_png
        self.present = present
        self.fail_on = fail_on
        self.seen = []

    def available(self) -> bool:
        return self.present

    def rasterize(self, input_path, size):
        self.seen.append(input_path.name)
        if input_path.stem == self.fail_on:
            raise RasterizeError(input_path, "boom")
        return self.make_png(size, size)


class FakeCompressor:
    name = "fake-quant"

    def __init__(self, present: bool = True, broken: set[str] | None = None) -> None:
        self.present = present
        self.broken = broken or set()
        self.calls = []

    def available(self) -> bool:
        return self.present

    def compress(self, path, quality_range):
        self.calls.append((path.name, quality_range))
        if path.name in self.broken:
            raise CompressError(f"{path}: exit status 99")


def _context(settings, make_png, **kwargs):
    kwargs.setdefault("fetcher", FakeFetcher())
    kwargs.setdefault("rasterizer", FakeRasterizer(make_png))
    kwargs.setdefault("compressor", FakeCompressor())
    return RunContext(settings=settings, entries=ENTRIES, logger=logging.getLogger("test"), **kwargs)


def test_stage_order():
    assert [name for name, _ in STAGES] == [
        "directories", "fetch", "placeholder", "rasterize", "optimize", "report",
    ]


def test_full_run_produces_one_png_per_svg(settings, make_png):
    report = run_pipeline(_context(settings, make_png))

    svgs = sorted(path.stem for path in settings.sources_dir.glob("*.svg"))
    pngs = sorted(path.name for path in settings.generated_dir.glob("*.png"))
    assert svgs == ["generic", "go", "redis"]
    assert pngs == [f"{name}@2x.png" for name in svgs]
    for png in settings.generated_dir.glob("*.png"):
        with Image.open(png) as img:
            assert img.size == (32, 32)
    assert report.fetched == ["go", "redis"]
    assert report.problems == []
    assert (settings.sources_dir / "generic.svg").read_text() == GENERIC_ICON_SVG


def test_scenario_go_icon(settings, make_png):
    fetcher = FakeFetcher()
    run_pipeline(_context(settings, make_png, fetcher=fetcher))
    assert "https://raw.githubusercontent.com/devicons/devicon/master/icons/go/go-original.svg" in fetcher.urls
    assert (settings.sources_dir / "go.svg").read_bytes() == SVG
    assert (settings.generated_dir / "go@2x.png").exists()


def test_second_run_makes_no_requests(settings, make_png):
    run_pipeline(_context(settings, make_png))
    before = {path.name: path.read_bytes() for path in settings.sources_dir.iterdir()}

    fetcher = FakeFetcher()
    report = run_pipeline(_context(settings, make_png, fetcher=fetcher))
    assert fetcher.urls == []
    assert report.skipped == ["go", "redis"]
    assert {path.name: path.read_bytes() for path in settings.sources_dir.iterdir()} == before


def test_no_raster_for_absent_svg(settings, make_png):
    settings.generated_dir.mkdir(parents=True)
    stale = settings.generated_dir / "stale@2x.png"
    stale.write_bytes(make_png(32, 32))
    report = run_pipeline(_context(settings, make_png))
    assert stale not in report.rasterized
    assert len(report.rasterized) == 3


def test_missing_rasterizer_fails_before_writing(settings, make_png):
    compressor = FakeCompressor()
    ctx = _context(settings, make_png, rasterizer=FakeRasterizer(make_png, present=False), compressor=compressor)
    with pytest.raises(RasterizerUnavailable):
        run_pipeline(ctx)
    assert list(settings.generated_dir.iterdir()) == []
    assert compressor.calls == []


def test_rasterize_failure_is_fatal(settings, make_png):
    compressor = FakeCompressor()
    ctx = _context(settings, make_png, rasterizer=FakeRasterizer(make_png, fail_on="go"), compressor=compressor)
    with pytest.raises(RasterizeError):
        run_pipeline(ctx)
    assert compressor.calls == []


def test_optimizer_tolerates_broken_file(settings, make_png):
    settings.generated_dir.mkdir(parents=True)
    (settings.generated_dir / "corrupt@2x.png").write_bytes(b"garbage")
    compressor = FakeCompressor(broken={"corrupt@2x.png"})
    report = run_pipeline(_context(settings, make_png, compressor=compressor))

    assert len(compressor.calls) == 4
    assert all(quality == (65, 80) for _, quality in compressor.calls)
    assert [outcome.path.name for outcome in report.optimize_failures] == ["corrupt@2x.png"]
    assert sum(outcome.ok for outcome in report.optimized) == 3


def test_missing_compressor_skips_stage(settings, make_png):
    compressor = FakeCompressor(present=False)
    report = run_pipeline(_context(settings, make_png, compressor=compressor))
    assert report.optimizer_skipped
    assert compressor.calls == []
    assert report.listing


def test_directory_failure_is_fatal(settings, make_png, tmp_path):
    blocker = tmp_path / "assets"
    blocker.write_text("a file where a directory should be")
    with pytest.raises(DirectoryError):
        run_pipeline(_context(settings, make_png))


def test_main_exit_status(settings, monkeypatch):
    monkeypatch.setattr(run, "get_settings", lambda: settings)
    monkeypatch.setattr(run, "_configure_logging", lambda log_file, verbose=False: None)

    def missing(ctx):
        raise RasterizerUnavailable("rsvg-convert not found")

    monkeypatch.setattr(run, "run_pipeline", missing)
    assert run.main([]) == 1

    monkeypatch.setattr(run, "run_pipeline", lambda ctx: ctx.report)
    assert run.main([]) == 0
