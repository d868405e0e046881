from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from iconprep.errors import RasterizeError, RasterizerUnavailable


class Rasterizer(Protocol):
    name: str

    def available(self) -> bool: ...

    def rasterize(self, input_path: Path, size: int) -> bytes: ...


class RsvgConvertRasterizer:
    name = "rsvg-convert"
    install_hint = "Install with: brew install librsvg (or apt install librsvg2-bin)"

    def __init__(self, binary: str = "rsvg-convert") -> None:
        self.binary = binary

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def rasterize(self, input_path: Path, size: int) -> bytes:
        cmd = [self.binary, "-w", str(size), "-h", str(size), "-f", "png", str(input_path)]
        try:
            proc = subprocess.run(cmd, capture_output=True, check=True)
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode("utf-8", "replace").strip() if exc.stderr else ""
            raise RasterizeError(input_path, stderr or f"exit status {exc.returncode}") from exc
        except OSError as exc:
            raise RasterizeError(input_path, str(exc)) from exc
        if not proc.stdout:
            raise RasterizeError(input_path, "no output produced")
        return proc.stdout


class CairoSvgRasterizer:
    name = "cairosvg"
    install_hint = "Install with: pip install cairosvg (needs the cairo system library)"

    def available(self) -> bool:
        try:
            import cairosvg  # noqa: F401
        except (ImportError, OSError):
            return False
        return True

    def rasterize(self, input_path: Path, size: int) -> bytes:
        try:
            import cairosvg

            return cairosvg.svg2png(url=str(input_path), output_width=size, output_height=size)
        except Exception as exc:
            raise RasterizeError(input_path, f"{exc.__class__.__name__}: {exc}") from exc


def select_rasterizer(settings) -> Rasterizer:
    rsvg = RsvgConvertRasterizer(settings.rsvg_convert_bin)
    cairo = CairoSvgRasterizer()
    if settings.rasterizer == "rsvg-convert":
        candidates = [rsvg]
    elif settings.rasterizer == "cairosvg":
        candidates = [cairo]
    elif settings.rasterizer == "auto":
        candidates = [rsvg, cairo]
    else:
        raise RasterizerUnavailable(f"unknown rasterizer backend: {settings.rasterizer!r}")

    for candidate in candidates:
        if candidate.available():
            return candidate
    hints = "; ".join(c.install_hint for c in candidates)
    names = ", ".join(c.name for c in candidates)
    raise RasterizerUnavailable(f"{names} not found. {hints}")
