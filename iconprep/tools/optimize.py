from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from iconprep.errors import CompressError


class Compressor(Protocol):
    name: str

    def available(self) -> bool: ...

    def compress(self, path: Path, quality_range: tuple[int, int]) -> None: ...


class PngquantCompressor:
    """Lossy in-place PNG recompression via the pngquant binary."""

    name = "pngquant"

    def __init__(self, binary: str = "pngquant") -> None:
        self.binary = binary

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def compress(self, path: Path, quality_range: tuple[int, int]) -> None:
        low, high = quality_range
        cmd = [self.binary, f"--quality={low}-{high}", "--ext", ".png", "--force", str(path)]
        try:
            proc = subprocess.run(cmd, capture_output=True)
        except OSError as exc:
            raise CompressError(f"{path}: {exc}") from exc
        # 98/99: result would be larger or below the quality floor; file left untouched
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", "replace").strip() if proc.stderr else ""
            raise CompressError(f"{path}: exit status {proc.returncode} {stderr}".rstrip())
