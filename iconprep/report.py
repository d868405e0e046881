from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from PIL import Image, UnidentifiedImageError


@dataclass
class OutputRow:
    name: str
    size_bytes: int
    dimensions: tuple[int, int] | None


def _read_dimensions(path: Path) -> tuple[int, int] | None:
    try:
        with Image.open(path) as img:
            return img.size
    except (UnidentifiedImageError, OSError):
        return None


def list_outputs(generated_dir: Path) -> list[OutputRow]:
    rows: list[OutputRow] = []
    for path in sorted(generated_dir.iterdir()):
        if not path.is_file() or path.name.startswith("."):
            continue
        rows.append(OutputRow(path.name, path.stat().st_size, _read_dimensions(path)))
    return rows


def human_size(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "K", "M", "G"):
        if size < 1024 or unit == "G":
            if unit == "B":
                return f"{int(size)}B"
            return f"{size:.1f}{unit}"
        size /= 1024
    return f"{size_bytes}B"


def format_listing(rows: Iterable[OutputRow]) -> str:
    lines = []
    for row in rows:
        dims = f"{row.dimensions[0]}x{row.dimensions[1]}" if row.dimensions else "?"
        lines.append(f"  {human_size(row.size_bytes):>7}  {dims:>7}  {row.name}")
    return "\n".join(lines)


def verify_outputs(
    expected_ids: Iterable[str],
    generated_dir: Path,
    size: int,
    density_suffix: str,
    *,
    logger: logging.Logger | None = None,
) -> list[str]:
    """Check every icon the menu embeds is present at ``size`` x ``size``.

    Returns human-readable problems; each one is also logged as a warning.
    """
    logger = logger or logging.getLogger("iconprep.report")
    problems: list[str] = []
    for identifier in expected_ids:
        path = generated_dir / f"{identifier}{density_suffix}.png"
        if not path.exists():
            problems.append(f"{path.name} missing")
            continue
        dims = _read_dimensions(path)
        if dims is None:
            problems.append(f"{path.name} is not a readable PNG")
        elif dims != (size, size):
            problems.append(f"{path.name} is {dims[0]}x{dims[1]}, expected {size}x{size}")
    for problem in problems:
        logger.warning("CHECK %s", problem)
    return problems
