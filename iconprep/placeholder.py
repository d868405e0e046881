from __future__ import annotations

from pathlib import Path

from iconprep.errors import PlaceholderError
from iconprep.manifest import GENERIC_IDENTIFIER

# Terminal window with a ">_" prompt.
GENERIC_ICON_SVG = """\
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="#666666">
  <rect x="2" y="3" width="20" height="18" rx="2" fill="none" stroke="#666666" stroke-width="1.5"/>
  <path d="M6 8l4 4-4 4" stroke="#666666" stroke-width="1.5" stroke-linecap="round" stroke-linejoin="round" fill="none"/>
  <line x1="12" y1="16" x2="18" y2="16" stroke="#666666" stroke-width="1.5" stroke-linecap="round"/>
</svg>
"""


def write_placeholder(sources_dir: Path) -> Path:
    dest = sources_dir / f"{GENERIC_IDENTIFIER}.svg"
    try:
        dest.write_text(GENERIC_ICON_SVG, encoding="utf-8")
    except OSError as exc:
        raise PlaceholderError(f"cannot write {dest}: {exc}") from exc
    return dest
