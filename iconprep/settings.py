import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("\"").strip("'")
        os.environ.setdefault(key, value)


@dataclass(frozen=True)
class Settings:
    project_root: Path
    sources_dir: Path
    generated_dir: Path
    icon_size: int
    density_suffix: str
    quality_min: int
    quality_max: int
    http_timeout: tuple[float, float]
    http_retries: int
    rasterizer: str
    rsvg_convert_bin: str
    pngquant_bin: str

    @property
    def quality_range(self) -> tuple[int, int]:
        return self.quality_min, self.quality_max


def default_project_root(package_file: Path) -> Path:
    """Checkout root when running from source, else the working directory."""
    checkout = package_file.resolve().parents[1]
    if (checkout / "pyproject.toml").exists() or (checkout / "assets").is_dir():
        return checkout
    return Path.cwd()


def icon_dirs(project_root: Path) -> tuple[Path, Path]:
    base = project_root / "assets" / "process-icons"
    return base / "sources", base / "generated"


@lru_cache
def get_settings() -> Settings:
    root_raw = os.getenv("ICONPREP_PROJECT_ROOT")
    project_root = Path(root_raw).resolve() if root_raw else default_project_root(Path(__file__))
    _load_env_file(project_root / ".env")
    sources_dir, generated_dir = icon_dirs(project_root)

    return Settings(
        project_root=project_root,
        sources_dir=sources_dir,
        generated_dir=generated_dir,
        icon_size=int(os.getenv("ICONPREP_ICON_SIZE", "32")),
        density_suffix=os.getenv("ICONPREP_DENSITY_SUFFIX", "@2x"),
        quality_min=int(os.getenv("ICONPREP_QUALITY_MIN", "65")),
        quality_max=int(os.getenv("ICONPREP_QUALITY_MAX", "80")),
        http_timeout=(
            float(os.getenv("ICONPREP_CONNECT_TIMEOUT", "5")),
            float(os.getenv("ICONPREP_READ_TIMEOUT", "15")),
        ),
        http_retries=int(os.getenv("ICONPREP_HTTP_RETRIES", "3")),
        rasterizer=os.getenv("ICONPREP_RASTERIZER", "auto"),
        rsvg_convert_bin=os.getenv("RSVG_CONVERT", "rsvg-convert"),
        pngquant_bin=os.getenv("PNGQUANT", "pngquant"),
    )
