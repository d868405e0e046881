import io

import pytest
from PIL import Image

from iconprep.settings import Settings, icon_dirs


def _make_png(width: int, height: int) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), (102, 102, 102, 255)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def make_png():
    return _make_png


@pytest.fixture()
def settings(tmp_path):
    sources_dir, generated_dir = icon_dirs(tmp_path)
    return Settings(
        project_root=tmp_path,
        sources_dir=sources_dir,
        generated_dir=generated_dir,
        icon_size=32,
        density_suffix="@2x",
        quality_min=65,
        quality_max=80,
        http_timeout=(5, 15),
        http_retries=0,
        rasterizer="auto",
        rsvg_convert_bin="rsvg-convert",
        pngquant_bin="pngquant",
    )
