from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any

import numpy as np
import requests
from PIL import Image

from .models import ExtractedSample
from .viewport import ViewportTransform


def is_remote(source: str | Path) -> bool:
    return str(source).startswith(("http://", "https://"))


def read_image_rgb(image_path: str | Path) -> np.ndarray:
    """Decode a local image or an http(s) image URL to an ``(H, W, 3)`` uint8 array."""
    if is_remote(image_path):
        response = requests.get(str(image_path), timeout=10)
        response.raise_for_status()
        source: io.BytesIO | Path = io.BytesIO(response.content)
    else:
        source = Path(image_path)

    with Image.open(source) as image:
        return np.asarray(image.convert("RGB"), dtype=np.uint8)


def render_viewport(image_rgb: np.ndarray, viewport: ViewportTransform) -> np.ndarray:
    """Render the square viewport exactly as currently panned and zoomed."""
    rect = viewport.to_source_rect()
    if rect is None:
        raise ValueError("viewport has no image")

    size = max(1, int(round(viewport.viewport_size)))
    source = Image.fromarray(image_rgb)
    view = source.resize(
        (size, size),
        Image.Resampling.BILINEAR,
        box=(rect.sx, rect.sy, rect.sx + rect.sw, rect.sy + rect.sh),
    )
    return np.asarray(view, dtype=np.uint8)


def sample_viewport_pixel(
    image_rgb: np.ndarray, viewport: ViewportTransform, x: float, y: float
) -> ExtractedSample:
    view = render_viewport(image_rgb, viewport)
    height, width = view.shape[:2]
    col = min(max(int(x), 0), width - 1)
    row = min(max(int(y), 0), height - 1)
    r, g, b = (int(v) for v in view[row, col])
    return ExtractedSample(r=r, g=g, b=b)


def save_card(card: Image.Image, output_path: str | Path) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    card.save(path, format="PNG")


def write_result_json(payload: dict[str, Any], output_path: str | Path) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
