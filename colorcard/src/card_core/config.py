"""
Defaults for the color card tool.

The viewport and zoom constants drive the crop model; ``CardLayout`` holds the
geometry of the printable A4 card (3 px per mm). Everything here can be
overridden through constructor arguments, CLI flags or API request fields.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

VIEWPORT_SIZE = 400
ZOOM_IN_FACTOR = 1.05
ZOOM_OUT_FACTOR = 0.95
DEFAULT_METRIC = "simplified"

DATA_DIR = Path(__file__).resolve().parents[2] / "data"
DEFAULT_PALETTE_PATH = DATA_DIR / "palette.json"

RGBColor = tuple[int, int, int]


@dataclass(frozen=True)
class CardLayout:
    dpi_scale: int = 3
    page_width_mm: float = 210.0
    page_height_mm: float = 297.0
    margin_top_mm: float = 35.01
    margin_side_mm: float = 30.0
    margin_bottom_mm: float = 30.0
    color_block_height_mm: float = 20.0
    rgb_line_gap_mm: float = 55.0
    tint_alpha: float = 0.3
    paper_color: RGBColor = (255, 255, 240)
    blank_tint_color: RGBColor = (220, 220, 220)
    blank_block_color: RGBColor = (204, 204, 204)
    text_color: RGBColor = (51, 51, 51)
    title_font_size: int = 28
    comment_font_size: int = 20
    rgb_font_size: int = 30
    name_font_size: int = 25
    font_path: str | None = None

    def px(self, mm: float) -> int:
        return int(round(mm * self.dpi_scale))

    @property
    def width(self) -> int:
        return self.px(self.page_width_mm)

    @property
    def height(self) -> int:
        return self.px(self.page_height_mm)

    @property
    def content_width(self) -> int:
        return self.width - 2 * self.px(self.margin_side_mm)
