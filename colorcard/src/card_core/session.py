from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .config import DEFAULT_METRIC, VIEWPORT_SIZE
from .models import ExtractedSample, MatchOutcome, MatchResult, NoMatch, PaletteStatus
from .palette import PaletteIndex
from .viewport import ViewportTransform

logger = logging.getLogger(__name__)


class CardSession:
    """State of one color card: crop viewport, palette, current sample and match."""

    def __init__(
        self,
        palette: PaletteIndex | None = None,
        viewport: ViewportTransform | None = None,
        metric: str = DEFAULT_METRIC,
        viewport_size: float = VIEWPORT_SIZE,
    ) -> None:
        self.palette = palette or PaletteIndex(metric=metric)
        self.viewport = viewport or ViewportTransform(viewport_size=viewport_size)
        self.sample_rgb: ExtractedSample | None = None
        self.match: MatchResult | None = None
        self.title = ""
        self.comment = ""
        self._has_image = False

    @property
    def palette_loaded(self) -> bool:
        return self.palette.loaded

    @property
    def has_image(self) -> bool:
        return self._has_image

    @property
    def can_export(self) -> bool:
        return self.match is not None

    def load_palette(self, records: Any) -> PaletteStatus:
        status = self.palette.load(records)
        self.match = None
        return status

    def load_palette_from(self, source: str | Path) -> PaletteStatus:
        status = self.palette.load_from(source)
        self.match = None
        return status

    def open_image(self, width: int, height: int) -> None:
        self.viewport.initialize(width, height)
        self._has_image = True
        self.sample_rgb = None
        self.match = None

    def pan(self, dx: float, dy: float) -> None:
        self.viewport.pan(dx, dy)

    def zoom(self, factor: float, pivot_x: float, pivot_y: float) -> None:
        self.viewport.zoom(factor, pivot_x, pivot_y)

    def wheel(self, delta_y: float, pivot_x: float, pivot_y: float) -> None:
        self.viewport.wheel(delta_y, pivot_x, pivot_y)

    def confirm_crop(self) -> bool:
        return self.viewport.confirm()

    def sample(self, r: int, g: int, b: int) -> MatchOutcome:
        if not self._has_image:
            return NoMatch("no_image")
        if not self.viewport.confirmed:
            return NoMatch("crop_not_confirmed")

        self.sample_rgb = ExtractedSample(r=int(r), g=int(g), b=int(b))
        outcome = self.palette.find_closest(r, g, b)
        if isinstance(outcome, MatchResult):
            self.match = outcome
            logger.info(
                f"Sample R:{r} G:{g} B:{b} matched '{outcome.matched_color.name}' "
                f"(dE {outcome.distance:.2f})"
            )
        else:
            self.match = None
            logger.info(f"Sample R:{r} G:{g} B:{b} not matched: {outcome.reason}")
        return outcome
