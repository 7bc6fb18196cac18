from __future__ import annotations

import logging
from dataclasses import replace

from .config import VIEWPORT_SIZE, ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR
from .models import DrawTransform, SourceRect, ViewportPhase, ViewportState

logger = logging.getLogger(__name__)


class ViewportTransform:
    """Pan/zoom model of a source image shown in a fixed square viewport.

    ``pan`` and ``zoom`` may leave the state temporarily out of bounds; every
    read (``to_source_rect``, ``draw_transform``, ``viewport_to_source``)
    applies ``adjust_boundary`` first, so what is read always covers the whole
    viewport with image pixels and never zooms out past the cover scale.

    After ``confirm`` the crop is locked: pan and zoom are ignored until a new
    image is initialized.
    """

    def __init__(
        self,
        viewport_size: float = VIEWPORT_SIZE,
        zoom_in_factor: float = ZOOM_IN_FACTOR,
        zoom_out_factor: float = ZOOM_OUT_FACTOR,
    ) -> None:
        if viewport_size <= 0:
            raise ValueError("viewport_size must be positive")
        self.viewport_size = float(viewport_size)
        self.zoom_in_factor = zoom_in_factor
        self.zoom_out_factor = zoom_out_factor
        self.phase = ViewportPhase.EMPTY
        self._state: ViewportState | None = None

    @property
    def state(self) -> ViewportState | None:
        return None if self._state is None else replace(self._state)

    @property
    def min_scale(self) -> float | None:
        if self._state is None:
            return None
        return _cover_scale(self._state)

    def initialize(
        self,
        source_width: int,
        source_height: int,
        viewport_size: float | None = None,
    ) -> ViewportState:
        if source_width <= 0 or source_height <= 0:
            raise ValueError(
                f"source dimensions must be positive, got {source_width}x{source_height}"
            )
        if viewport_size is not None:
            if viewport_size <= 0:
                raise ValueError("viewport_size must be positive")
            self.viewport_size = float(viewport_size)

        state = ViewportState(
            scale=1.0,
            offset_x=0.0,
            offset_y=0.0,
            source_width=int(source_width),
            source_height=int(source_height),
            viewport_size=self.viewport_size,
        )
        state.scale = _cover_scale(state)
        _center(state)
        self._state = state
        self.phase = ViewportPhase.INITIALIZED
        logger.debug(
            f"Viewport initialized for {source_width}x{source_height} image at scale {state.scale:.4f}"
        )
        return replace(state)

    def pan(self, dx: float, dy: float) -> None:
        if not self._editable("pan"):
            return
        self._state.offset_x += dx
        self._state.offset_y += dy

    def zoom(self, factor: float, pivot_x: float, pivot_y: float) -> None:
        if not self._editable("zoom"):
            return
        if factor <= 0:
            logger.debug(f"Ignoring non-positive zoom factor {factor}")
            return
        state = self._state
        # Keep the image point under the pivot fixed on screen.
        state.offset_x -= (pivot_x - state.offset_x) * (factor - 1.0)
        state.offset_y -= (pivot_y - state.offset_y) * (factor - 1.0)
        state.scale *= factor

    def wheel(self, delta_y: float, pivot_x: float, pivot_y: float) -> None:
        factor = self.zoom_in_factor if delta_y < 0 else self.zoom_out_factor
        self.zoom(factor, pivot_x, pivot_y)

    def adjust_boundary(self) -> None:
        state = self._state
        if state is None:
            return

        min_scale = _cover_scale(state)
        if state.scale < min_scale:
            state.scale = min_scale
            _center(state)

        size = state.viewport_size
        draw_w = state.source_width * state.scale
        draw_h = state.source_height * state.scale

        if draw_w > size:
            state.offset_x = min(max(state.offset_x, size - draw_w), 0.0)
        else:
            state.offset_x = (size - draw_w) / 2.0

        if draw_h > size:
            state.offset_y = min(max(state.offset_y, size - draw_h), 0.0)
        else:
            state.offset_y = (size - draw_h) / 2.0

    def to_source_rect(self) -> SourceRect | None:
        if self._state is None:
            return None
        self.adjust_boundary()
        state = self._state
        side = state.viewport_size / state.scale
        return SourceRect(
            sx=-state.offset_x / state.scale,
            sy=-state.offset_y / state.scale,
            sw=side,
            sh=side,
        )

    def draw_transform(self) -> DrawTransform | None:
        if self._state is None:
            return None
        self.adjust_boundary()
        state = self._state
        return DrawTransform(
            offset_x=state.offset_x,
            offset_y=state.offset_y,
            draw_width=state.source_width * state.scale,
            draw_height=state.source_height * state.scale,
        )

    def viewport_to_source(self, x: float, y: float) -> tuple[float, float] | None:
        if self._state is None:
            return None
        self.adjust_boundary()
        state = self._state
        return (x - state.offset_x) / state.scale, (y - state.offset_y) / state.scale

    def confirm(self) -> bool:
        if self.phase is not ViewportPhase.INITIALIZED:
            logger.debug(f"Ignoring confirm in phase '{self.phase.value}'")
            return False
        self.adjust_boundary()
        self.phase = ViewportPhase.CONFIRMED
        return True

    @property
    def confirmed(self) -> bool:
        return self.phase is ViewportPhase.CONFIRMED

    def _editable(self, action: str) -> bool:
        if self.phase is ViewportPhase.INITIALIZED:
            return True
        logger.debug(f"Ignoring {action} in phase '{self.phase.value}'")
        return False


def _cover_scale(state: ViewportState) -> float:
    return max(
        state.viewport_size / state.source_width,
        state.viewport_size / state.source_height,
    )


def _center(state: ViewportState) -> None:
    state.offset_x = (state.viewport_size - state.source_width * state.scale) / 2.0
    state.offset_y = (state.viewport_size - state.source_height * state.scale) / 2.0
