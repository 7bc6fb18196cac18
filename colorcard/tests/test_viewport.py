from __future__ import annotations

import pytest

from colorcard.src.card_core.models import ViewportPhase
from colorcard.src.card_core.viewport import ViewportTransform


def _viewport(width: int, height: int, size: float = 400) -> ViewportTransform:
    viewport = ViewportTransform(viewport_size=size)
    viewport.initialize(width, height)
    return viewport


def test_initialize_fits_binding_dimension_and_centers():
    viewport = ViewportTransform()
    state = viewport.initialize(800, 400, 400)

    assert state.scale == pytest.approx(1.0)
    assert state.offset_x == pytest.approx(-200.0)
    assert state.offset_y == pytest.approx(0.0)
    assert viewport.phase is ViewportPhase.INITIALIZED


def test_initialize_small_image_scales_up():
    state = ViewportTransform().initialize(100, 200, 400)

    assert state.scale == pytest.approx(4.0)
    assert state.offset_x == pytest.approx(0.0)
    assert state.offset_y == pytest.approx(-200.0)


def test_initialize_rejects_empty_dimensions():
    with pytest.raises(ValueError):
        ViewportTransform().initialize(0, 100, 400)


def test_zoom_below_cover_scale_is_corrected_and_recentered():
    viewport = _viewport(800, 400)

    viewport.zoom(0.5, 200, 200)
    viewport.adjust_boundary()
    state = viewport.state

    assert viewport.min_scale == pytest.approx(1.0)
    assert state.scale == pytest.approx(1.0)
    assert state.offset_x == pytest.approx(-200.0)
    assert state.offset_y == pytest.approx(0.0)


def test_repeated_zoom_out_never_goes_below_cover_scale():
    viewport = _viewport(1200, 900)

    for _ in range(40):
        viewport.wheel(delta_y=120, pivot_x=50, pivot_y=350)
        viewport.adjust_boundary()

    assert viewport.state.scale == pytest.approx(viewport.min_scale)


def test_zoom_keeps_point_under_pivot_fixed():
    viewport = _viewport(800, 800)
    before = viewport.viewport_to_source(100, 100)

    viewport.zoom(2.0, 100, 100)
    after = viewport.viewport_to_source(100, 100)

    assert after[0] == pytest.approx(before[0])
    assert after[1] == pytest.approx(before[1])
    assert viewport.state.scale == pytest.approx(1.0)


def test_wheel_direction_selects_zoom_factor():
    viewport = _viewport(800, 800)

    viewport.wheel(delta_y=-1, pivot_x=200, pivot_y=200)
    assert viewport.state.scale == pytest.approx(0.5 * 1.05)

    viewport.wheel(delta_y=1, pivot_x=200, pivot_y=200)
    assert viewport.state.scale == pytest.approx(0.5 * 1.05 * 0.95)


def test_pan_is_not_clamped_until_read():
    viewport = _viewport(800, 800)
    viewport.zoom(2.0, 200, 200)

    viewport.pan(1000, -5000)
    raw = viewport.state

    assert raw.offset_x == pytest.approx(800.0)
    assert raw.offset_y == pytest.approx(-5200.0)

    viewport.adjust_boundary()
    clamped = viewport.state

    assert clamped.offset_x == pytest.approx(0.0)
    assert clamped.offset_y == pytest.approx(-400.0)


@pytest.mark.parametrize("dx, dy", [(5000, 5000), (-5000, -5000), (5000, -5000), (-5000, 5000)])
def test_panned_viewport_never_samples_outside_source(dx, dy):
    viewport = _viewport(640, 480)
    viewport.zoom(1.7, 120, 300)
    viewport.pan(dx, dy)

    top_left = viewport.viewport_to_source(0, 0)
    bottom_right = viewport.viewport_to_source(400, 400)

    assert top_left[0] >= -1e-9 and top_left[1] >= -1e-9
    assert bottom_right[0] <= 640 + 1e-9
    assert bottom_right[1] <= 480 + 1e-9


def test_adjust_boundary_is_idempotent():
    viewport = _viewport(1024, 768)
    viewport.zoom(1.8, 10, 390)
    viewport.pan(-133.3, 77.7)

    viewport.adjust_boundary()
    first = viewport.state
    viewport.adjust_boundary()
    second = viewport.state

    assert first == second


def test_source_rect_matches_visible_region():
    viewport = _viewport(800, 400)
    viewport.pan(-50, 0)

    rect = viewport.to_source_rect()

    assert rect.sx == pytest.approx(250.0)
    assert rect.sy == pytest.approx(0.0)
    assert rect.sw == pytest.approx(400.0)
    assert rect.sh == pytest.approx(400.0)


def test_draw_transform_reports_clamped_geometry():
    viewport = _viewport(800, 400)
    viewport.pan(500, 0)

    transform = viewport.draw_transform()

    assert transform.offset_x == pytest.approx(0.0)
    assert transform.draw_width == pytest.approx(800.0)
    assert transform.draw_height == pytest.approx(400.0)


def test_confirm_locks_pan_and_zoom():
    viewport = _viewport(800, 400)
    viewport.pan(-30, 0)

    assert viewport.confirm() is True
    locked = viewport.state

    viewport.pan(100, 100)
    viewport.zoom(3.0, 0, 0)
    viewport.wheel(-1, 0, 0)

    assert viewport.state == locked
    assert viewport.confirmed
    assert viewport.confirm() is False
    assert viewport.to_source_rect().sx == pytest.approx(230.0)


def test_new_image_unlocks_confirmed_crop():
    viewport = _viewport(800, 400)
    viewport.confirm()

    viewport.initialize(300, 300)

    assert viewport.phase is ViewportPhase.INITIALIZED
    assert viewport.state.scale == pytest.approx(400 / 300)


def test_empty_viewport_ignores_operations():
    viewport = ViewportTransform()

    viewport.pan(10, 10)
    viewport.zoom(2.0, 0, 0)
    viewport.adjust_boundary()

    assert viewport.state is None
    assert viewport.to_source_rect() is None
    assert viewport.draw_transform() is None
    assert viewport.viewport_to_source(0, 0) is None
    assert viewport.confirm() is False
    assert viewport.phase is ViewportPhase.EMPTY


def test_non_positive_zoom_factor_is_ignored():
    viewport = _viewport(800, 800)
    before = viewport.state

    viewport.zoom(0.0, 100, 100)
    viewport.zoom(-2.0, 100, 100)

    assert viewport.state == before


def test_state_is_a_copy():
    viewport = _viewport(800, 400)
    state = viewport.state
    state.offset_x = 12345.0

    assert viewport.state.offset_x == pytest.approx(-200.0)
