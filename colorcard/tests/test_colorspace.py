from __future__ import annotations

import numpy as np
import pytest
from skimage.color import rgb2lab

from colorcard.src.card_core.colorspace import rgb_to_lab, rgb_to_lab_array, rgb_to_xyz, xyz_to_lab


def test_black_maps_to_origin():
    l_star, a_star, b_star = rgb_to_lab(0, 0, 0)

    assert l_star == pytest.approx(0.0, abs=1e-9)
    assert a_star == pytest.approx(0.0, abs=1e-9)
    assert b_star == pytest.approx(0.0, abs=1e-9)


def test_white_maps_to_full_lightness_neutral():
    l_star, a_star, b_star = rgb_to_lab(255, 255, 255)

    assert l_star == pytest.approx(100.0, abs=0.05)
    assert a_star == pytest.approx(0.0, abs=0.05)
    assert b_star == pytest.approx(0.0, abs=0.05)


def test_white_xyz_matches_reference_white():
    x, y, z = rgb_to_xyz(255, 255, 255)

    assert x == pytest.approx(95.05, abs=0.01)
    assert y == pytest.approx(100.0, abs=0.01)
    assert z == pytest.approx(108.9, abs=0.01)


def test_dark_values_use_linear_segment():
    # 10/255 is below the 0.04045 companding threshold.
    x, y, z = rgb_to_xyz(10, 10, 10)
    expected_y = (10 / 255 / 12.92) * 100.0

    assert y == pytest.approx(expected_y, rel=1e-4)
    assert xyz_to_lab(x, y, z)[0] == pytest.approx(116 * ((expected_y / 100) * (29 / 6) ** 2 / 3 + 4 / 29) - 16, abs=1e-2)


@pytest.mark.parametrize(
    "rgb",
    [(255, 0, 0), (0, 128, 255), (30, 120, 210), (200, 200, 200), (12, 90, 40)],
)
def test_matches_scikit_image_within_matrix_rounding(rgb):
    expected = rgb2lab(np.array(rgb, dtype=np.float64).reshape(1, 1, 3) / 255.0).reshape(3)

    assert np.allclose(rgb_to_lab(*rgb), expected, atol=0.5)


def test_lightness_stays_in_nominal_range():
    for value in range(0, 256, 17):
        for rgb in [(value, 0, 0), (0, value, 0), (0, 0, value), (value, value, value)]:
            l_star = rgb_to_lab(*rgb)[0]
            assert -0.01 <= l_star <= 100.01


def test_conversion_is_deterministic():
    assert rgb_to_lab(123, 45, 67) == rgb_to_lab(123, 45, 67)


def test_array_conversion_agrees_with_scalar_path():
    rgb = np.array(
        [[[0, 0, 0], [255, 255, 255], [10, 10, 10]], [[255, 0, 0], [30, 120, 210], [12, 90, 40]]],
        dtype=np.uint8,
    )

    lab = rgb_to_lab_array(rgb)

    assert lab.shape == (2, 3, 3)
    for row in range(2):
        for col in range(3):
            expected = rgb_to_lab(*(int(v) for v in rgb[row, col]))
            assert np.allclose(lab[row, col], expected, atol=1e-9)
