from __future__ import annotations

import numpy as np

from .models import LAB

# sRGB (D65) linear RGB -> XYZ, rows are X, Y, Z.
_RGB_TO_XYZ = (
    (0.4124, 0.3576, 0.1805),
    (0.2126, 0.7152, 0.0722),
    (0.0193, 0.1192, 0.9505),
)

# D65 reference white, XYZ scaled to Y = 100.
WHITE_X = 95.047
WHITE_Y = 100.0
WHITE_Z = 108.883

_EPSILON = (6.0 / 29.0) ** 3
_KAPPA = (29.0 / 6.0) ** 2 / 3.0


def _linearize(channel: int) -> float:
    value = channel / 255.0
    if value > 0.04045:
        return ((value + 0.055) / 1.055) ** 2.4
    return value / 12.92


def _f(t: float) -> float:
    if t > _EPSILON:
        return t ** (1.0 / 3.0)
    return t * _KAPPA + 4.0 / 29.0


def rgb_to_xyz(r: int, g: int, b: int) -> tuple[float, float, float]:
    linear = (_linearize(r), _linearize(g), _linearize(b))
    x, y, z = (
        sum(coef * value for coef, value in zip(row, linear)) * 100.0
        for row in _RGB_TO_XYZ
    )
    return x, y, z


def xyz_to_lab(x: float, y: float, z: float) -> LAB:
    fx = _f(x / WHITE_X)
    fy = _f(y / WHITE_Y)
    fz = _f(z / WHITE_Z)
    return 116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)


def rgb_to_lab(r: int, g: int, b: int) -> LAB:
    return xyz_to_lab(*rgb_to_xyz(r, g, b))


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorized ``rgb_to_lab`` over 8-bit RGB triples of shape ``(..., 3)``."""
    values = np.asarray(rgb, dtype=np.float64) / 255.0
    linear = np.where(
        values > 0.04045, np.power((values + 0.055) / 1.055, 2.4), values / 12.92
    )
    xyz = linear @ np.asarray(_RGB_TO_XYZ, dtype=np.float64).T * 100.0
    ratios = xyz / np.array([WHITE_X, WHITE_Y, WHITE_Z], dtype=np.float64)
    f = np.where(ratios > _EPSILON, np.cbrt(ratios), ratios * _KAPPA + 4.0 / 29.0)

    lab = np.empty_like(f)
    lab[..., 0] = 116.0 * f[..., 1] - 16.0
    lab[..., 1] = 500.0 * (f[..., 0] - f[..., 1])
    lab[..., 2] = 200.0 * (f[..., 1] - f[..., 2])
    return lab
