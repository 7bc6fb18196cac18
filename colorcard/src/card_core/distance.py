from __future__ import annotations

import math
from typing import Callable

import numpy as np
from skimage.color import deltaE_ciede2000

from .models import LAB

DistanceMetric = Callable[[LAB, LAB], float]

_POW25_7 = 25.0**7


def delta_e_simplified(lab1: LAB, lab2: LAB) -> float:
    """Chroma-corrected Lab distance in the style of CIEDE2000.

    Uses the G-factor a-axis correction and the chroma-weighted hue term of
    CIEDE2000, but combines dL', dC' and dH' as a plain Euclidean norm without
    the S_L/S_C/S_H weights or the R_T rotation term.
    """
    l1, a1, b1 = lab1
    l2, a2, b2 = lab2

    c1 = math.hypot(a1, b1)
    c2 = math.hypot(a2, b2)
    avg_c7 = ((c1 + c2) / 2.0) ** 7
    g = 0.5 * (1.0 - math.sqrt(avg_c7 / (avg_c7 + _POW25_7)))

    a1_prime = a1 * (1.0 + g)
    a2_prime = a2 * (1.0 + g)
    c1_prime = math.hypot(a1_prime, b1)
    c2_prime = math.hypot(a2_prime, b2)

    h1_prime = math.degrees(math.atan2(b1, a1_prime)) % 360.0
    h2_prime = math.degrees(math.atan2(b2, a2_prime)) % 360.0

    delta_l = l2 - l1
    delta_c = c2_prime - c1_prime

    if c1_prime * c2_prime == 0.0:
        delta_h_deg = 0.0
    else:
        delta_h_deg = h2_prime - h1_prime
        if delta_h_deg > 180.0:
            delta_h_deg -= 360.0
        elif delta_h_deg < -180.0:
            delta_h_deg += 360.0

    delta_h = 2.0 * math.sqrt(c1_prime * c2_prime) * math.sin(math.radians(delta_h_deg) / 2.0)
    return math.sqrt(delta_l * delta_l + delta_c * delta_c + delta_h * delta_h)


def delta_e_ciede2000(lab1: LAB, lab2: LAB) -> float:
    """Full CIEDE2000 color difference (kL = kC = kH = 1)."""
    first = np.asarray(lab1, dtype=np.float64).reshape(1, 1, 3)
    second = np.asarray(lab2, dtype=np.float64).reshape(1, 1, 3)
    return float(deltaE_ciede2000(first, second).reshape(-1)[0])


METRICS: dict[str, DistanceMetric] = {
    "simplified": delta_e_simplified,
    "ciede2000": delta_e_ciede2000,
}


def get_metric(name: str) -> DistanceMetric:
    try:
        return METRICS[name]
    except KeyError:
        raise ValueError(
            f"unknown distance metric '{name}'. Use one of: {', '.join(sorted(METRICS))}"
        ) from None
