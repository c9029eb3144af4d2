# kestrel/texture/colorspace.py
"""
sRGB transfer functions, matching what GL does when it samples from or
writes to an sRGB texture.
"""

from __future__ import annotations

import numpy as np

SRGB_THRESHOLD = 0.04045
LINEAR_THRESHOLD = 0.0031308


def srgb_to_linear(c: np.ndarray | float) -> np.ndarray:
    c = np.asarray(c, dtype=np.float32)
    lo = c / 12.92
    hi = np.power((np.maximum(c, 0.0) + 0.055) / 1.055, 2.4)
    return np.where(c <= SRGB_THRESHOLD, lo, hi).astype(np.float32)


def linear_to_srgb(c: np.ndarray | float) -> np.ndarray:
    c = np.asarray(c, dtype=np.float32)
    lo = c * 12.92
    hi = 1.055 * np.power(np.maximum(c, 0.0), 1.0 / 2.4) - 0.055
    return np.where(c <= LINEAR_THRESHOLD, lo, hi).astype(np.float32)
