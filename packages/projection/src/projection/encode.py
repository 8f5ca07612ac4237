"""
Visual encodings from the harmonic coordinates.

Primary channels are always h0..h5 (state columns 6..11). Harmonics
beyond the first six enter through one weighted sum per sample:

    extra = Σ_{k ≥ 6} h_k · cos(0.1 k) · 0.1

    color   = ((h0 + 0.5 extra) mod 1, (h1 + 0.3 extra) mod 1, (h2 + 0.7 extra) mod 1)
    size    = |h3 + 0.2 extra| · 2 + 1          ≥ 1
    opacity = 0.5 + 0.5 tanh(h4 + 0.1 extra)     in [0, 1]
"""

import numpy as np
from typing import Dict


BASE_HARMONICS = 6
EXTRA_FREQUENCY = 0.1
EXTRA_SCALE = 0.1
COLOR_MIX = (0.5, 0.3, 0.7)
SIZE_MIX = 0.2
OPACITY_MIX = 0.1


def base_harmonics(trajectory: np.ndarray) -> np.ndarray:
    """Columns h0..h5, zero-padded when the bank has fewer than six."""
    h = trajectory[:, 6:6 + BASE_HARMONICS]
    if h.shape[1] < BASE_HARMONICS:
        h = np.hstack([h, np.zeros((h.shape[0], BASE_HARMONICS - h.shape[1]))])
    return h


def extra_harmonic_sum(trajectory: np.ndarray) -> np.ndarray:
    """Weighted sum of harmonics past h5; zeros when there are none."""
    rest = trajectory[:, 6 + BASE_HARMONICS:]
    if rest.shape[1] == 0:
        return np.zeros(trajectory.shape[0])
    k = np.arange(BASE_HARMONICS, BASE_HARMONICS + rest.shape[1])
    return rest @ (np.cos(EXTRA_FREQUENCY * k) * EXTRA_SCALE)


def _wrap_unit(values: np.ndarray) -> np.ndarray:
    wrapped = np.mod(values, 1.0)
    # mod of a tiny negative number rounds up to exactly 1.0
    wrapped[wrapped >= 1.0] = 0.0
    return wrapped


def compute_encodings(trajectory: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Color, size and opacity per trajectory sample.

    Returns
    -------
    dict with:
        color : np.ndarray — (n, 3) in [0, 1)
        size : np.ndarray — (n,) ≥ 1
        opacity : np.ndarray — (n,) in [0, 1]
    """
    h = base_harmonics(trajectory)
    extra = extra_harmonic_sum(trajectory)

    color = np.column_stack([
        _wrap_unit(h[:, 0] + extra * COLOR_MIX[0]),
        _wrap_unit(h[:, 1] + extra * COLOR_MIX[1]),
        _wrap_unit(h[:, 2] + extra * COLOR_MIX[2]),
    ])
    size = np.abs(h[:, 3] + extra * SIZE_MIX) * 2.0 + 1.0
    opacity = 0.5 + 0.5 * np.tanh(h[:, 4] + extra * OPACITY_MIX)

    return {'color': color, 'size': size, 'opacity': opacity}
