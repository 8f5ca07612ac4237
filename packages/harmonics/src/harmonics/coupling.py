"""
Harmonic coupling term.

One scalar fed back into all three velocity equations so the oscillator
bank shapes the visible spiral:

    direct = Σ_i tanh(h_i · w_i · cos(p_i · t · TIME_SCALE))
    cross  = Σ_{i<j<m} tanh(h_i) · tanh(h_j) · sin((p_i + p_j) · t · CROSS_TIME_SCALE) · CROSS_SCALE
    c      = tanh((direct + cross) · strength)

m = min(CROSS_COUPLING_TERMS, H). NaN in the harmonics propagates to the
result; the integrator's finiteness check catches it.
"""

import numpy as np
from typing import Optional, Sequence

from harmonics.primes import harmonic_weights


TIME_SCALE = 0.001
CROSS_TIME_SCALE = 0.0001
CROSS_SCALE = 0.0001
CROSS_COUPLING_TERMS = 5
DEFAULT_COUPLING_STRENGTH = 0.001


def couple(
    harmonics: Sequence[float],
    primes: Sequence[int],
    sim_time: float,
    coupling_strength: float = DEFAULT_COUPLING_STRENGTH,
    weights: Optional[np.ndarray] = None,
) -> float:
    """
    Compute the coupling term for one integration step.

    Parameters
    ----------
    harmonics : sequence of float
        Harmonic amplitudes h_0..h_{H-1}.
    primes : sequence of int
        Prime per harmonic, same order.
    sim_time : float
        Simulated time t = i·dt.
    coupling_strength : float
        Scale applied before the final tanh.
    weights : np.ndarray, optional
        Precomputed harmonic_weights(primes). Computed if None.

    Returns
    -------
    float in (-1, 1).
    """
    n = min(len(harmonics), len(primes))
    if n == 0:
        return 0.0

    h = np.asarray(harmonics, dtype=np.float64)[:n]
    p = np.asarray(primes, dtype=np.float64)[:n]
    w = harmonic_weights(list(primes)[:n]) if weights is None else np.asarray(weights)[:n]

    total = float(np.sum(np.tanh(h * w * np.cos(p * sim_time * TIME_SCALE))))

    # Pairwise terms on the first few harmonics only
    m = min(CROSS_COUPLING_TERMS, n)
    if m > 1:
        i, j = np.triu_indices(m, k=1)
        th = np.tanh(h[:m])
        cross = th[i] * th[j] * np.sin((p[i] + p[j]) * sim_time * CROSS_TIME_SCALE)
        total += float(np.sum(cross)) * CROSS_SCALE

    return float(np.tanh(total * coupling_strength))
