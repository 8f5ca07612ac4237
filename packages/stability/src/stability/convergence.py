"""
Manifold convergence analysis of a finished trajectory.

Spatial spread of a segment = mean Euclidean distance of its (x, y, z)
points from the segment centroid. Comparing the first and last
SEGMENT_SIZE points gives the spread ratio; a least-squares line through

    log(spread_k),   k = window index over consecutive SEGMENT_SIZE windows

gives the convergence rate. Negative slope = the coil is tightening.

Per-harmonic statistics rank the oscillators by fluctuation size
(rms = sqrt of the variance about the mean).
"""

import numpy as np
from scipy import stats
from typing import Dict, Any, List, Optional, Sequence

from harmonics.primes import get_prime_table


SEGMENT_SIZE = 1000
TOP_HARMONICS = 10
MIN_SPREAD = 1e-10

STRONG = 'Strong'
MODERATE = 'Moderate'
WEAK = 'Weak'
DIVERGENT = 'Divergent'


def spatial_spread(segment: np.ndarray) -> float:
    """Mean distance of the segment's x, y, z from their centroid."""
    xyz = np.asarray(segment, dtype=np.float64)[:, :3]
    if len(xyz) == 0:
        return np.nan
    centroid = xyz.mean(axis=0)
    return float(np.mean(np.linalg.norm(xyz - centroid, axis=1)))


def window_spreads(trajectory: np.ndarray, window: int = SEGMENT_SIZE) -> np.ndarray:
    """Spread of each full window; the trailing window is left out."""
    n = len(trajectory)
    return np.array([
        spatial_spread(trajectory[i:i + window])
        for i in range(0, n - window, window)
    ])


def convergence_rate(trajectory: np.ndarray, window: int = SEGMENT_SIZE) -> float:
    """
    Slope of log spread against window index.

    0.0 when fewer than two windows fit in the trajectory.
    """
    spreads = window_spreads(trajectory, window)
    if len(spreads) < 2:
        return 0.0
    log_spreads = np.log(np.maximum(spreads, MIN_SPREAD))
    fit = stats.linregress(np.arange(len(spreads)), log_spreads)
    return float(fit.slope)


def classify_convergence(rate: float) -> str:
    if rate < -0.01:
        return STRONG
    if rate < -0.001:
        return MODERATE
    if rate < 0:
        return WEAK
    return DIVERGENT


def harmonic_statistics(trajectory: np.ndarray, primes: Sequence[int]) -> List[Dict[str, Any]]:
    """One entry per harmonic: prime, index, variance, rms, frequency = prime·π."""
    h = np.asarray(trajectory, dtype=np.float64)[:, 6:]
    variance = np.var(h, axis=0)
    rms = np.sqrt(variance)

    rows = []
    for i in range(h.shape[1]):
        prime = int(primes[i]) if i < len(primes) else 0
        rows.append({
            'index': i,
            'prime': prime,
            'variance': float(variance[i]),
            'rms': float(rms[i]),
            'frequency': float(prime * np.pi),
        })
    return rows


def analyze_convergence(
    trajectory: np.ndarray,
    primes: Optional[Sequence[int]] = None,
    segment_size: int = SEGMENT_SIZE,
    top: int = TOP_HARMONICS,
) -> Dict[str, Any]:
    """
    Convergence and harmonic-energy summary of a trajectory.

    Parameters
    ----------
    trajectory : np.ndarray
        (n_states, 6 + H) matrix from the integrator.
    primes : sequence of int, optional
        Frequency multiplier of each harmonic. Defaults to the first H
        primes of the shared table.
    segment_size : int
        Points per spread segment / regression window.
    top : int
        Number of dominant harmonics to report.

    Returns
    -------
    dict with:
        n_states : int
        n_harmonics : int
        harmonics : list of dict — per-harmonic statistics
        initial_spread : float — spread of the first segment
        final_spread : float — spread of the last segment
        spread_ratio : float — final / initial (nan if initial is 0)
        convergence_rate : float — slope of log spread per window
        classification : str — 'Strong', 'Moderate', 'Weak' or 'Divergent'
        dominant_harmonics : list of dict — top harmonics by rms
        energy_share : list of dict — prime and fraction of total rms
        state_magnitude : float — norm of the final state
        harmonic_energy : float — Σ h² of the final state
    """
    trajectory = np.asarray(trajectory, dtype=np.float64)
    if trajectory.ndim != 2 or trajectory.shape[0] == 0:
        return _empty_result()

    n_harmonics = trajectory.shape[1] - 6
    if primes is None:
        primes = get_prime_table().first(n_harmonics)

    harmonics = harmonic_statistics(trajectory, primes)

    initial_spread = spatial_spread(trajectory[:segment_size])
    final_spread = spatial_spread(trajectory[-segment_size:])
    spread_ratio = final_spread / initial_spread if initial_spread > 0 else np.nan

    rate = convergence_rate(trajectory, segment_size)

    dominant = sorted(harmonics, key=lambda r: r['rms'], reverse=True)[:top]

    total_rms = sum(r['rms'] for r in harmonics)
    energy_share = [
        {'prime': r['prime'], 'share': r['rms'] / total_rms if total_rms > 0 else 0.0}
        for r in harmonics
    ]

    final = trajectory[-1]
    return {
        'n_states': int(trajectory.shape[0]),
        'n_harmonics': int(n_harmonics),
        'harmonics': harmonics,
        'initial_spread': initial_spread,
        'final_spread': final_spread,
        'spread_ratio': float(spread_ratio),
        'convergence_rate': rate,
        'classification': classify_convergence(rate),
        'dominant_harmonics': dominant,
        'energy_share': energy_share,
        'state_magnitude': float(np.linalg.norm(final)),
        'harmonic_energy': float(np.sum(final[6:] ** 2)),
    }


def _empty_result() -> Dict[str, Any]:
    return {
        'n_states': 0,
        'n_harmonics': 0,
        'harmonics': [],
        'initial_spread': np.nan,
        'final_spread': np.nan,
        'spread_ratio': np.nan,
        'convergence_rate': 0.0,
        'classification': DIVERGENT,
        'dominant_harmonics': [],
        'energy_share': [],
        'state_magnitude': np.nan,
        'harmonic_energy': np.nan,
    }
