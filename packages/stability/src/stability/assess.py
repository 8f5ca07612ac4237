"""
Pre-run numerical stability assessment.

The fastest harmonic runs at ω · p_max. Explicit Euler needs it well
below the Nyquist limit of the step size:

    nyquist_limit = 1 / (2 dt)
    nyquist_ratio = ω · p_max / (0.1 · nyquist_limit)

Score starts at 1.0 and is multiplied down for each risk factor:
    nyquist_ratio > 1          × 0.5
    min(α, β, γ) < 0.005       × 0.7
    δ > 0.1                    × 0.8
    non-finite state           → 0

Status: Stable (> 0.8), Marginal (> 0.5), Unstable (> 0.2), Critical.
"""

import numpy as np
from typing import Dict, Any, List, Mapping, Optional, Union

from harmonics.primes import PrimeTable
from spiral.integrator import TrajectoryIntegrator
from spiral.params import Parameters


NYQUIST_MARGIN = 0.1
MIN_DAMPING = 0.005
MAX_DECAY = 0.1

NYQUIST_PENALTY = 0.5
DAMPING_PENALTY = 0.7
DECAY_PENALTY = 0.8

STABLE = 'Stable'
MARGINAL = 'Marginal'
UNSTABLE = 'Unstable'
CRITICAL = 'Critical'


def largest_frequency(params: Parameters, prime_table: Optional[PrimeTable] = None) -> int:
    """Highest harmonic frequency multiplier the run will use."""
    bank = TrajectoryIntegrator(prime_table).bank(params.harmonics, params.variant)
    return bank.primes[-1]


def stability_score(metrics: Dict[str, Any]) -> float:
    score = 1.0
    if metrics['nyquist_ratio'] > 1.0:
        score *= NYQUIST_PENALTY
    if metrics['damping_min'] < MIN_DAMPING:
        score *= DAMPING_PENALTY
    if metrics['harmonic_decay'] > MAX_DECAY:
        score *= DECAY_PENALTY
    if not metrics['state_finite']:
        score = 0.0
    return float(min(max(score, 0.0), 1.0))


def stability_status(score: float) -> str:
    if score > 0.8:
        return STABLE
    if score > 0.5:
        return MARGINAL
    if score > 0.2:
        return UNSTABLE
    return CRITICAL


def stability_warnings(metrics: Dict[str, Any]) -> List[str]:
    """Human-readable reasons behind a reduced score."""
    warnings = []
    if metrics['nyquist_ratio'] > 1.0:
        warnings.append(
            f"High frequency content ({metrics['max_frequency']:.1f} > "
            f"{metrics['nyquist_limit'] * NYQUIST_MARGIN:.1f}); reduce omega or dt"
        )
    if metrics['damping_min'] < MIN_DAMPING:
        warnings.append(
            f"Low damping ({metrics['damping_min']}) may cause divergence; "
            f"increase alpha/beta/gamma"
        )
    if metrics['harmonic_decay'] > MAX_DECAY:
        warnings.append(f"High delta ({metrics['harmonic_decay']}) may cause rapid harmonic decay")
    if not metrics['state_finite']:
        warnings.append('CRITICAL: non-finite values in state')
    return warnings


def assess_stability(
    params: Union[Parameters, Mapping[str, Any]],
    state: Optional[np.ndarray] = None,
    prime_table: Optional[PrimeTable] = None,
) -> Dict[str, Any]:
    """
    Score the numerical risk of a parameter set.

    Parameters
    ----------
    params : Parameters or mapping
        Run parameters; dt and the harmonic bank size come from here.
    state : np.ndarray, optional
        A state vector to check for finiteness (e.g. the final state).
    prime_table : PrimeTable, optional
        Table the run will draw its frequencies from.

    Returns
    -------
    dict with:
        metrics : dict — nyquist_ratio, nyquist_limit, max_frequency,
            largest_prime, damping_min, harmonic_decay, state_finite
        score : float — in [0, 1]
        status : str — 'Stable', 'Marginal', 'Unstable' or 'Critical'
        warnings : list of str
    """
    if not isinstance(params, Parameters):
        params = Parameters.from_mapping(params)

    p_max = largest_frequency(params, prime_table)
    nyquist_limit = 1.0 / (2.0 * params.dt)
    max_frequency = params.omega * p_max

    if state is None:
        state_finite = True
    else:
        state_finite = bool(np.all(np.isfinite(np.asarray(state, dtype=np.float64))))

    metrics = {
        'nyquist_ratio': float(max_frequency / (NYQUIST_MARGIN * nyquist_limit)),
        'nyquist_limit': float(nyquist_limit),
        'max_frequency': float(max_frequency),
        'largest_prime': int(p_max),
        'damping_min': float(min(params.alpha, params.beta, params.gamma)),
        'harmonic_decay': float(params.delta),
        'state_finite': state_finite,
    }

    score = stability_score(metrics)
    return {
        'metrics': metrics,
        'score': score,
        'status': stability_status(score),
        'warnings': stability_warnings(metrics),
    }
