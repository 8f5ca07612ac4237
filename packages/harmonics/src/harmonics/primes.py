"""
Prime generation and harmonic weights.

    weight(p, i, H) = min(exp(-i / (H * DECAY_CONSTANT)) * boost(p) / p², WEIGHT_CAP)

boost(p) = RESONANCE_BOOST for primes in RESONANT_PRIMES, else 1.0.

The cap keeps every harmonic's driving term bounded regardless of how
small the prime is; the 1/p² factor keeps high-frequency harmonics from
overflowing the Euler step.
"""

import math
import numpy as np
from typing import Dict, Any, List, Optional, Sequence


# Tuned constants
PRIME_LIMIT = 1000
WEIGHT_CAP = 0.01
DECAY_CONSTANT = 0.1
RESONANCE_BOOST = 1.1
RESONANT_PRIMES = frozenset({2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47})


def generate_primes(limit: int) -> List[int]:
    """
    Sieve of Eratosthenes.

    Parameters
    ----------
    limit : int
        Inclusive upper bound.

    Returns
    -------
    list of int — primes ≤ limit, ascending. Empty for limit < 2.
    """
    limit = int(limit)
    if limit < 2:
        return []

    sieve = np.ones(limit + 1, dtype=bool)
    sieve[:2] = False
    for i in range(2, math.isqrt(limit) + 1):
        if sieve[i]:
            sieve[i * i::i] = False

    return [int(p) for p in np.flatnonzero(sieve)]


def resonance_boost(prime: int) -> float:
    return RESONANCE_BOOST if prime in RESONANT_PRIMES else 1.0


def harmonic_weight(prime: int, index: int, total_harmonics: int) -> float:
    """
    Weight scaling the driving term of one harmonic oscillator.

    Parameters
    ----------
    prime : int
        Prime associated with the harmonic (≥ 2).
    index : int
        Harmonic index, 0-based.
    total_harmonics : int
        Number of harmonics H in the bank.

    Returns
    -------
    float in (0, WEIGHT_CAP].
    """
    if prime < 2:
        raise ValueError(f"prime must be >= 2, got {prime}")
    if index < 0:
        raise ValueError(f"index must be >= 0, got {index}")
    if total_harmonics < 1:
        raise ValueError(f"total_harmonics must be >= 1, got {total_harmonics}")

    decay = math.exp(-index / (total_harmonics * DECAY_CONSTANT))
    weight = decay * resonance_boost(prime) / (prime * prime)
    return min(weight, WEIGHT_CAP)


def harmonic_weights(primes: Sequence[int]) -> np.ndarray:
    """Weights for a whole bank, H = len(primes)."""
    total = len(primes)
    return np.array(
        [harmonic_weight(p, i, total) for i, p in enumerate(primes)],
        dtype=np.float64,
    )


def analyze_prime_density(max_prime: int = PRIME_LIMIT, window_size: int = 100) -> Dict[str, Any]:
    """
    Count primes per fixed-width window of the integers.

    Returns
    -------
    dict with:
        total_primes : int
        average_density : float — primes per integer up to max_prime
        density_windows : list of dict — range, count, density per window
    """
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")

    primes = np.asarray(generate_primes(max_prime), dtype=np.int64)
    windows = []
    for start in range(0, max(max_prime, 0), window_size):
        end = min(start + window_size, max_prime)
        count = int(np.count_nonzero((primes >= start) & (primes < end)))
        windows.append({
            'range': f'{start}-{end}',
            'count': count,
            'density': count / window_size,
        })

    return {
        'total_primes': int(len(primes)),
        'average_density': len(primes) / max_prime if max_prime > 0 else 0.0,
        'density_windows': windows,
    }


class PrimeTable:
    """
    Read-only table of the primes up to `limit`.

    Built once; hand the same instance to every integrator that needs it,
    or build an isolated one in tests.
    """

    def __init__(self, limit: int = PRIME_LIMIT):
        self.limit = int(limit)
        self._primes = tuple(generate_primes(self.limit))

    def __len__(self) -> int:
        return len(self._primes)

    @property
    def primes(self) -> tuple:
        return self._primes

    def first(self, n: int) -> List[int]:
        """First n primes, ascending."""
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        if n > len(self._primes):
            raise ValueError(
                f"Requested {n} primes but table up to {self.limit} holds {len(self._primes)}"
            )
        return list(self._primes[:n])

    def weights(self, n: int) -> np.ndarray:
        return harmonic_weights(self.first(n))

    def categories(self) -> Dict[str, List[int]]:
        """Split by harmonic role: fundamentals, mid-range, overtones, ultra-high."""
        p = list(self._primes)
        return {
            'fundamentals': p[:10],
            'mid_range': p[10:50],
            'overtones': p[50:100],
            'ultra_high': p[100:],
        }


_prime_table: Optional[PrimeTable] = None


def get_prime_table() -> PrimeTable:
    """Get the shared process-wide prime table (built on first use)."""
    global _prime_table
    if _prime_table is None:
        _prime_table = PrimeTable()
    return _prime_table
