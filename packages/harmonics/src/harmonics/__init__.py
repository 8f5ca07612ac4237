"""
Harmonics package for the Silent Spiral.

Prime-indexed harmonic oscillator bank:
- Sieve of Eratosthenes and a lazily built, read-only prime table
- Per-harmonic weights (exponential decay × resonance boost × 1/p², capped)
- Scalar coupling term fed back into the velocity equations

Every harmonic j is driven at frequency prime_j · π; low-index harmonics
dominate by construction.
"""

from harmonics.primes import (
    generate_primes,
    harmonic_weight,
    harmonic_weights,
    resonance_boost,
    analyze_prime_density,
    PrimeTable,
    get_prime_table,
)
from harmonics.coupling import couple

__all__ = [
    'generate_primes',
    'harmonic_weight',
    'harmonic_weights',
    'resonance_boost',
    'analyze_prime_density',
    'PrimeTable',
    'get_prime_table',
    'couple',
]
