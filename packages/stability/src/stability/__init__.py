"""
Stability package for the Silent Spiral.

Two views of the same run:
- assess_stability: before integrating, score the parameter set
  (Nyquist ratio of the fastest harmonic, damping, harmonic decay)
- analyze_convergence: after integrating, measure whether the coil
  tightens (log spatial spread over time) and which harmonics dominate

Neither raises on a poorly behaved run; they report it.
"""

from stability.assess import assess_stability, stability_status
from stability.convergence import (
    analyze_convergence,
    classify_convergence,
    convergence_rate,
    spatial_spread,
)

__all__ = [
    'assess_stability',
    'stability_status',
    'analyze_convergence',
    'classify_convergence',
    'convergence_rate',
    'spatial_spread',
]
