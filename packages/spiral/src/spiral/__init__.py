"""
Spiral package for the Silent Spiral.

Integrates the coupled position / velocity / harmonic-oscillator system
with explicit Euler steps. Input: a Parameters snapshot (or a plain
mapping with the seven scalars). Output: a (n_states, 6 + H) trajectory,
truncated at the last finite state if the run diverges.

Parameters and presets live here too; ParameterStore is the only stateful
piece and the integrator never reads from it directly.
"""

from spiral.params import (
    Parameters,
    ParameterError,
    ParamRange,
    PARAM_RANGES,
    MAX_STEPS,
    EXTENDED,
    MINIMAL,
)
from spiral.integrator import (
    TrajectoryIntegrator,
    IntegrationResult,
    integrate,
    initial_state,
)
from spiral.store import ParameterStore, list_presets, get_preset, default_params

__all__ = [
    'Parameters',
    'ParameterError',
    'ParamRange',
    'PARAM_RANGES',
    'MAX_STEPS',
    'EXTENDED',
    'MINIMAL',
    'TrajectoryIntegrator',
    'IntegrationResult',
    'integrate',
    'initial_state',
    'ParameterStore',
    'list_presets',
    'get_preset',
    'default_params',
]
