"""
Preset validation.

Each preset is checked end to end on a short run:
  1. scalar parameters inside their interactive ranges
  2. stability assessment (warnings only, never fails a preset)
  3. integration without divergence
  4. projection with finite X, Y, Z

A preset that fails any hard check is INVALID with the reason attached.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

import numpy as np

from projection.project import ProjectionError, describe, project
from spiral.integrator import TrajectoryIntegrator
from spiral.params import Parameters, ParameterError, SCALAR_FIELDS, validate_param
from spiral.store import get_preset, list_presets
from stability.assess import assess_stability


logger = logging.getLogger(__name__)

VALIDATION_STEPS = 1000

VALID = 'VALID'
INVALID = 'INVALID'


class PresetCheckFailed(Exception):
    """A hard validation check did not pass."""


def _check_run(params: Parameters, steps: int, integrator: TrajectoryIntegrator) -> Dict[str, Any]:
    for name in SCALAR_FIELDS:
        validate_param(name, getattr(params, name))

    result = integrator.integrate_with_report(params, steps=steps)
    if result.n_states == 0:
        raise PresetCheckFailed('No spiral points generated')
    if result.truncated:
        raise PresetCheckFailed(
            f'Numerical instability detected at step {result.unstable_step}'
        )

    projected = project(result.trajectory)
    if not np.all(np.isfinite(projected.points)):
        raise PresetCheckFailed('Projection contains invalid coordinates')

    info = describe(projected)
    return {
        'points_generated': result.n_states,
        'dimensions_used': params.dimension,
        'projection_method': info['method'],
        'coordinate_ranges': info['ranges'],
    }


def validate_preset(
    name: str,
    steps: int = VALIDATION_STEPS,
    integrator: Optional[TrajectoryIntegrator] = None,
) -> Dict[str, Any]:
    """
    Validate one preset.

    Raises KeyError for an unknown preset name; every other problem is
    reported in the returned record.

    Returns
    -------
    dict with:
        preset : str
        status : str — 'VALID' or 'INVALID'
        warnings : list of str — stability warnings
        performance : dict — timing, points, dimensions, coordinate ranges (VALID only)
        error : str — reason (INVALID only)
        parameters : dict — the parameters that were tried (INVALID only)
        timestamp : str — ISO 8601, UTC
    """
    values = get_preset(name)
    integrator = integrator or TrajectoryIntegrator()
    t0 = time.time()

    try:
        params = Parameters.from_mapping(values)
        stability = assess_stability(params, prime_table=integrator.prime_table)
        for warning in stability['warnings']:
            logger.warning(f"Stability warning for {name}: {warning}")

        performance = _check_run(params, steps, integrator)
        performance['generation_time'] = time.time() - t0

    except (ParameterError, ProjectionError, PresetCheckFailed) as e:
        logger.error(f"Preset {name} validation: FAILED - {e}")
        return {
            'preset': name,
            'status': INVALID,
            'error': str(e),
            'parameters': values,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }

    logger.info(f"Preset {name} validation: PASSED ({performance['generation_time'] * 1000:.1f}ms)")
    return {
        'preset': name,
        'status': VALID,
        'warnings': stability['warnings'],
        'performance': performance,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }


def validate_all_presets(steps: int = VALIDATION_STEPS) -> Dict[str, Any]:
    """
    Validate every built-in preset with a shared integrator.

    Returns
    -------
    dict with:
        results : list of dict — one validate_preset() record per preset
        n_valid : int
        n_invalid : int
        success_rate : float — n_valid / n_presets
        all_valid : bool
    """
    integrator = TrajectoryIntegrator()
    results: List[Dict[str, Any]] = [
        validate_preset(name, steps=steps, integrator=integrator)
        for name in list_presets()
    ]

    n_valid = sum(1 for r in results if r['status'] == VALID)
    n_invalid = len(results) - n_valid
    success_rate = n_valid / len(results) if results else 0.0

    logger.info(
        f"Preset validation: {n_valid} valid, {n_invalid} invalid "
        f"({success_rate * 100:.1f}% success)"
    )
    return {
        'results': results,
        'n_valid': n_valid,
        'n_invalid': n_invalid,
        'success_rate': success_rate,
        'all_valid': n_invalid == 0,
    }
