"""
Pipeline runner: one spiral from parameters to point cloud.

    resolve params → assess stability → integrate → project → analyse

No math lives here. Only wiring, timing and logging.

Usage:
    from cathedral.pipeline import run_pipeline
    result = run_pipeline(preset='Harmonic Resonance', steps=5000)
    frame = result.to_frame()
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Any, Mapping, Optional

import polars as pl

from projection.flatten import flatten_result, to_frame
from projection.project import ProjectionResult, project
from spiral.integrator import IntegrationResult, TrajectoryIntegrator
from spiral.params import Parameters
from spiral.store import default_params, get_preset
from stability.assess import assess_stability
from stability.convergence import analyze_convergence


logger = logging.getLogger(__name__)


class PipelineError(RuntimeError):
    """The run produced nothing that can be projected."""


@dataclass
class PipelineResult:
    """Outputs of every stage of one run."""
    params: Parameters
    integration: IntegrationResult
    projection: ProjectionResult
    stability: Dict[str, Any]
    convergence: Optional[Dict[str, Any]] = None
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def trajectory(self):
        return self.integration.trajectory

    @property
    def truncated(self) -> bool:
        return self.integration.truncated

    def to_frame(self) -> pl.DataFrame:
        return to_frame(self.projection)

    def summary(self) -> Dict[str, Any]:
        """Flat dict of scalars describing the run."""
        row: Dict[str, Any] = {}
        row.update(self.integration.to_dict())
        row['harmonics'] = self.params.harmonics
        row['variant'] = self.params.variant
        row['stability_score'] = self.stability['score']
        row['stability_status'] = self.stability['status']
        row.update(flatten_result(self.projection))
        if self.convergence is not None:
            row['convergence_rate'] = self.convergence['convergence_rate']
            row['convergence'] = self.convergence['classification']
            row['spread_ratio'] = self.convergence['spread_ratio']
            dominant = self.convergence['dominant_harmonics']
            row['dominant_prime'] = dominant[0]['prime'] if dominant else None
        for stage, elapsed in self.timings.items():
            row[f'{stage}_seconds'] = elapsed
        return row


def resolve_params(
    preset: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    steps: Optional[int] = None,
    dt: Optional[float] = None,
    harmonics: Optional[int] = None,
    variant: Optional[str] = None,
) -> Parameters:
    """
    Build a parameter snapshot from a preset (or the defaults) plus overrides.

    Raises KeyError for an unknown preset and ParameterError for bad values.
    """
    values = get_preset(preset) if preset else default_params()
    if overrides:
        values.update(overrides)
    extra = {
        name: value
        for name, value in (('steps', steps), ('dt', dt), ('harmonics', harmonics), ('variant', variant))
        if value is not None
    }
    return Parameters.from_mapping(values, **extra)


def run_pipeline(
    params: Optional[Parameters] = None,
    integrator: Optional[TrajectoryIntegrator] = None,
    analyze: bool = True,
    **kwargs,
) -> PipelineResult:
    """
    Run one spiral end to end.

    Parameters
    ----------
    params : Parameters, optional
        Snapshot to run. If omitted, built by resolve_params(**kwargs).
    integrator : TrajectoryIntegrator, optional
        Reuse an integrator (and its cached harmonic banks).
    analyze : bool
        Run the convergence analysis after projecting.

    Returns
    -------
    PipelineResult
    """
    if params is None:
        params = resolve_params(**kwargs)
    elif kwargs:
        raise TypeError(f"Unexpected arguments with explicit params: {sorted(kwargs)}")
    params.check_contract()

    integrator = integrator or TrajectoryIntegrator()
    timings: Dict[str, float] = {}

    stability = assess_stability(params, prime_table=integrator.prime_table)
    for warning in stability['warnings']:
        logger.warning(f"Stability ({stability['status']}): {warning}")

    t0 = time.time()
    integration = integrator.integrate_with_report(params)
    timings['integrate'] = time.time() - t0

    if integration.n_states == 0:
        raise PipelineError(
            f"Integration diverged at step {integration.unstable_step}; no finite states to project"
        )

    t0 = time.time()
    projection = project(integration.trajectory)
    timings['project'] = time.time() - t0

    convergence = None
    if analyze:
        t0 = time.time()
        bank = integrator.bank(params.harmonics, params.variant)
        convergence = analyze_convergence(integration.trajectory, primes=bank.primes)
        timings['analyze'] = time.time() - t0

    result = PipelineResult(
        params=params,
        integration=integration,
        projection=projection,
        stability=stability,
        convergence=convergence,
        timings=timings,
    )

    logger.info(
        f"Spiral: {integration.n_states}/{integration.requested_steps} states, "
        f"{params.dimension}D → 3D via {projection.method}, "
        f"stability {stability['status']} ({stability['score']:.2f})"
        + (f", convergence {convergence['classification']} ({convergence['convergence_rate']:.6f})"
           if convergence else "")
    )
    return result
