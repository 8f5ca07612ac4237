"""Tests for the end-to-end spiral pipeline."""

import logging

import numpy as np
import polars as pl
import pytest

from cathedral.pipeline import PipelineError, PipelineResult, resolve_params, run_pipeline
from spiral.integrator import IntegrationResult, TrajectoryIntegrator
from spiral.params import Parameters, ParameterError


DIVERGENT = {'alpha': -20.0, 'beta': -20.0, 'gamma': -20.0, 'omega': 5.0,
             'eta': 0.1, 'theta': 0.0, 'delta': 0.05}


class _DeadIntegrator(TrajectoryIntegrator):
    """Diverges before producing a single finite state."""

    def integrate_with_report(self, params, steps=None, dt=None):
        return IntegrationResult(
            trajectory=np.empty((0, params.dimension)),
            params=params,
            requested_steps=params.steps,
            dt=params.dt,
            unstable_step=0,
        )


class TestResolveParams:

    def test_defaults(self):
        params = resolve_params()
        assert params == Parameters()

    def test_preset_with_overrides(self):
        params = resolve_params('Gentle Waves', overrides={'omega': 0.7}, steps=2000)
        assert params.alpha == 0.02
        assert params.omega == 0.7
        assert params.steps == 2000
        assert params.dt == 0.02

    def test_unknown_preset(self):
        with pytest.raises(KeyError):
            resolve_params('No Such Preset')

    def test_unknown_override(self):
        with pytest.raises(ParameterError) as exc:
            resolve_params(overrides={'zeta': 1.0})
        assert exc.value.field == 'zeta'


class TestRunPipeline:

    def test_default_run(self):
        result = run_pipeline(steps=1200)
        assert isinstance(result, PipelineResult)
        assert result.trajectory.shape == (1200, 56)
        assert len(result.projection) == 1200
        assert result.projection.method == 'pca_subsampled'
        assert not result.truncated
        assert result.stability['status'] == 'Unstable'
        assert result.convergence['n_harmonics'] == 50

    def test_summary(self):
        summary = run_pipeline(steps=600).summary()
        for key in ['n_states', 'requested_steps', 'dimension', 'truncated', 'method',
                    'stability_status', 'stability_score', 'convergence_rate',
                    'convergence', 'dominant_prime', 'integrate_seconds', 'project_seconds']:
            assert key in summary
        assert summary['n_states'] == 600
        assert summary['dimension'] == 56

    def test_minimal_variant(self):
        result = run_pipeline(steps=500, harmonics=6, variant='minimal')
        assert result.trajectory.shape == (500, 12)
        assert result.projection.method == 'pca'
        primes = [h['prime'] for h in result.convergence['harmonics']]
        assert primes == [2, 3, 5, 7, 11, 13]

    def test_preset_run(self):
        result = run_pipeline(preset='Harmonic Resonance', steps=400)
        assert result.params.omega == 2.3
        assert np.all(np.isfinite(result.projection.points))

    def test_without_analysis(self):
        result = run_pipeline(steps=300, analyze=False)
        assert result.convergence is None
        assert 'analyze' not in result.timings
        assert 'convergence' not in result.summary()

    def test_explicit_params(self):
        params = Parameters(steps=300, harmonics=8)
        result = run_pipeline(params)
        assert result.params is params
        assert result.trajectory.shape == (300, 14)

    def test_explicit_params_reject_kwargs(self):
        with pytest.raises(TypeError):
            run_pipeline(Parameters(), steps=100)

    def test_contract_checked_first(self):
        with pytest.raises(ParameterError) as exc:
            run_pipeline(Parameters(dt=0.0))
        assert exc.value.field == 'dt'

    def test_shared_integrator(self):
        integrator = TrajectoryIntegrator()
        run_pipeline(steps=200, integrator=integrator)
        bank = integrator.bank(50)
        run_pipeline(steps=200, integrator=integrator)
        assert integrator.bank(50) is bank

    def test_to_frame(self):
        frame = run_pipeline(steps=250).to_frame()
        assert isinstance(frame, pl.DataFrame)
        assert frame.height == 250

    def test_divergent_run_is_truncated(self, caplog):
        params = Parameters.from_mapping(DIVERGENT, steps=5000, dt=0.1)
        with caplog.at_level(logging.WARNING):
            result = run_pipeline(params)
        assert result.truncated
        assert 0 < result.integration.n_states < 5000
        assert len(result.projection) == result.integration.n_states
        assert any('Numerical instability' in r.getMessage() for r in caplog.records)

    def test_nothing_to_project(self):
        with pytest.raises(PipelineError):
            run_pipeline(Parameters(steps=100), integrator=_DeadIntegrator())

    def test_logs_summary(self, caplog):
        with caplog.at_level(logging.INFO, logger='cathedral.pipeline'):
            run_pipeline(steps=200)
        messages = [r.getMessage() for r in caplog.records if r.name == 'cathedral.pipeline']
        assert any(m.startswith('Spiral: 200/200 states') for m in messages)
        assert any('Stability' in m for m in messages)
