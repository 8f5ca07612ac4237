"""
Explicit Euler integration of the spiral system.

State layout (length 6 + H):
    [x, y, z, u, v, w, h_0 .. h_{H-1}]

Vector field at time t = i·dt:
    phi      = cos(ω t) + η cos(θ)
    phi_dot  = -ω sin(ω t)
    c        = coupling(h, primes, t)                 (0 in the minimal variant)

    dx, dy, dz = u, v, w
    du = -α u + cos(y) v + phi_dot + c
    dv = -β v + cos(z) w + phi_dot + 0.8 c
    dw = -γ w + cos(x) u + phi_dot + 1.2 c

    driver_j = sin(f_j π phi + jπ/H)   j even
             = cos(f_j π phi + jπ/H)   j odd
    dh_j     = tanh(driver_j w_j - δ h_j + h_{j-1} h_j · 1e-4)

The extended variant uses f_j = prime_j with prime weights; the minimal
variant uses f = (2, 3, 5, 7, 11, 13), w ≡ 1 and no tanh clamp.

A non-finite state ends the run: the trajectory is truncated at the last
finite state and a warning is logged.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, Mapping, Optional, Tuple, Union

from harmonics.coupling import couple, DEFAULT_COUPLING_STRENGTH
from harmonics.primes import PrimeTable, get_prime_table, harmonic_weights
from spiral.params import (
    Parameters,
    ParameterError,
    check_run_length,
    EXTENDED,
    MINIMAL,
)


logger = logging.getLogger(__name__)

INITIAL_POSITION = (0.1, 0.1, 0.1)
INITIAL_VELOCITY = (0.0, 0.0, 0.0)
MINIMAL_FREQUENCIES = (2, 3, 5, 7, 11, 13)
NEIGHBOR_COUPLING = 0.0001
VELOCITY_COUPLING = (1.0, 0.8, 1.2)

ParamsLike = Union[Parameters, Mapping[str, Any]]


@dataclass(frozen=True)
class HarmonicBank:
    """Per-run constants for H harmonics of one variant."""
    variant: str
    primes: Tuple[int, ...]
    frequencies: np.ndarray
    weights: np.ndarray
    phase_shifts: np.ndarray
    even: np.ndarray

    @property
    def size(self) -> int:
        return len(self.primes)


@dataclass
class IntegrationResult:
    """Trajectory plus what happened while producing it."""
    trajectory: np.ndarray
    params: Parameters
    requested_steps: int
    dt: float
    unstable_step: Optional[int] = None

    @property
    def truncated(self) -> bool:
        return self.unstable_step is not None

    @property
    def n_states(self) -> int:
        return int(self.trajectory.shape[0])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'n_states': self.n_states,
            'requested_steps': self.requested_steps,
            'dimension': int(self.trajectory.shape[1]),
            'dt': self.dt,
            'truncated': self.truncated,
            'unstable_step': self.unstable_step,
        }


def initial_state(harmonics: int) -> np.ndarray:
    """Slightly off-origin start: position 0.1, zero velocity, silent harmonics."""
    state = np.zeros(6 + harmonics, dtype=np.float64)
    state[:3] = INITIAL_POSITION
    state[3:6] = INITIAL_VELOCITY
    return state


def _coerce_params(params: ParamsLike) -> Parameters:
    if isinstance(params, Parameters):
        return params
    return Parameters.from_mapping(params)


class TrajectoryIntegrator:
    """
    Euler stepper bound to one prime table.

    Each integrate() call owns its state; the integrator only caches the
    read-only harmonic banks it has built.

    Usage:
        integrator = TrajectoryIntegrator(PrimeTable())
        trajectory = integrator.integrate(params, steps=5000, dt=0.02)
    """

    def __init__(
        self,
        prime_table: Optional[PrimeTable] = None,
        coupling_strength: float = DEFAULT_COUPLING_STRENGTH,
    ):
        self.prime_table = prime_table if prime_table is not None else get_prime_table()
        self.coupling_strength = coupling_strength
        self._banks: Dict[Tuple[str, int], HarmonicBank] = {}

    def bank(self, harmonics: int, variant: str = EXTENDED) -> HarmonicBank:
        key = (variant, harmonics)
        if key not in self._banks:
            self._banks[key] = self._build_bank(harmonics, variant)
        return self._banks[key]

    def _build_bank(self, harmonics: int, variant: str) -> HarmonicBank:
        if variant == MINIMAL:
            primes = MINIMAL_FREQUENCIES
            weights = np.ones(len(primes))
        else:
            if harmonics > len(self.prime_table):
                raise ParameterError(
                    'harmonics',
                    f'{harmonics} harmonics requested but the prime table holds {len(self.prime_table)}',
                )
            primes = tuple(self.prime_table.first(harmonics))
            weights = harmonic_weights(primes)

        idx = np.arange(len(primes))
        return HarmonicBank(
            variant=variant,
            primes=tuple(primes),
            frequencies=np.asarray(primes, dtype=np.float64),
            weights=weights,
            phase_shifts=idx * np.pi / len(primes),
            even=(idx % 2 == 0),
        )

    def derivative(self, state: np.ndarray, t: float, params: Parameters,
                   bank: Optional[HarmonicBank] = None) -> np.ndarray:
        """Evaluate the vector field at (state, t)."""
        if bank is None:
            bank = self.bank(params.harmonics, params.variant)

        x, y, z, u, v, w = state[:6]
        h = state[6:]

        phi = np.cos(params.omega * t) + params.eta * np.cos(params.theta)
        phi_dot = -params.omega * np.sin(params.omega * t)

        if bank.variant == MINIMAL:
            c = 0.0
        else:
            c = couple(h, bank.primes, t, self.coupling_strength, weights=bank.weights)

        d = np.empty_like(state)
        d[0] = u
        d[1] = v
        d[2] = w
        d[3] = -params.alpha * u + np.cos(y) * v + phi_dot + c * VELOCITY_COUPLING[0]
        d[4] = -params.beta * v + np.cos(z) * w + phi_dot + c * VELOCITY_COUPLING[1]
        d[5] = -params.gamma * w + np.cos(x) * u + phi_dot + c * VELOCITY_COUPLING[2]

        arg = bank.frequencies * np.pi * phi + bank.phase_shifts
        driver = np.where(bank.even, np.sin(arg), np.cos(arg))

        neighbor = np.zeros_like(h)
        neighbor[1:] = h[:-1] * h[1:] * NEIGHBOR_COUPLING

        drive = driver * bank.weights - params.delta * h + neighbor
        d[6:] = drive if bank.variant == MINIMAL else np.tanh(drive)
        return d

    def integrate_with_report(self, params: ParamsLike, steps: Optional[int] = None,
                              dt: Optional[float] = None) -> IntegrationResult:
        """
        Integrate and report truncation.

        Parameters
        ----------
        params : Parameters or mapping
            All seven scalars are required.
        steps : int, optional
            Number of Euler steps; defaults to params.steps.
        dt : float, optional
            Time step; defaults to params.dt.

        Returns
        -------
        IntegrationResult — trajectory (n_states, 6 + H), n_states ≤ steps.
        """
        params = _coerce_params(params)
        steps = params.steps if steps is None else steps
        dt = params.dt if dt is None else dt

        params.check_system()
        check_run_length(steps, dt)
        steps, dt = int(steps), float(dt)
        bank = self.bank(params.harmonics, params.variant)

        state = initial_state(bank.size)
        out = np.empty((steps, state.shape[0]), dtype=np.float64)
        n_good = 0
        unstable_step = None

        logger.debug(
            f"Integrating {steps} steps, dt={dt}, {bank.size} harmonics "
            f"({params.variant}, up to frequency {bank.primes[-1]})"
        )

        with np.errstate(over='ignore', invalid='ignore'):
            for i in range(steps):
                state = state + self.derivative(state, i * dt, params, bank) * dt
                if not np.all(np.isfinite(state)):
                    unstable_step = i
                    logger.warning(
                        f"Numerical instability detected at step {i}; trajectory truncated "
                        f"to {n_good} of {steps} states. Consider reducing dt or adjusting parameters."
                    )
                    break
                out[n_good] = state
                n_good += 1

        return IntegrationResult(
            trajectory=out[:n_good].copy(),
            params=params,
            requested_steps=steps,
            dt=dt,
            unstable_step=unstable_step,
        )

    def integrate(self, params: ParamsLike, steps: Optional[int] = None,
                  dt: Optional[float] = None) -> np.ndarray:
        """Trajectory only; see integrate_with_report."""
        return self.integrate_with_report(params, steps, dt).trajectory


def integrate(params: ParamsLike, steps: Optional[int] = None, dt: Optional[float] = None,
              prime_table: Optional[PrimeTable] = None) -> np.ndarray:
    """Integrate with a fresh integrator over the shared (or given) prime table."""
    return TrajectoryIntegrator(prime_table).integrate(params, steps, dt)
