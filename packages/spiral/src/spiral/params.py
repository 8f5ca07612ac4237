"""
Parameter record for the spiral integrator.

Two layers of checks:
- check_contract(): what the integrator needs to run at all
  (finite scalars, 1 ≤ steps ≤ MAX_STEPS, 0 < dt ≤ 1, H valid).
  check_system() is the same minus steps and dt.
  Violations are caller bugs and fail before any stepping.
- check_ranges(): the interactive ranges in PARAM_RANGES, enforced by
  ParameterStore. A run outside these ranges is allowed but may diverge.
"""

import math
import numbers
from dataclasses import dataclass, asdict, replace
from typing import Dict, Any, Mapping, Optional


MAX_STEPS = 100_000
MAX_DT = 1.0

EXTENDED = 'extended'
MINIMAL = 'minimal'
VARIANTS = (EXTENDED, MINIMAL)

DEFAULT_HARMONICS = 50
MINIMAL_HARMONICS = 6

SCALAR_FIELDS = ('alpha', 'beta', 'gamma', 'omega', 'eta', 'theta', 'delta')


class ParameterError(ValueError):
    """Invalid parameter record. `field` names the offending entry."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


@dataclass(frozen=True)
class ParamRange:
    """Valid interval for one named parameter."""
    min: float
    max: float
    step: float
    min_exclusive: bool = False

    def contains(self, value: float) -> bool:
        above = value > self.min if self.min_exclusive else value >= self.min
        return above and value <= self.max

    def describe(self) -> str:
        left = '(' if self.min_exclusive else '['
        return f"{left}{self.min}, {self.max}] step {self.step}"


PARAM_RANGES: Dict[str, ParamRange] = {
    'alpha': ParamRange(0.01, 0.5, 0.01, min_exclusive=True),
    'beta': ParamRange(0.01, 0.5, 0.01, min_exclusive=True),
    'gamma': ParamRange(0.01, 0.5, 0.01, min_exclusive=True),
    'omega': ParamRange(0.1, 5.0, 0.1),
    'eta': ParamRange(0.0, 1.0, 0.01),
    'theta': ParamRange(0.0, 2 * math.pi, 0.01),
    'delta': ParamRange(0.01, 0.2, 0.01),
    'steps': ParamRange(1000, 50000, 1000),
    'dt': ParamRange(0.001, 0.1, 0.001),
}


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class Parameters:
    """
    Snapshot of everything one integration run needs.

    harmonics is H, the size of the oscillator bank; the state vector
    has 6 + H entries. variant picks the equation set for the whole run.
    """
    alpha: float = 0.1
    beta: float = 0.1
    gamma: float = 0.1
    omega: float = 1.0
    eta: float = 0.1
    theta: float = 0.0
    delta: float = 0.05
    steps: int = 10000
    dt: float = 0.02
    harmonics: int = DEFAULT_HARMONICS
    variant: str = EXTENDED

    @property
    def dimension(self) -> int:
        return 6 + self.harmonics

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]], **overrides) -> 'Parameters':
        """
        Build from a plain mapping (e.g. a preset or a GUI record).

        The seven scalar fields are required; steps, dt, harmonics and
        variant fall back to the defaults when absent.
        """
        if values is None or not isinstance(values, Mapping):
            raise ParameterError('params', 'parameters must be provided as a mapping')

        merged = dict(values)
        merged.update(overrides)

        for name in SCALAR_FIELDS:
            if name not in merged:
                raise ParameterError(name, 'required parameter is missing')
            if not _is_number(merged[name]):
                raise ParameterError(name, f'must be a number, got {merged[name]!r}')

        unknown = set(merged) - set(cls.__dataclass_fields__)
        if unknown:
            raise ParameterError(sorted(unknown)[0], 'unknown parameter')

        # numpy scalars are stored as plain Python numbers
        for name in SCALAR_FIELDS:
            merged[name] = float(merged[name])
        if _is_number(merged.get('dt')):
            merged['dt'] = float(merged['dt'])
        for name in ('steps', 'harmonics'):
            if _is_integer(merged.get(name)):
                merged[name] = int(merged[name])

        return cls(**merged)

    def with_updates(self, **changes) -> 'Parameters':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def check_contract(self) -> 'Parameters':
        """Raise ParameterError unless this record can be integrated."""
        self.check_system()
        check_run_length(self.steps, self.dt)
        return self

    def check_system(self) -> 'Parameters':
        """
        Check everything except the run length.

        Used when steps and dt are supplied separately from the record.
        """
        for name in SCALAR_FIELDS:
            value = getattr(self, name)
            if not _is_number(value):
                raise ParameterError(name, f'must be a number, got {value!r}')
            if not math.isfinite(value):
                raise ParameterError(name, f'must be finite, got {value!r}')

        if self.variant not in VARIANTS:
            raise ParameterError('variant', f'must be one of {VARIANTS}, got {self.variant!r}')
        if not _is_integer(self.harmonics) or self.harmonics < 1:
            raise ParameterError('harmonics', f'must be a positive integer, got {self.harmonics!r}')
        if self.variant == MINIMAL and self.harmonics != MINIMAL_HARMONICS:
            raise ParameterError(
                'harmonics',
                f'minimal variant uses exactly {MINIMAL_HARMONICS} harmonics, got {self.harmonics}',
            )
        return self

    def check_ranges(self) -> 'Parameters':
        """Raise ParameterError if any field leaves its interactive range."""
        self.check_contract()
        for name, rng in PARAM_RANGES.items():
            value = getattr(self, name)
            if not rng.contains(value):
                raise ParameterError(name, f'{value} outside valid range {rng.describe()}')
        return self


def check_run_length(steps: Any, dt: Any) -> None:
    """Validate step count and time step against the integrator contract."""
    if not _is_integer(steps):
        raise ParameterError('steps', f'must be an integer, got {steps!r}')
    if steps < 1 or steps > MAX_STEPS:
        raise ParameterError('steps', f'must be between 1 and {MAX_STEPS}, got {steps}')
    if not _is_number(dt) or not math.isfinite(dt):
        raise ParameterError('dt', f'must be a finite number, got {dt!r}')
    if dt <= 0 or dt > MAX_DT:
        raise ParameterError('dt', f'must be in (0, {MAX_DT}], got {dt}')


def validate_param(name: str, value: Any) -> None:
    """Check a single named value against PARAM_RANGES."""
    rng = PARAM_RANGES.get(name)
    if rng is None:
        raise ParameterError(name, 'unknown parameter')
    if not _is_number(value) or math.isnan(value):
        raise ParameterError(name, f'must be a number, got {value!r}')
    if name == 'steps' and not _is_integer(value):
        raise ParameterError(name, f'must be an integer, got {value!r}')
    if not rng.contains(value):
        raise ParameterError(name, f'must be within {rng.describe()}, got {value}')
