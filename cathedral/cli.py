"""
Cathedral command implementations.

Each command prints its report and returns a process exit code.

    cathedral run --preset "Gentle Waves" --steps 5000
    cathedral run --param omega=2.5 --param delta=0.03 --json
    cathedral presets
    cathedral validate --steps 1000
    cathedral primes --limit 500
"""

import json
import logging
import sys
from typing import Dict, Any, List, Optional

from harmonics.primes import PrimeTable, analyze_prime_density
from spiral.params import ParameterError
from spiral.store import get_preset, list_presets

from cathedral.pipeline import PipelineError, run_pipeline
from cathedral.validate import VALID, validate_all_presets


logger = logging.getLogger(__name__)


def run(
    preset: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    steps: Optional[int] = None,
    dt: Optional[float] = None,
    harmonics: Optional[int] = None,
    variant: Optional[str] = None,
    as_json: bool = False,
) -> int:
    """Run one spiral and print its summary."""
    try:
        result = run_pipeline(
            preset=preset,
            overrides=overrides,
            steps=steps,
            dt=dt,
            harmonics=harmonics,
            variant=variant,
        )
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1
    except (ParameterError, PipelineError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    summary = result.summary()
    if as_json:
        print(json.dumps(summary, indent=2))
        return 0

    print(f"\n=== SPIRAL ({preset or 'defaults'}) ===")
    for key, value in summary.items():
        if isinstance(value, float):
            print(f"  {key:<22} {value:.6g}")
        else:
            print(f"  {key:<22} {value}")

    if result.stability['warnings']:
        print("\n  Stability warnings:")
        for warning in result.stability['warnings']:
            print(f"    - {warning}")

    if result.convergence and result.convergence['dominant_harmonics']:
        print("\n  Dominant harmonics:")
        for i, h in enumerate(result.convergence['dominant_harmonics'], 1):
            print(f"    {i:>2}. prime {h['prime']:<4} (index {h['index']}): "
                  f"rms = {h['rms']:.6f}, freq = {h['frequency']:.2f}")
    return 0


def presets() -> int:
    """List the built-in presets with their values."""
    for name in list_presets():
        values = get_preset(name)
        scalars = ', '.join(
            f"{k}={values[k]}" for k in ('alpha', 'beta', 'gamma', 'omega', 'eta', 'theta', 'delta')
        )
        print(f"{name}: {scalars}")
    return 0


def validate(steps: int) -> int:
    """Validate all presets; exit code 1 if any is INVALID."""
    report = validate_all_presets(steps=steps)

    print("\n=== PRESET VALIDATION ===")
    for r in report['results']:
        if r['status'] == VALID:
            perf = r['performance']
            print(f"  {r['status']:<8} {r['preset']:<22} "
                  f"{perf['points_generated']} points, {perf['projection_method']}, "
                  f"{perf['generation_time'] * 1000:.1f}ms")
            for warning in r['warnings']:
                print(f"             warning: {warning}")
        else:
            print(f"  {r['status']:<8} {r['preset']:<22} {r['error']}")

    print(f"\n  Valid: {report['n_valid']}")
    print(f"  Invalid: {report['n_invalid']}")
    print(f"  Success Rate: {report['success_rate'] * 100:.1f}%")
    return 0 if report['all_valid'] else 1


def primes(limit: int) -> int:
    """Print prime density and category sizes up to limit."""
    density = analyze_prime_density(limit)
    table = PrimeTable(limit)

    print(f"\n=== PRIMES ≤ {limit} ===")
    print(f"  Total primes: {density['total_primes']}")
    print(f"  Average density: {density['average_density'] * 100:.2f}%")

    print("\n  Categories:")
    for category, members in table.categories().items():
        print(f"    {category:<12} {len(members)}")

    print("\n  Density by window:")
    rows: List[Dict[str, Any]] = density['density_windows']
    for row in rows:
        print(f"    {row['range']:<10} {row['count']:>3}  ({row['density'] * 100:.1f}%)")
    return 0
