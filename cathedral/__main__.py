"""
Cathedral — one command, four modes.

    cathedral run                                   Default spiral (50 harmonics)
    cathedral run --preset "Harmonic Resonance"     Run a preset
    cathedral run --param omega=2.5 --steps 5000    Override single values
    cathedral run --variant minimal --harmonics 6   Six-harmonic reduced system
    cathedral presets                               List presets
    cathedral validate                              Check every preset end to end
    cathedral primes --limit 1000                   Prime density report
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from spiral.params import VARIANTS

INT_PARAMS = ('steps', 'harmonics')


def _key_value(text: str) -> Tuple[str, float]:
    """Parse NAME=VALUE for --param."""
    name, sep, raw = text.partition('=')
    name = name.strip()
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{text}'")
    try:
        value = int(raw) if name in INT_PARAMS else float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{raw}' is not a number for {name}")
    return name, value


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cathedral',
        description='Integrate the Silent Spiral and project it to 3D.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  cathedral run --preset "Gentle Waves"
  cathedral run --param omega=2.5 --param delta=0.03 --json
  cathedral validate --steps 2000
""",
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--quiet', '-q', action='store_true', help='Errors only')
    subparsers = parser.add_subparsers(dest='command', required=True)

    run_parser = subparsers.add_parser('run', help='Integrate, project and analyse one spiral')
    run_parser.add_argument('--preset', help='Start from a named preset (default: defaults)')
    run_parser.add_argument('--param', dest='params', action='append', type=_key_value,
                            default=[], metavar='NAME=VALUE',
                            help='Override one parameter (repeatable)')
    run_parser.add_argument('--steps', type=int, default=None, help='Number of Euler steps')
    run_parser.add_argument('--dt', type=float, default=None, help='Time step')
    run_parser.add_argument('--harmonics', type=int, default=None,
                            help='Number of harmonic oscillators (default: 50)')
    run_parser.add_argument('--variant', choices=VARIANTS, default=None,
                            help='Equation set (default: extended)')
    run_parser.add_argument('--json', action='store_true', help='Print the summary as JSON')

    subparsers.add_parser('presets', help='List built-in presets')

    validate_parser = subparsers.add_parser('validate', help='Validate every preset')
    validate_parser.add_argument('--steps', type=int, default=1000,
                                 help='Steps per validation run (default: 1000)')

    primes_parser = subparsers.add_parser('primes', help='Prime density report')
    primes_parser.add_argument('--limit', type=int, default=1000,
                               help='Largest integer considered (default: 1000)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    from cathedral import cli

    if args.command == 'run':
        return cli.run(
            preset=args.preset,
            overrides=dict(args.params),
            steps=args.steps,
            dt=args.dt,
            harmonics=args.harmonics,
            variant=args.variant,
            as_json=args.json,
        )
    if args.command == 'presets':
        return cli.presets()
    if args.command == 'validate':
        return cli.validate(args.steps)
    if args.command == 'primes':
        return cli.primes(args.limit)
    return 2


if __name__ == "__main__":
    sys.exit(main())
