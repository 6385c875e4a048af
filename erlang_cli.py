"""Command line front end for the Erlang B calculator.

Usage:
    python erlang_cli.py --v 3 --a 0.65
    python erlang_cli.py --a 10 --b 0.01 --v-max 500
"""

import argparse
import logging
import sys
from dataclasses import replace

from erlang_calculator import solve
from erlangb.errors import ErlangError
from erlangb.settings import SolverSettings

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Derive the missing two of v, a, B, m under the Erlang B model"
    )
    parser.add_argument("--v", type=int, default=None, help="number of channels")
    parser.add_argument("--a", type=float, default=None, help="offered traffic in erlangs")
    parser.add_argument("--b", type=float, default=None, help="blocking probability")
    parser.add_argument("--m", type=float, default=None, help="mean busy channels")
    parser.add_argument("--v-max", type=int, default=None, help="upper bound of channel scans")
    parser.add_argument("--verbose", action="store_true", help="log solver steps")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    values = {tag: getattr(args, tag) for tag in ("v", "a", "b", "m")}
    known = [tag for tag, value in values.items() if value is not None]

    try:
        settings = SolverSettings.from_env()
        if args.v_max is not None:
            settings = replace(settings, v_max=args.v_max)
        result = solve(known, values, settings)
    except ErlangError as exc:
        logger.debug("calculation failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    shown = result.formatted()
    print(f"Channels (v):           {shown['channels']}")
    print(f"Traffic intensity (a):  {shown['traffic']}")
    print(f"Blocking (B):           {shown['blocking']}")
    print(f"Mean busy channels (m): {shown['occupancy']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
