#!/usr/bin/env python3
"""
Look up a Brazilian postal code (CEP) using the fastest provider.

Usage:
    python cep_lookup.py 01153000
    python cep_lookup.py              # prompts for the CEP
    python cep_lookup.py 01153000 --timeout 2.5

Both providers are queried at the same time; whichever answers first within
the timeout is printed.
"""

import argparse
import sys
from typing import List, Optional

from cep_pipeline import (
    InvalidPostalCode,
    LookupKey,
    RaceOutcome,
    RacePipeline,
    Success,
)
from cep_pipeline.interfaces import DEFAULT_TIMEOUT_SECONDS


def positive_float(value: str) -> float:
    """argparse type for a strictly positive number of seconds."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value!r}")
    return seconds


def format_outcome(outcome: RaceOutcome) -> str:
    """Render a race outcome as the text shown to the user."""
    if isinstance(outcome, Success):
        address = outcome.address
        return (
            f"Fastest response came from {address.api}:\n"
            f"Street: {address.street}\n"
            f"Neighborhood: {address.neighborhood}\n"
            f"City: {address.city}\n"
            f"State: {address.state}"
        )
    return f"Error: response time exceeded. Timeout of {outcome.timeout_seconds:g} second(s)."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve a CEP by racing BrasilAPI and ViaCEP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python cep_lookup.py 01153000
    python cep_lookup.py 01153000 --timeout 2
        """
    )
    parser.add_argument('cep', nargs='?', help='8-digit CEP (prompted for when omitted)')
    parser.add_argument(
        '--timeout', '-t',
        type=positive_float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help=f'Deadline for the race in seconds (default: {DEFAULT_TIMEOUT_SECONDS:g})'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    raw = args.cep
    if raw is None:
        try:
            raw = input("Enter CEP: ")
        except EOFError:
            raw = ""

    try:
        key = LookupKey.parse(raw)
    except InvalidPostalCode:
        print("Invalid CEP!")
        return 1

    pipeline = RacePipeline(timeout=args.timeout)
    outcome = pipeline.lookup(key)
    print(format_outcome(outcome))
    return 0


if __name__ == "__main__":
    sys.exit(main())
