from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from helloapp.config import DEFAULT_PORT

USAGE_EXIT_CODE = 1


class _UsageParser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit with status 1 instead of 2."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(USAGE_EXIT_CODE, f"{self.prog}: error: {message}\n")


def parse_port(value: str) -> int:
    """Parse a TCP port given as plain ASCII decimal digits, in 0..65535."""
    digits = value[1:] if value.startswith("-") else value
    if not (digits.isascii() and digits.isdigit()):
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    port = int(value, 10)
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the self-test harness."""
    parser = _UsageParser(
        prog="http-selftest",
        description="Serve hello world locally and hit it with randomized GETs",
    )
    parser.add_argument("port", nargs="?", type=parse_port, default=DEFAULT_PORT)
    return parser.parse_args(argv)
