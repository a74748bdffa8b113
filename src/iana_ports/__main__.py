"""CLI entry point: python -m iana_ports <command>."""

from __future__ import annotations

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="iana-ports",
        description="Query the IANA system service registry",
    )
    parser.add_argument(
        "--source", default="", help="Registry CSV/YAML (default: bundled data or $IANA_PORTS_SOURCE)",
    )
    parser.add_argument(
        "--per-row-filter",
        action="store_true",
        default=False,
        help="Filter out-of-range ports row by row instead of stopping at the first",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False)
    sub = parser.add_subparsers(dest="command")

    lk = sub.add_parser("lookup", help="Find services by port or name")
    group = lk.add_mutually_exclusive_group(required=True)
    group.add_argument("--port", type=int, help="System port number (0-1023)")
    group.add_argument("--name", help="Exact, case-sensitive service name")
    lk.add_argument("--json", action="store_true", default=False, help="Output as JSON")
    lk.add_argument("--reverse", action="store_true", default=False, help="Reverse source order")

    ls = sub.add_parser("list", help="List every compiled service")
    ls.add_argument("--json", action="store_true", default=False, help="Output as JSON")
    ls.add_argument("--reverse", action="store_true", default=False, help="Reverse source order")

    bd = sub.add_parser("build", help="Compile the registry into a Python module")
    bd.add_argument("--output", required=True, help="Path of the module to write")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command in ("lookup", "list"):
        from iana_ports.cli.query import run_query
        run_query(args)
    elif args.command == "build":
        from iana_ports.cli.build import run_build
        run_build(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
