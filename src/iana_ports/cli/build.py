"""CLI handler for ``iana-ports build``."""

from __future__ import annotations

import sys
from argparse import Namespace

from iana_ports.cli.query import load_from_args
from iana_ports.emitter import write_module


def run_build(args: Namespace) -> None:
    registry = load_from_args(args)
    try:
        path = write_module(registry, args.output)
    except OSError as exc:
        print(f"Error: could not write {args.output}: {exc}", file=sys.stderr)
        sys.exit(1)
    print(
        f"Wrote {len(registry)} services "
        f"({len(registry.port_index)} ports, {len(registry.name_index)} names) to {path}"
    )
