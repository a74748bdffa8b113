"""CLI handler for ``iana-ports lookup`` and ``iana-ports list``."""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path

from iana_ports.cli.report import format_json, format_table
from iana_ports.config import RegistryConfig
from iana_ports.errors import RegistryError
from iana_ports.loader import compile_registry, default_registry
from iana_ports.registry import ServiceRegistry
from iana_ports.telemetry import LoggerTelemetrySink


def config_from_args(args: Namespace) -> RegistryConfig | None:
    """Explicit CLI options, or None to fall back to the environment."""
    if not args.source and not args.per_row_filter:
        return None
    env = RegistryConfig.from_env()
    return RegistryConfig(
        source=Path(args.source) if args.source else env.source,
        stop_at_first_out_of_range=not args.per_row_filter,
    )


def load_from_args(args: Namespace) -> ServiceRegistry:
    config = config_from_args(args)
    try:
        if config is None:
            return default_registry()
        # -v reports the compile events of an explicit source too
        telemetry = LoggerTelemetrySink() if args.verbose else None
        return compile_registry(config, telemetry=telemetry)
    except RegistryError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


def run_query(args: Namespace) -> None:
    registry = load_from_args(args)

    if args.command == "list":
        services = registry.iter_all()
    elif args.port is not None:
        services = registry.by_port(args.port)
    else:
        services = registry.by_name(args.name)

    if args.command == "lookup" and len(services) == 0:
        key = f"port {args.port}" if args.port is not None else f"name {args.name!r}"
        print(f"No system service registered for {key}.", file=sys.stderr)
        sys.exit(1)

    if args.reverse:
        services = reversed(services)

    if args.json:
        print(format_json(services))
    else:
        print(format_table(services))
