"""Registry loading: source file -> compiled, emitted ServiceRegistry."""

from __future__ import annotations

import functools
import logging
from pathlib import Path

from iana_ports.compiler import compile_rows
from iana_ports.config import RegistryConfig
from iana_ports.emitter import emit_registry
from iana_ports.registry import ServiceRegistry
from iana_ports.source import bundled_source, open_rows
from iana_ports.telemetry import LoggerTelemetrySink, TelemetrySink

logger = logging.getLogger(__name__)


def compile_registry(
    config: RegistryConfig | None = None,
    *,
    telemetry: TelemetrySink | None = None,
) -> ServiceRegistry:
    """Read, compile and emit a registry in one step.

    Raises SourceUnavailableError or SchemaViolationError; no partial
    registry is ever returned.
    """
    config = config or RegistryConfig()
    source = config.source or bundled_source()
    with open_rows(source) as rows:
        build = compile_rows(
            rows,
            stop_at_first_out_of_range=config.stop_at_first_out_of_range,
            telemetry=telemetry,
        )
    return emit_registry(build)


def load_registry(path: str | Path, *, stop_at_first_out_of_range: bool = True) -> ServiceRegistry:
    return compile_registry(
        RegistryConfig(source=Path(path), stop_at_first_out_of_range=stop_at_first_out_of_range)
    )


@functools.lru_cache(maxsize=1)
def default_registry() -> ServiceRegistry:
    """Process-wide registry, compiled on first use from env config or the bundled data."""
    config = RegistryConfig.from_env()
    if config.source is not None:
        logger.info("Compiling service registry from %s", config.source)
    return compile_registry(config, telemetry=LoggerTelemetrySink())


def clear_default_registry() -> None:
    default_registry.cache_clear()
