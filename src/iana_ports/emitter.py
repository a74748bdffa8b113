"""Index emitter: freeze a RegistryBuild into a ServiceRegistry.

Two outputs are supported:

- ``emit_registry`` builds the perfect-hash indices in memory, for
  programs that compile the registry once at start-up.
- ``render_module`` / ``write_module`` write an emitted registry out as a
  Python module of literals (canonical tuple plus the perfect-hash
  parameters), so a build step can do the work ahead of time and
  ``load_module`` only has to import the result.
"""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from typing import Any

from iana_ports.compiler import RegistryBuild
from iana_ports.errors import RegistryError, SourceUnavailableError
from iana_ports.models import Service
from iana_ports.phf import PerfectHashMap
from iana_ports.registry import ServiceRegistry

logger = logging.getLogger(__name__)

_GENERATED_HEADER = "# Generated by iana_ports.emitter. Do not edit."
_DISPLACEMENTS_PER_LINE = 8


def _freeze(buckets: dict[Any, list[int]]) -> dict[Any, tuple[int, ...]]:
    return {key: tuple(positions) for key, positions in buckets.items()}


def emit_registry(build: RegistryBuild) -> ServiceRegistry:
    """Convert compiler output into an immutable, perfect-hash-indexed registry."""
    services = tuple(build.services)
    port_index = PerfectHashMap.from_mapping(_freeze(build.by_port))
    name_index = PerfectHashMap.from_mapping(_freeze(build.by_name))
    logger.debug(
        "Emitted registry: %d services, port seed=%d, name seed=%d",
        len(services), port_index.seed, name_index.seed,
    )
    return ServiceRegistry(services=services, port_index=port_index, name_index=name_index)


def _render_service(service: Service) -> str:
    protocol = (
        "None" if service.transport_protocol is None
        else f"TransportProtocol.{service.transport_protocol.name}"
    )
    return (
        f"    Service(name={service.name!r}, port={service.port}, "
        f"transport_protocol={protocol}),"
    )


def _render_map(var_name: str, table: PerfectHashMap[Any, tuple[int, ...]]) -> list[str]:
    lines = [f"{var_name} = PerfectHashMap("]
    lines.append(f"    seed={table.seed},")
    lines.append("    displacements=(")
    disps = table.displacements
    for start in range(0, len(disps), _DISPLACEMENTS_PER_LINE):
        chunk = disps[start:start + _DISPLACEMENTS_PER_LINE]
        lines.append("        " + " ".join(f"({d1}, {d2})," for d1, d2 in chunk))
    lines.append("    ),")
    lines.append("    entries=(")
    for key, positions in table.entries:
        lines.append(f"        ({key!r}, {positions!r}),")
    lines.append("    ),")
    lines.append(")")
    return lines


def render_module(registry: ServiceRegistry) -> str:
    """Render ``registry`` as importable Python source."""
    lines = [
        _GENERATED_HEADER,
        "",
        "from iana_ports.models import Service, TransportProtocol",
        "from iana_ports.phf import PerfectHashMap",
        "",
        "SERVICES = (",
    ]
    lines.extend(_render_service(s) for s in registry.services)
    lines.append(")")
    lines.append("")
    lines.extend(_render_map("BY_PORT", registry.port_index))
    lines.append("")
    lines.extend(_render_map("BY_NAME", registry.name_index))
    lines.append("")
    return "\n".join(lines)


def write_module(registry: ServiceRegistry, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_module(registry), encoding="utf-8")
    logger.info("Wrote %d services to %s", len(registry), path)
    return path


def load_module(path: str | Path) -> ServiceRegistry:
    """Import a module written by ``write_module`` and wrap it in a registry."""
    path = Path(path)
    if not path.is_file():
        raise SourceUnavailableError(f"Generated registry module not found: {path}")

    spec = importlib.util.spec_from_file_location(f"_iana_ports_generated_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise SourceUnavailableError(f"Cannot import generated registry module: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    try:
        return ServiceRegistry(
            services=module.SERVICES,
            port_index=module.BY_PORT,
            name_index=module.BY_NAME,
        )
    except AttributeError as exc:
        raise RegistryError(f"Generated registry module is incomplete: {path}") from exc
