"""Frozen service registry: canonical array plus perfect-hash indices.

The registry holds three structures:
  - services: the canonical tuple, sole owner of every Service
  - port_index: perfect-hash map from port to a tuple of positions
  - name_index: perfect-hash map from exact name to a tuple of positions

Indices never hold Service objects, only positions into ``services``.
There is no mutation path; a registry is produced once by the emitter
and shared freely between readers.
"""

from __future__ import annotations

from dataclasses import dataclass

from iana_ports.models import Service
from iana_ports.phf import PerfectHashMap
from iana_ports.query import ServiceIter

EMPTY_POSITIONS: tuple[int, ...] = ()


@dataclass(frozen=True)
class ServiceRegistry:
    """Immutable, queryable index of system services."""

    services: tuple[Service, ...]
    port_index: PerfectHashMap[int, tuple[int, ...]]
    name_index: PerfectHashMap[str, tuple[int, ...]]

    def lookup_by_port(self, port: int) -> tuple[int, ...] | None:
        """Bucket of canonical positions for ``port``, or None if absent."""
        return self.port_index.get(port)

    def lookup_by_name(self, name: str) -> tuple[int, ...] | None:
        """Bucket of canonical positions for ``name``, or None if absent."""
        return self.name_index.get(name)

    def iter_all(self) -> ServiceIter:
        """Iterate over all services in source order."""
        return ServiceIter(self.services, range(len(self.services)))

    def by_port(self, port: int) -> ServiceIter:
        """Iterate over all services that use ``port``."""
        return ServiceIter(self.services, self.lookup_by_port(port) or EMPTY_POSITIONS)

    def by_name(self, name: str) -> ServiceIter:
        """Iterate over all services named exactly ``name``."""
        return ServiceIter(self.services, self.lookup_by_name(name) or EMPTY_POSITIONS)

    def ports(self) -> list[int]:
        return sorted(self.port_index)

    def names(self) -> list[str]:
        return sorted(self.name_index)

    def __len__(self) -> int:
        return len(self.services)
