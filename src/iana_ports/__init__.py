"""IANA service names and transport protocol port numbers.

Compiles the IANA service-name/port-number registry into a frozen,
perfect-hash-indexed structure.  Only system services (port < 1024) are
considered.

Public API::

    import iana_ports

    for service in iana_ports.by_port(22):
        print(service.name, service.transport_protocol)

    from iana_ports import RegistryConfig, compile_registry
    registry = compile_registry(RegistryConfig(source=Path("registry.csv")))
"""

from iana_ports.config import RegistryConfig
from iana_ports.errors import (
    PerfectHashError,
    RegistryError,
    SchemaViolationError,
    SourceUnavailableError,
)
from iana_ports.loader import (
    clear_default_registry,
    compile_registry,
    default_registry,
    load_registry,
)
from iana_ports.models import Service, TransportProtocol
from iana_ports.query import ServiceIter
from iana_ports.registry import ServiceRegistry


def iter_services() -> ServiceIter:
    """Iterate over all system services."""
    return default_registry().iter_all()


def by_port(port: int) -> ServiceIter:
    """Iterate over all system services that use ``port``."""
    return default_registry().by_port(port)


def by_name(name: str) -> ServiceIter:
    """Iterate over all system services named exactly ``name``."""
    return default_registry().by_name(name)


__all__ = [
    "PerfectHashError",
    "RegistryConfig",
    "RegistryError",
    "SchemaViolationError",
    "Service",
    "ServiceIter",
    "ServiceRegistry",
    "SourceUnavailableError",
    "TransportProtocol",
    "by_name",
    "by_port",
    "clear_default_registry",
    "compile_registry",
    "default_registry",
    "iter_services",
    "load_registry",
]
__version__ = "0.1.0"
