"""Compile events for registry builds and the sinks that receive them.

The compiler reports two events:
  - registry.halted: the early exit fired (row number, port)
  - registry.compiled: the pass finished (service/port/name counts)

``default_registry()`` and the CLI's ``-v`` flag route them through
``LoggerTelemetrySink``; tests collect them with ``InMemoryTelemetrySink``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

REGISTRY_COMPILED = "registry.compiled"
REGISTRY_HALTED = "registry.halted"


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    timestamp_ms: float = field(default_factory=lambda: time.time() * 1000)

    def describe(self) -> str:
        """Attributes as sorted ``key=value`` pairs."""
        return " ".join(f"{k}={v}" for k, v in sorted(self.attributes.items()))


def compiled_event(
    *, services: int, ports: int, names: int, rows_read: int, rows_skipped: int,
) -> TelemetryEvent:
    return TelemetryEvent(
        name=REGISTRY_COMPILED,
        attributes={
            "services": services,
            "ports": ports,
            "names": names,
            "rows_read": rows_read,
            "rows_skipped": rows_skipped,
        },
    )


def halted_event(*, row: int, port: int) -> TelemetryEvent:
    return TelemetryEvent(name=REGISTRY_HALTED, attributes={"row": row, "port": port})


@runtime_checkable
class TelemetrySink(Protocol):
    def emit(self, event: TelemetryEvent) -> None: ...


class NoOpTelemetrySink:
    def emit(self, event: TelemetryEvent) -> None:
        _ = event


class InMemoryTelemetrySink:
    """Keeps every event; ``named()`` filters by event name."""

    def __init__(self) -> None:
        self.events: list[TelemetryEvent] = []

    def emit(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def named(self, name: str) -> list[TelemetryEvent]:
        return [e for e in self.events if e.name == name]


class LoggerTelemetrySink:
    """Writes events to ``iana_ports.telemetry``.

    The compile summary goes out at INFO and the early exit at DEBUG, so
    ``-v`` shows both. Records carry ``event_name`` and
    ``event_attributes`` for structured handlers.
    """

    levels: dict[str, int] = {
        REGISTRY_COMPILED: logging.INFO,
        REGISTRY_HALTED: logging.DEBUG,
    }

    def __init__(self, logger_name: str = "iana_ports.telemetry") -> None:
        self.logger = logging.getLogger(logger_name)

    def emit(self, event: TelemetryEvent) -> None:
        self.logger.log(
            self.levels.get(event.name, logging.INFO),
            "%s %s",
            event.name,
            event.describe(),
            extra={"event_name": event.name, "event_attributes": event.attributes},
        )
