"""Registry compiler: raw rows -> canonical service array + inverted buckets.

The compiler makes a single pass over the rows in source order:

  1. every row is validated against the registry schema (fatal on failure)
  2. header, range and reservation rows are skipped
  3. the first system-port overflow ends the pass (the registry is sorted
     by port), unless per-row filtering was requested
  4. surviving rows are appended to the canonical array and their position
     is appended to the port bucket and the name bucket

Nothing is deduplicated: identical rows become distinct positions that
share buckets.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from iana_ports.errors import SchemaViolationError
from iana_ports.models import SYSTEM_PORT_LIMIT, Service, ServiceRow
from iana_ports.telemetry import (
    NoOpTelemetrySink,
    TelemetrySink,
    compiled_event,
    halted_event,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistryBuild:
    """Intermediate compiler output, consumed once by the emitter."""

    services: list[Service] = field(default_factory=list)
    by_port: dict[int, list[int]] = field(default_factory=dict)
    by_name: dict[str, list[int]] = field(default_factory=dict)
    rows_read: int = 0
    rows_skipped: int = 0
    halted_at_port: int | None = None

    def append(self, service: Service) -> int:
        position = len(self.services)
        self.services.append(service)
        self.by_port.setdefault(service.port, []).append(position)
        self.by_name.setdefault(service.name, []).append(position)
        return position


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "row"
        parts.append(f"{loc}: {err.get('msg', 'invalid')} (got {err.get('input')!r})")
    return "; ".join(parts)


def validate_row(row: Mapping[str, Any], row_number: int) -> ServiceRow:
    """Validate one raw row. Raises SchemaViolationError on schema drift."""
    try:
        return ServiceRow.model_validate(row)
    except ValidationError as exc:
        raise SchemaViolationError(_describe_errors(exc), row_number=row_number) from exc


def compile_rows(
    rows: Iterable[Mapping[str, Any]],
    *,
    stop_at_first_out_of_range: bool = True,
    telemetry: TelemetrySink | None = None,
) -> RegistryBuild:
    """Compile registry rows into a RegistryBuild.

    Raises SchemaViolationError if any row read before the early exit has
    an unrecognised transport protocol or lacks a required column.
    """
    sink = telemetry or NoOpTelemetrySink()
    build = RegistryBuild()

    for row_number, raw in enumerate(rows, start=1):
        build.rows_read = row_number
        row = validate_row(raw, row_number)

        if row.is_noise():
            build.rows_skipped += 1
            logger.debug(
                "Skipping row %d: name=%r port=%r",
                row_number, row.service_name, row.port_number,
            )
            continue

        port = row.port
        if port >= SYSTEM_PORT_LIMIT:
            if stop_at_first_out_of_range:
                build.halted_at_port = port
                sink.emit(halted_event(row=row_number, port=port))
                break
            build.rows_skipped += 1
            continue

        build.append(row.to_service())

    sink.emit(compiled_event(
        services=len(build.services),
        ports=len(build.by_port),
        names=len(build.by_name),
        rows_read=build.rows_read,
        rows_skipped=build.rows_skipped,
    ))
    return build
