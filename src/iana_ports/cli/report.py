"""Output formatters for service listings: aligned table and JSON."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from iana_ports.models import Service

_HEADER = ["Service", "Port", "Protocol"]
_WIDTHS = [32, 6, 8]


def _row(cols: list[str], widths: list[int]) -> str:
    return "  ".join(c.ljust(w) for c, w in zip(cols, widths)).rstrip()


def _protocol(service: Service) -> str:
    return service.transport_protocol.value if service.transport_protocol else "-"


def format_table(services: Iterable[Service]) -> str:
    lines = [_row(_HEADER, _WIDTHS), "-" * 50]
    count = 0
    for s in services:
        lines.append(_row([s.name[:32], str(s.port), _protocol(s)], _WIDTHS))
        count += 1
    lines.append("-" * 50)
    lines.append(f"{count} service{'s' if count != 1 else ''}")
    return "\n".join(lines)


def _service_to_dict(s: Service) -> dict[str, Any]:
    return {
        "name": s.name,
        "port": s.port,
        "transport_protocol": s.transport_protocol.value if s.transport_protocol else None,
    }


def format_json(services: Iterable[Service]) -> str:
    payload = [_service_to_dict(s) for s in services]
    return json.dumps(payload, indent=2)
