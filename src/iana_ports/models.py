"""Pydantic models for registry rows and compiled service records."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

SYSTEM_PORT_LIMIT = 1024
MAX_PORT = 65535

SERVICE_NAME_COLUMN = "Service Name"
PORT_NUMBER_COLUMN = "Port Number"
TRANSPORT_PROTOCOL_COLUMN = "Transport Protocol"

# Unsigned decimal, optional leading "+", no surrounding whitespace.
# Leading zeros aside, more than five digits can never fit in 16 bits.
_PORT_RE = re.compile(r"\+?0*[0-9]{1,5}")


class TransportProtocol(str, Enum):
    UDP = "udp"
    TCP = "tcp"
    SCTP = "sctp"
    DCCP = "dccp"


class Service(BaseModel):
    """A network service using a system port, with a given name."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    port: int = Field(ge=0, lt=SYSTEM_PORT_LIMIT)
    transport_protocol: TransportProtocol | None = None

    def __str__(self) -> str:
        if self.transport_protocol is None:
            return f"{self.name}/{self.port}"
        return f"{self.name}/{self.port}/{self.transport_protocol.value}"


def parse_port(value: str) -> int | None:
    """Parse a registry port cell. Returns None for ranges, blanks and junk."""
    if not _PORT_RE.fullmatch(value):
        return None
    port = int(value.lstrip("+").lstrip("0") or "0")
    if port > MAX_PORT:
        return None
    return port


class ServiceRow(BaseModel):
    """One raw row of the service-name/port-number registry.

    Only the three columns the index needs are modelled; the registry's
    other columns (Description, Assignee, Reference, ...) are ignored.
    The protocol cell is validated strictly: an unknown token means the
    upstream format changed and must not be silently dropped.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    service_name: str = Field(alias=SERVICE_NAME_COLUMN)
    port_number: str = Field(alias=PORT_NUMBER_COLUMN)
    transport_protocol: TransportProtocol | None = Field(
        default=None, alias=TRANSPORT_PROTOCOL_COLUMN,
    )

    @field_validator("service_name", mode="before")
    @classmethod
    def coerce_name(cls, value: Any) -> Any:
        if value is None:
            return ""
        # YAML sources yield numbers and booleans for bare scalars
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("port_number", mode="before")
    @classmethod
    def coerce_port(cls, value: Any) -> str:
        # anything that is not text becomes a cell parse_port rejects or reads
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("transport_protocol", mode="before")
    @classmethod
    def empty_protocol_is_none(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return value

    @property
    def port(self) -> int | None:
        return parse_port(self.port_number)

    def is_noise(self) -> bool:
        """True for rows the registry uses as headers, ranges or reservations."""
        return not self.service_name or self.port is None

    def to_service(self) -> Service:
        """Build the compiled record. Call only for non-noise system-port rows."""
        return Service(
            name=self.service_name,
            port=self.port,
            transport_protocol=self.transport_protocol,
        )
